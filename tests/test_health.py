"""
Tests for health checks and application wiring.
"""


def test_health(client):
    response = client.get('/api/v1/health/')

    assert response.status_code == 200
    assert response.json()['status'] == 'healthy'
    assert 'X-Process-Time' in response.headers


def test_detailed_health_checks_database(client):
    response = client.get('/api/v1/health/detailed')

    assert response.status_code == 200
    assert response.json()['checks']['database']['status'] == 'healthy'


def test_root(client):
    response = client.get('/')

    assert response.status_code == 200
    assert response.json()['health'] == '/api/v1/health'


def test_detailed_health_reports_external_configuration(client):
    checks = client.get('/api/v1/health/detailed').json()['checks']

    assert checks['gemini']['status'] == 'configured'
    assert checks['file_storage']['status'] == 'configured'
