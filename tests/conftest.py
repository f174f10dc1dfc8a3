"""
Pytest configuration and fixtures for the statement analysis API tests.
"""
import os
import tempfile
import uuid

# Settings are read once at import time, so the environment must be complete
# before anything under app/ is imported.
_db_fd, _db_path = tempfile.mkstemp(suffix='.db')
os.environ['DATABASE_URL'] = f'sqlite:///{_db_path}'
os.environ['SECRET_KEY'] = 'test-secret-key'
os.environ['DEBUG'] = 'false'
os.environ['LOG_LEVEL'] = 'WARNING'
os.environ['ALLOWED_HOSTS'] = '*'
os.environ['CLOUDINARY_CLOUD_NAME'] = 'test-cloud'
os.environ['CLOUDINARY_API_KEY'] = 'test-key'
os.environ['CLOUDINARY_API_SECRET'] = 'test-secret'
os.environ['GEMINI_API_KEY'] = 'test-gemini-key'
os.environ.pop('SENTRY_DSN', None)

import pytest
from fastapi.testclient import TestClient


def pytest_sessionfinish(session, exitstatus):
    os.close(_db_fd)
    try:
        os.unlink(_db_path)
    except OSError:
        pass


@pytest.fixture(scope='session')
def app():
    """FastAPI application bound to the temporary database."""
    from main import app as fastapi_app
    from app.core.database import init_db

    init_db()
    return fastapi_app


@pytest.fixture
def client(app):
    """Test client; entering it runs the lifespan hook."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session(app):
    from app.core.database import SessionLocal

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user(db_session):
    """A merchant account created straight in the database."""
    from app.models.user import User

    account = User(
        email=f'merchant-{uuid.uuid4().hex[:8]}@example.com',
        hashed_password='not-a-real-hash',
        business_name='Acme LLC',
    )
    db_session.add(account)
    db_session.commit()
    db_session.refresh(account)
    return account


def _register(client):
    email = f'owner-{uuid.uuid4().hex[:8]}@example.com'
    response = client.post('/api/v1/auth/register', json={
        'email': email,
        'password': 'correct-horse-battery',
        'businessName': 'Acme LLC',
    })
    assert response.status_code == 201, response.text
    data = response.json()
    return {
        'id': data['user']['id'],
        'email': email,
        'headers': {'Authorization': f"Bearer {data['token']}"},
    }


@pytest.fixture
def account(client):
    """A registered user with a bearer token."""
    return _register(client)


@pytest.fixture
def other_account(client):
    return _register(client)


def build_snapshot(month, deposits=1000.0, **overrides):
    snapshot = {
        'month': month,
        'monthName': month,
        'beginningBalance': 500.0,
        'endingBalance': 750.0,
        'totalDeposits': deposits,
        'totalWithdrawals': deposits / 2,
        'negativeDays': 0,
        'averageDailyBalance': 600.0,
    }
    snapshot.update(overrides)
    return snapshot


def build_analysis(months=('2024-01',), deposits=None, **overrides):
    """Complete camelCase analysis payload as the extraction model returns it."""
    if deposits is None:
        deposits = [1000.0 * (i + 1) for i in range(len(months))]
    monthly_data = [build_snapshot(m, d) for m, d in zip(months, deposits)]
    average = sum(deposits) / len(deposits) if deposits else 0.0

    analysis = {
        'businessName': 'Acme LLC',
        'accountNumber': '4321',
        'bankName': 'First Bank',
        'periodCovered': {
            'start': months[0] if months else None,
            'end': months[-1] if months else None,
        },
        'monthlyData': monthly_data,
        'revenueAnalysis': {
            'estimatedMonthlyRevenue': average,
            'revenueGrowthPercent': 5.0,
            'primaryRevenueSources': ['credit card processing'],
            'revenueConsistency': 'high',
        },
        'expenseAnalysis': {
            'categories': {'payroll': 400.0, 'rent': 200.0},
            'totalMonthlyExpenses': 600.0,
            'largestExpenseCategory': 'payroll',
        },
        'debtObligations': {
            'identifiedMCAPositions': [
                {'lender': 'Fast Capital', 'estimatedDailyPayment': 50.0, 'status': 'active'},
            ],
            'totalDailyDebtPayments': 50.0,
            'estimatedMonthlyDebtService': 1100.0,
        },
        'cashFlowHealth': {
            'score': 70,
            'rating': 'Good',
            'overdraftFrequency': 'rare',
            'totalOverdraftFees': 35.0,
            'cashFlowTiming': 'healthy',
        },
        'fundabilityAssessment': {
            'score': 65,
            'rating': 'Fair',
            'estimatedFundingCapacity': 25000.0,
            'recommendedProducts': ['Revenue Based Financing'],
            'strengths': ['steady deposits'],
            'concerns': ['existing MCA position'],
            'recommendations': ['reduce overdrafts'],
        },
        'redFlags': [],
        'insights': [],
        'summary': 'Healthy deposits with one active MCA position.',
    }
    analysis.update(overrides)
    return analysis


@pytest.fixture
def analysis_factory():
    return build_analysis
