"""
Tests for the analysis merge engine.
"""
import copy

import pytest

from app.core.exceptions import MergeInputError
from app.schemas.analysis import AnalysisResult, MonthlySnapshot
from app.services.merge_service import (
    average_monthly_deposits, dedupe, is_blank, merge_monthly_data, merge_service
)


class TestMonthlyMerge:
    """Months are unioned, existing months win."""

    def test_overlapping_month_keeps_existing_entry(self, analysis_factory):
        existing = analysis_factory(months=('2024-01', '2024-02'), deposits=[1000.0, 2000.0])
        new = analysis_factory(months=('2024-02', '2024-03'), deposits=[9999.0, 3000.0])

        merged = merge_service.merge(existing, new)

        assert merged.months == ['2024-01', '2024-02', '2024-03']
        existing_february = AnalysisResult.model_validate(existing).monthly_data[1]
        assert merged.monthly_data[1] == existing_february
        assert merged.monthly_data[1].total_deposits == 2000.0

    def test_months_are_sorted_ascending(self, analysis_factory):
        existing = analysis_factory(months=('2024-05',))
        new = analysis_factory(months=('2023-12', '2024-01'))

        merged = merge_service.merge(existing, new)

        assert merged.months == ['2023-12', '2024-01', '2024-05']

    def test_inputs_are_not_mutated(self, analysis_factory):
        existing = analysis_factory(months=('2024-01',))
        new = analysis_factory(months=('2024-02',))
        existing_before = copy.deepcopy(existing)
        new_before = copy.deepcopy(new)

        merge_service.merge(existing, new)

        assert existing == existing_before
        assert new == new_before

    def test_merged_months_are_copies(self, analysis_factory):
        existing = AnalysisResult.model_validate(analysis_factory(months=('2024-01',)))
        new = analysis_factory(months=('2024-02',))

        merged = merge_service.merge(existing, new)
        merged.monthly_data[0].total_deposits = 1.0

        assert existing.monthly_data[0].total_deposits == 1000.0

    def test_month_repeated_in_new_batch_is_kept_once(self, analysis_factory):
        existing = analysis_factory(months=('2024-01',), deposits=[1000.0])
        new = analysis_factory(months=('2024-02', '2024-02'), deposits=[2000.0, 4000.0])

        merged = merge_service.merge(existing, new)

        assert merged.months == ['2024-01', '2024-02']
        assert merged.monthly_data[1].total_deposits == 2000.0
        assert merged.revenue_analysis.estimated_monthly_revenue == 1500.0

    def test_month_repeated_in_existing_analysis_is_kept_once(self, analysis_factory):
        existing = analysis_factory(months=('2024-01', '2024-01'), deposits=[1000.0, 5000.0])
        new = analysis_factory(months=('2024-02',), deposits=[2000.0])

        merged = merge_service.merge(existing, new)

        assert merged.months == ['2024-01', '2024-02']
        assert merged.monthly_data[0].total_deposits == 1000.0
        assert merged.revenue_analysis.estimated_monthly_revenue == 1500.0

    def test_helper_collapses_repeats_within_each_list(self):
        existing = [
            MonthlySnapshot(month='2024-03', total_deposits=3.0),
            MonthlySnapshot(month='2024-03', total_deposits=30.0),
        ]
        new = [
            MonthlySnapshot(month='2024-01', total_deposits=1.0),
            MonthlySnapshot(month='2024-01', total_deposits=10.0),
            MonthlySnapshot(month='2024-03', total_deposits=300.0),
        ]

        merged = merge_monthly_data(existing, new)

        assert [(s.month, s.total_deposits) for s in merged] == [('2024-01', 1.0), ('2024-03', 3.0)]


class TestRevenueRecompute:
    """Estimated revenue is the mean deposit over the merged months."""

    def test_mean_of_merged_deposits(self, analysis_factory):
        existing = analysis_factory(months=('2024-01', '2024-02'), deposits=[1000.0, 2000.0])
        new = analysis_factory(months=('2024-03',), deposits=[3000.0])

        merged = merge_service.merge(existing, new)

        assert merged.revenue_analysis.estimated_monthly_revenue == 2000.0

    def test_no_months_gives_zero(self, analysis_factory):
        existing = analysis_factory(months=(), deposits=[])
        new = analysis_factory(months=(), deposits=[])

        merged = merge_service.merge(existing, new)

        assert merged.monthly_data == []
        assert merged.revenue_analysis.estimated_monthly_revenue == 0

    def test_other_revenue_fields_come_from_new_batch(self, analysis_factory):
        existing = analysis_factory(months=('2024-01',))
        new = analysis_factory(months=('2024-02',))
        new['revenueAnalysis'].update({
            'revenueGrowthPercent': 12.5,
            'primaryRevenueSources': ['wire transfers'],
            'revenueConsistency': 'low',
        })

        merged = merge_service.merge(existing, new)

        assert merged.revenue_analysis.revenue_growth_percent == 12.5
        assert merged.revenue_analysis.primary_revenue_sources == ['wire transfers']
        assert merged.revenue_analysis.revenue_consistency == 'low'

    def test_average_helper_handles_empty_list(self):
        assert average_monthly_deposits([]) == 0.0


class TestRedFlagDedup:

    def test_duplicate_flag_keeps_first_occurrence(self, analysis_factory):
        existing = analysis_factory(redFlags=[
            {'type': 'NSF', 'description': 'x', 'severity': 'high'},
        ])
        new = analysis_factory(redFlags=[
            {'type': 'NSF', 'description': 'x', 'severity': 'low'},
            {'type': 'NSF', 'description': 'y'},
        ])

        merged = merge_service.merge(existing, new)

        assert [(f.type, f.description) for f in merged.red_flags] == [('NSF', 'x'), ('NSF', 'y')]
        assert merged.red_flags[0].severity == 'high'

    def test_flags_with_same_type_but_different_description_both_kept(self, analysis_factory):
        existing = analysis_factory(redFlags=[{'type': 'Overdraft', 'description': 'March'}])
        new = analysis_factory(redFlags=[{'type': 'Overdraft', 'description': 'April'}])

        merged = merge_service.merge(existing, new)

        assert len(merged.red_flags) == 2


class TestInsightDedup:

    def test_duplicate_title_keeps_existing_insight(self, analysis_factory):
        existing = analysis_factory(insights=[
            {'category': 'Revenue', 'title': 'Deposits growing', 'description': 'old text'},
        ])
        new = analysis_factory(insights=[
            {'category': 'Revenue', 'title': 'Deposits growing', 'description': 'new text'},
            {'category': 'Debt', 'title': 'MCA stacking', 'description': 'two lenders'},
        ])

        merged = merge_service.merge(existing, new)

        assert [i.title for i in merged.insights] == ['Deposits growing', 'MCA stacking']
        assert merged.insights[0].description == 'old text'


class TestIdentityFallback:

    @pytest.mark.parametrize('blank', ['', None, '   '])
    def test_blank_existing_name_takes_new_name(self, analysis_factory, blank):
        existing = analysis_factory(businessName=blank)
        new = analysis_factory(businessName='Acme LLC')

        merged = merge_service.merge(existing, new)

        assert merged.business_name == 'Acme LLC'

    @pytest.mark.parametrize('placeholder', ['Unknown', 'Business Name Not Found', 'N/A', ''])
    def test_known_name_is_not_overwritten(self, analysis_factory, placeholder):
        existing = analysis_factory(businessName='Acme LLC')
        new = analysis_factory(businessName=placeholder)

        merged = merge_service.merge(existing, new)

        assert merged.business_name == 'Acme LLC'

    def test_placeholder_existing_name_takes_new_name(self, analysis_factory):
        existing = analysis_factory(businessName='Business Name Not Found')
        new = analysis_factory(businessName='Acme LLC')

        merged = merge_service.merge(existing, new)

        assert merged.business_name == 'Acme LLC'

    def test_bank_and_account_follow_the_same_rule(self, analysis_factory):
        existing = analysis_factory(bankName=None, accountNumber='4321')
        new = analysis_factory(bankName='First Bank', accountNumber='9999')

        merged = merge_service.merge(existing, new)

        assert merged.bank_name == 'First Bank'
        assert merged.account_number == '4321'

    def test_is_blank(self):
        assert is_blank(None)
        assert is_blank('')
        assert is_blank(' unknown ')
        assert not is_blank('Acme LLC')


class TestPeriodBounds:

    def test_period_spans_first_and_last_merged_month(self, analysis_factory):
        existing = analysis_factory(months=('2024-02',))
        new = analysis_factory(months=('2024-01', '2024-03'))

        merged = merge_service.merge(existing, new)

        assert merged.period_covered.start == '2024-01'
        assert merged.period_covered.end == '2024-03'

    def test_no_months_falls_back_to_input_periods(self, analysis_factory):
        existing = analysis_factory(months=(), deposits=[], periodCovered={'start': '2023-06-01', 'end': '2023-06-30'})
        new = analysis_factory(months=(), deposits=[], periodCovered={'start': '2024-01-01', 'end': '2024-01-31'})

        merged = merge_service.merge(existing, new)

        assert merged.period_covered.start == '2023-06-01'
        assert merged.period_covered.end == '2024-01-31'


class TestFullOverlap:
    """Re-submitting months already in the report."""

    def test_monthly_data_period_and_revenue_unchanged(self, analysis_factory):
        existing = analysis_factory(
            months=('2024-01', '2024-02', '2024-03'),
            deposits=[1000.0, 2000.0, 3000.0],
        )
        new = analysis_factory(months=('2024-02', '2024-03'), deposits=[50.0, 60.0])
        before = AnalysisResult.model_validate(existing)

        merged = merge_service.merge(existing, new)

        assert merged.monthly_data == before.monthly_data
        assert merged.period_covered == before.period_covered
        assert merged.revenue_analysis.estimated_monthly_revenue == before.revenue_analysis.estimated_monthly_revenue

    def test_point_in_time_sections_are_replaced(self, analysis_factory):
        existing = analysis_factory(months=('2024-01',))
        new = analysis_factory(months=('2024-01',), summary='Newest view')
        new['fundabilityAssessment']['score'] = 88
        new['cashFlowHealth']['rating'] = 'Excellent'
        new['expenseAnalysis']['largestExpenseCategory'] = 'rent'
        new['debtObligations']['identifiedMCAPositions'] = []

        merged = merge_service.merge(existing, new)

        assert merged.summary == 'Newest view'
        assert merged.fundability_assessment.score == 88
        assert merged.cash_flow_health.rating == 'Excellent'
        assert merged.expense_analysis.largest_expense_category == 'rent'
        assert merged.debt_obligations.identified_mca_positions == []

    def test_merging_twice_is_stable(self, analysis_factory):
        existing = analysis_factory(
            months=('2024-01', '2024-02'),
            redFlags=[{'type': 'NSF', 'description': 'x'}],
            insights=[{'title': 'Deposits growing'}],
        )
        new = analysis_factory(
            months=('2024-02',),
            redFlags=[{'type': 'NSF', 'description': 'x'}],
            insights=[{'title': 'Deposits growing'}],
        )

        once = merge_service.merge(existing, new)
        twice = merge_service.merge(once, new)

        assert twice == once


class TestMergeInput:

    def test_existing_missing_section_is_rejected(self, analysis_factory):
        existing = analysis_factory()
        del existing['cashFlowHealth']

        with pytest.raises(MergeInputError) as exc_info:
            merge_service.merge(existing, analysis_factory())

        assert exc_info.value.details['role'] == 'existing'

    def test_malformed_new_analysis_is_rejected(self, analysis_factory):
        new = analysis_factory()
        new['monthlyData'][0]['month'] = 'January'

        with pytest.raises(MergeInputError) as exc_info:
            merge_service.merge(analysis_factory(), new)

        assert exc_info.value.details['role'] == 'new'

    def test_non_mapping_is_rejected(self, analysis_factory):
        with pytest.raises(MergeInputError):
            merge_service.merge(['not', 'an', 'analysis'], analysis_factory())

    def test_null_amounts_are_accepted_as_zero(self, analysis_factory):
        new = analysis_factory(months=('2024-02',))
        new['monthlyData'][0]['totalDeposits'] = None

        merged = merge_service.merge(analysis_factory(months=('2024-01',)), new)

        assert merged.monthly_data[1].total_deposits == 0


class TestSerialisation:

    def test_output_keeps_camel_case_shape(self, analysis_factory):
        merged = merge_service.merge(analysis_factory(), analysis_factory(months=('2024-02',)))
        data = merged.to_json_dict()

        assert 'monthlyData' in data
        assert 'identifiedMCAPositions' in data['debtObligations']
        assert data['monthlyData'][0]['averageDailyBalance'] == 600.0
        assert set(data) == set(analysis_factory())


class TestAnalysisMonths:
    """Monthly data is unique per month and ordered on every validation."""

    def test_unsorted_repeated_months_are_normalised(self, analysis_factory):
        payload = analysis_factory(
            months=('2024-03', '2024-01', '2024-03'),
            deposits=[3000.0, 1000.0, 9999.0],
        )

        analysis = AnalysisResult.model_validate(payload)

        assert analysis.months == ['2024-01', '2024-03']
        assert analysis.monthly_data[1].total_deposits == 3000.0

    def test_assignment_is_normalised(self, analysis_factory):
        analysis = AnalysisResult.model_validate(analysis_factory(months=('2024-01',)))

        analysis.monthly_data = [
            MonthlySnapshot(month='2024-02'),
            MonthlySnapshot(month='2024-01'),
            MonthlySnapshot(month='2024-02', total_deposits=5.0),
        ]

        assert analysis.months == ['2024-01', '2024-02']
        assert analysis.monthly_data[1].total_deposits == 0.0


def test_dedupe_preserves_order():
    assert dedupe([3, 1, 3, 2, 1], key=lambda x: x) == [3, 1, 2]
