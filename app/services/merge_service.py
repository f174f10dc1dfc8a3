"""Merge engine combining a stored analysis with a newly extracted one"""

from typing import Any, Callable, Hashable, Iterable, List, Mapping, Optional, TypeVar, Union
from pydantic import ValidationError as PydanticValidationError
from app.core.exceptions import MergeInputError
from app.core.logging import LoggerMixin
from app.schemas.analysis import (
    AnalysisResult, Insight, MonthlySnapshot, PeriodCovered, RedFlag, RevenueAnalysis
)

T = TypeVar("T")

# Values the extraction model uses when it could not read an identity field.
PLACEHOLDER_IDENTITY_VALUES = frozenset({
    "unknown",
    "n/a",
    "not found",
    "business name not found",
})

AnalysisInput = Union[AnalysisResult, Mapping[str, Any]]


def is_blank(value: Optional[str]) -> bool:
    """True for values that must never overwrite a known identity field"""
    if value is None:
        return True
    stripped = value.strip()
    return not stripped or stripped.lower() in PLACEHOLDER_IDENTITY_VALUES


def prefer_existing(existing: Optional[str], new: Optional[str]) -> Optional[str]:
    return new if is_blank(existing) else existing


def dedupe(items: Iterable[T], key: Callable[[T], Hashable]) -> List[T]:
    """Keep the first occurrence of every key, preserving order"""
    seen = set()
    unique = []
    for item in items:
        k = key(item)
        if k in seen:
            continue
        seen.add(k)
        unique.append(item)
    return unique


def merge_monthly_data(
    existing: List[MonthlySnapshot],
    new: List[MonthlySnapshot],
) -> List[MonthlySnapshot]:
    """One entry per month, first occurrence wins, sorted ascending.

    Existing entries come first, so they win over the new batch; a month
    repeated inside either list keeps its first entry. ``YYYY-MM`` is fixed
    width, so string order is chronological order.
    """
    merged = dedupe(list(existing) + list(new), key=lambda snapshot: snapshot.month)
    return sorted(merged, key=lambda snapshot: snapshot.month)


def average_monthly_deposits(monthly_data: List[MonthlySnapshot]) -> float:
    if not monthly_data:
        return 0.0
    return sum(s.total_deposits for s in monthly_data) / len(monthly_data)


def dedupe_red_flags(existing: List[RedFlag], new: List[RedFlag]) -> List[RedFlag]:
    return dedupe(list(existing) + list(new), key=lambda flag: (flag.type, flag.description))


def dedupe_insights(existing: List[Insight], new: List[Insight]) -> List[Insight]:
    return dedupe(list(existing) + list(new), key=lambda insight: insight.title)


class AnalysisMergeService(LoggerMixin):
    """Combines two analyses of the same business into one.

    The merge is pure. Callers must hold the report lock for the whole
    read-merge-write sequence (see ``ReportService.add_statements``).
    """

    def coerce(self, analysis: AnalysisInput, role: str) -> AnalysisResult:
        """Validate a raw mapping into an ``AnalysisResult``.

        Raises ``MergeInputError`` rather than merging a partially populated
        analysis.
        """
        if isinstance(analysis, AnalysisResult):
            return analysis
        if not isinstance(analysis, Mapping):
            raise MergeInputError(
                f"{role} analysis must be an object",
                details={"role": role, "type": type(analysis).__name__},
            )
        try:
            return AnalysisResult.model_validate(analysis)
        except PydanticValidationError as e:
            self.log_error(e, "coerce_analysis", role=role)
            raise MergeInputError(
                f"{role} analysis is malformed",
                details={"role": role, "errors": e.errors(include_url=False, include_context=False)},
            )

    def merge(self, existing: AnalysisInput, newly_extracted: AnalysisInput) -> AnalysisResult:
        existing = self.coerce(existing, "existing")
        newly_extracted = self.coerce(newly_extracted, "new")

        monthly_data = merge_monthly_data(existing.monthly_data, newly_extracted.monthly_data)

        period_covered = PeriodCovered(
            start=monthly_data[0].month if monthly_data else existing.period_covered.start,
            end=monthly_data[-1].month if monthly_data else newly_extracted.period_covered.end,
        )

        new_revenue = newly_extracted.revenue_analysis
        revenue_analysis = RevenueAnalysis(
            estimated_monthly_revenue=average_monthly_deposits(monthly_data),
            revenue_growth_percent=new_revenue.revenue_growth_percent,
            primary_revenue_sources=list(new_revenue.primary_revenue_sources),
            revenue_consistency=new_revenue.revenue_consistency,
        )

        # Expense, debt, cash flow and fundability are point-in-time judgements
        # of the newest batch and replace the stored ones as a whole.
        merged = AnalysisResult(
            business_name=prefer_existing(existing.business_name, newly_extracted.business_name),
            account_number=prefer_existing(existing.account_number, newly_extracted.account_number),
            bank_name=prefer_existing(existing.bank_name, newly_extracted.bank_name),
            period_covered=period_covered,
            monthly_data=[s.model_copy(deep=True) for s in monthly_data],
            revenue_analysis=revenue_analysis,
            expense_analysis=newly_extracted.expense_analysis.model_copy(deep=True),
            debt_obligations=newly_extracted.debt_obligations.model_copy(deep=True),
            cash_flow_health=newly_extracted.cash_flow_health.model_copy(deep=True),
            fundability_assessment=newly_extracted.fundability_assessment.model_copy(deep=True),
            red_flags=[f.model_copy() for f in dedupe_red_flags(existing.red_flags, newly_extracted.red_flags)],
            insights=[i.model_copy() for i in dedupe_insights(existing.insights, newly_extracted.insights)],
            summary=newly_extracted.summary,
        )

        self.log_operation(
            "merge_analysis",
            existing_months=len(existing.monthly_data),
            new_months=len(newly_extracted.monthly_data),
            merged_months=merged.months,
            red_flags=len(merged.red_flags),
            insights=len(merged.insights),
        )
        return merged


merge_service = AnalysisMergeService()
