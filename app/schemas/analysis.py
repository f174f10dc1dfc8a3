"""Analysis schemas

``AnalysisResult`` is the unit of business-financial analysis for one
merchant. It is what the extraction model returns, what the merge engine
combines, and what a report stores as its JSON blob. Attributes are
snake_case; serialisation must always use ``by_alias=True`` so the stored and
returned JSON keeps the camelCase shape the dashboard consumes.
"""

import re
from typing import Dict, List, Optional
from pydantic import Field, field_validator
from app.schemas.base import BaseSchema

MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def _none_to_zero(v):
    return 0 if v is None else v


def _none_to_empty(v):
    return "" if v is None else v


class MonthlySnapshot(BaseSchema):
    """One calendar month of balance and flow figures"""
    month: str
    month_name: str = ""
    beginning_balance: float = 0.0
    ending_balance: float = 0.0
    total_deposits: float = 0.0
    total_withdrawals: float = 0.0
    negative_days: int = Field(default=0, ge=0)
    average_daily_balance: float = 0.0

    @field_validator("month")
    @classmethod
    def validate_month(cls, v: str) -> str:
        v = v.strip()
        if not MONTH_PATTERN.match(v):
            raise ValueError(f"month must be formatted YYYY-MM, got {v!r}")
        return v

    @field_validator(
        "beginning_balance", "ending_balance", "total_deposits",
        "total_withdrawals", "negative_days", "average_daily_balance",
        mode="before",
    )
    @classmethod
    def null_amounts_are_zero(cls, v):
        return _none_to_zero(v)

    @field_validator("month_name", mode="before")
    @classmethod
    def null_name_is_empty(cls, v):
        return _none_to_empty(v)


class PeriodCovered(BaseSchema):
    start: Optional[str] = None
    end: Optional[str] = None


class RevenueAnalysis(BaseSchema):
    estimated_monthly_revenue: float = 0.0
    revenue_growth_percent: float = 0.0
    primary_revenue_sources: List[str] = Field(default_factory=list)
    revenue_consistency: str = ""  # high / medium / low

    @field_validator("estimated_monthly_revenue", "revenue_growth_percent", mode="before")
    @classmethod
    def null_amounts_are_zero(cls, v):
        return _none_to_zero(v)


class ExpenseAnalysis(BaseSchema):
    categories: Dict[str, float] = Field(default_factory=dict)
    total_monthly_expenses: float = 0.0
    largest_expense_category: str = ""

    @field_validator("categories", mode="before")
    @classmethod
    def null_category_amounts_are_zero(cls, v):
        if isinstance(v, dict):
            return {k: _none_to_zero(amount) for k, amount in v.items()}
        return v

    @field_validator("total_monthly_expenses", mode="before")
    @classmethod
    def null_amounts_are_zero(cls, v):
        return _none_to_zero(v)


class MCAPosition(BaseSchema):
    """A recurring daily-debit financing position"""
    lender: str
    estimated_daily_payment: float = 0.0
    status: str = ""  # active / suspected

    @field_validator("estimated_daily_payment", mode="before")
    @classmethod
    def null_amounts_are_zero(cls, v):
        return _none_to_zero(v)


class DebtObligations(BaseSchema):
    identified_mca_positions: List[MCAPosition] = Field(
        default_factory=list, alias="identifiedMCAPositions"
    )
    total_daily_debt_payments: float = 0.0
    estimated_monthly_debt_service: float = 0.0

    @field_validator("total_daily_debt_payments", "estimated_monthly_debt_service", mode="before")
    @classmethod
    def null_amounts_are_zero(cls, v):
        return _none_to_zero(v)


class CashFlowHealth(BaseSchema):
    score: float = Field(ge=0, le=100)
    rating: str = ""
    overdraft_frequency: str = ""  # none / rare / occasional / frequent
    total_overdraft_fees: float = 0.0
    cash_flow_timing: str = ""  # healthy / tight / strained

    @field_validator("total_overdraft_fees", mode="before")
    @classmethod
    def null_amounts_are_zero(cls, v):
        return _none_to_zero(v)


class FundabilityAssessment(BaseSchema):
    score: float = Field(ge=0, le=100)
    rating: str = ""
    estimated_funding_capacity: float = 0.0
    recommended_products: List[str] = Field(default_factory=list)
    strengths: List[str] = Field(default_factory=list)
    concerns: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)

    @field_validator("estimated_funding_capacity", mode="before")
    @classmethod
    def null_amounts_are_zero(cls, v):
        return _none_to_zero(v)


class RedFlag(BaseSchema):
    type: str
    description: str
    severity: str = "medium"  # high / medium / low
    amount: Optional[float] = None


class Insight(BaseSchema):
    category: str = ""
    title: str
    description: str = ""
    actionable: bool = False
    priority: str = "medium"  # high / medium / low


class AnalysisResult(BaseSchema):
    """Structured financial analysis of one business over one or more months"""
    business_name: Optional[str] = None
    account_number: Optional[str] = None  # last 4 digits
    bank_name: Optional[str] = None
    period_covered: PeriodCovered
    monthly_data: List[MonthlySnapshot] = Field(default_factory=list)
    revenue_analysis: RevenueAnalysis
    expense_analysis: ExpenseAnalysis
    debt_obligations: DebtObligations
    cash_flow_health: CashFlowHealth
    fundability_assessment: FundabilityAssessment
    red_flags: List[RedFlag] = Field(default_factory=list)
    insights: List[Insight] = Field(default_factory=list)
    summary: str = ""

    @field_validator("red_flags", "insights", "monthly_data", mode="before")
    @classmethod
    def null_lists_are_empty(cls, v):
        return [] if v is None else v

    @field_validator("monthly_data")
    @classmethod
    def unique_sorted_months(cls, v: List[MonthlySnapshot]) -> List[MonthlySnapshot]:
        """Keep the first entry of each month and order them by month"""
        by_month: Dict[str, MonthlySnapshot] = {}
        for snapshot in v:
            by_month.setdefault(snapshot.month, snapshot)
        return sorted(by_month.values(), key=lambda snapshot: snapshot.month)

    @field_validator("summary", mode="before")
    @classmethod
    def null_summary_is_empty(cls, v):
        return _none_to_empty(v)

    @property
    def months(self) -> List[str]:
        return [snapshot.month for snapshot in self.monthly_data]

    def to_json_dict(self) -> dict:
        """Lossless camelCase representation used for storage and responses"""
        return self.model_dump(mode="json", by_alias=True)
