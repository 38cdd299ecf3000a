"""Pydantic schemas for API request/response validation"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from oik_projection.config import settings
from oik_projection.domain.models import (
    AdvisoryNarrative,
    CurrentMonthSummary,
    MonthProjection,
    ProjectionDriver,
)


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProjectionRequest(CamelModel):
    """Request body for POST /v1/projection"""

    months: int = Field(default=settings.default_horizon_months, ge=0, description="Horizon length in months")
    include_ai_tips: bool = Field(default=True, description="Try the AI advisory generator")


class DriverSchema(CamelModel):
    type: str
    label: str
    amount: float
    category: Optional[str] = None

    @classmethod
    def from_domain(cls, driver: ProjectionDriver) -> "DriverSchema":
        return cls(type=driver.type, label=driver.label, amount=driver.amount, category=driver.category)


class MonthProjectionSchema(CamelModel):
    """One projected month"""

    month: str
    month_label: str
    income_projected: float
    recurring_income: float
    expense_projected: float
    recurring_expense: float
    fixed_recurring_total: float
    credit_card_installments: float
    fixed_commitment_total: float
    fixed_commitment_percentage: float
    projected_surplus: float
    variable_expense_estimate: float
    balance_projected: float
    drivers: List[DriverSchema]
    fixed_expenses: List[DriverSchema]
    installment_details: List[DriverSchema]

    @classmethod
    def from_domain(cls, p: MonthProjection) -> "MonthProjectionSchema":
        return cls(
            month=p.month,
            month_label=p.month_label,
            income_projected=p.income_projected,
            recurring_income=p.recurring_income,
            expense_projected=p.expense_projected,
            recurring_expense=p.recurring_expense,
            fixed_recurring_total=p.fixed_recurring_total,
            credit_card_installments=p.credit_card_installments,
            fixed_commitment_total=p.fixed_commitment_total,
            fixed_commitment_percentage=p.fixed_commitment_percentage,
            projected_surplus=p.projected_surplus,
            variable_expense_estimate=p.variable_expense_estimate,
            balance_projected=p.balance_projected,
            drivers=[DriverSchema.from_domain(d) for d in p.drivers],
            fixed_expenses=[DriverSchema.from_domain(d) for d in p.fixed_expenses],
            installment_details=[DriverSchema.from_domain(d) for d in p.installment_details],
        )


class CurrentMonthSummarySchema(CamelModel):
    """Flattened current month with alert level"""

    month: str
    month_label: str
    income_projected: float
    fixed_recurring_total: float
    credit_card_installments: float
    fixed_commitment_total: float
    fixed_commitment_percentage: float
    projected_surplus: float
    variable_expense_estimate: float
    balance_projected: float
    alert_level: str

    @classmethod
    def from_domain(cls, s: CurrentMonthSummary) -> "CurrentMonthSummarySchema":
        return cls(
            month=s.month,
            month_label=s.month_label,
            income_projected=s.income_projected,
            fixed_recurring_total=s.fixed_recurring_total,
            credit_card_installments=s.credit_card_installments,
            fixed_commitment_total=s.fixed_commitment_total,
            fixed_commitment_percentage=s.fixed_commitment_percentage,
            projected_surplus=s.projected_surplus,
            variable_expense_estimate=s.variable_expense_estimate,
            balance_projected=s.balance_projected,
            alert_level=s.alert_level,
        )


class AdvisoryNarrativeSchema(CamelModel):
    tips: List[str]
    alert: Optional[str] = None
    recommendation: str

    @classmethod
    def from_domain(cls, n: AdvisoryNarrative) -> "AdvisoryNarrativeSchema":
        return cls(tips=n.tips, alert=n.alert, recommendation=n.recommendation)


class ProjectionMetadata(CamelModel):
    generated_at: str
    months_projected: int
    historical_months: int
    accounting_regime: str


class ProjectionResponse(CamelModel):
    """Response for POST /v1/projection"""

    projections: List[MonthProjectionSchema]
    current_month_summary: Optional[CurrentMonthSummarySchema] = None
    ai_tips: Optional[AdvisoryNarrativeSchema] = None
    metadata: ProjectionMetadata


class ErrorResponse(BaseModel):
    error: str
