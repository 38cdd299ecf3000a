"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional


@dataclass
class Transaction:
    """Historical transaction, read only"""

    type: str  # "income" or "expense"
    amount: Decimal
    category_id: Optional[str]
    date: date


@dataclass
class RecurringDefinition:
    """Recurring income or expense stream"""

    description: str
    type: str  # "income" or "expense"
    amount: Decimal
    category_id: Optional[str]
    start_date: date
    end_date: Optional[date] = None
    subcategory_id: Optional[str] = None
    is_active: bool = True


@dataclass
class InstallmentGroup:
    """Header of a grouped installment schedule"""

    description: Optional[str]
    installments_total: int
    category_id: Optional[str] = None
    subcategory_id: Optional[str] = None
    source: Optional[str] = None
    id: Optional[str] = None


@dataclass
class FamilySettings:
    """Family-level knobs that influence the projection"""

    income_anchor_value: Optional[Decimal] = None
    income_type: Optional[str] = None  # "fixed" | "variable"
    accounting_regime: str = "cash_basis"


@dataclass
class FamilyContext:
    """Resolved caller identity, passed explicitly into every read"""

    user_id: str
    family_id: str
    settings: FamilySettings = field(default_factory=FamilySettings)


@dataclass
class ProjectionDriver:
    """A named contributor explaining a projected figure"""

    type: str  # "RECURRING" | "INSTALLMENT"
    label: str
    amount: Decimal
    category: Optional[str] = None


@dataclass
class MonthProjection:
    """Forecast for one calendar month; money rounded to cents"""

    month: str
    month_label: str
    income_projected: Decimal
    recurring_income: Decimal
    expense_projected: Decimal
    recurring_expense: Decimal
    fixed_recurring_total: Decimal
    credit_card_installments: Decimal
    fixed_commitment_total: Decimal
    fixed_commitment_percentage: Decimal
    projected_surplus: Decimal
    variable_expense_estimate: Decimal
    balance_projected: Decimal
    drivers: List[ProjectionDriver] = field(default_factory=list)
    fixed_expenses: List[ProjectionDriver] = field(default_factory=list)
    installment_details: List[ProjectionDriver] = field(default_factory=list)


@dataclass
class CurrentMonthSummary:
    """Flattened view of the first projected month"""

    month: str
    month_label: str
    income_projected: Decimal
    fixed_recurring_total: Decimal
    credit_card_installments: Decimal
    fixed_commitment_total: Decimal
    fixed_commitment_percentage: Decimal
    projected_surplus: Decimal
    variable_expense_estimate: Decimal
    balance_projected: Decimal
    alert_level: str  # "healthy" | "warning" | "critical"


@dataclass
class AdvisoryNarrative:
    """Tips, optional alert and a recommendation, whatever produced them"""

    tips: List[str]
    alert: Optional[str]
    recommendation: str
