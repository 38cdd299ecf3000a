"""Income resolution, fixed commitment and surplus - core projection arithmetic"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Tuple

from oik_projection.domain.models import FamilySettings
from oik_projection.utils.money import ZERO

HUNDRED = Decimal("100")


@dataclass
class Commitment:
    fixed_recurring_total: Decimal
    credit_card_installments: Decimal
    total: Decimal
    percentage: Decimal


@dataclass
class SurplusEstimate:
    projected_surplus: Decimal
    variable_expense_estimate: Decimal
    expense_projected: Decimal
    balance_projected: Decimal


def resolve_income(settings: FamilySettings, recurring_income: Decimal, avg_income: Decimal) -> Tuple[Decimal, str]:
    """
    Pick the month's projected income. First match wins, no blending:

    1. Fixed anchor income configured on the family
    2. Active recurring income, when non-zero
    3. Historical average

    Returns: (income, source) where source is "anchor" | "recurring" | "historical"
    """
    if settings.income_type == "fixed" and settings.income_anchor_value is not None:
        return settings.income_anchor_value, "anchor"
    if recurring_income != ZERO:
        return recurring_income, "recurring"
    return avg_income, "historical"


def calculate_commitment(
    fixed_recurring_total: Decimal,
    credit_card_installments: Decimal,
    income_projected: Decimal,
) -> Commitment:
    """Fixed commitment and its share of projected income (0 when there is no income)"""
    total = fixed_recurring_total + credit_card_installments
    percentage = total / income_projected * HUNDRED if income_projected > ZERO else ZERO
    return Commitment(
        fixed_recurring_total=fixed_recurring_total,
        credit_card_installments=credit_card_installments,
        total=total,
        percentage=percentage,
    )


def estimate_surplus(income_projected: Decimal, commitment: Commitment, avg_expense: Decimal) -> SurplusEstimate:
    """
    Surplus nets income against fixed commitment only; balance nets it
    against fixed commitment plus the estimated variable spending.

    Variable spending is the historical expense not already explained by
    recurring fixed items, floored at zero.
    """
    variable = max(ZERO, avg_expense - commitment.fixed_recurring_total)
    expense_projected = commitment.total + variable
    return SurplusEstimate(
        projected_surplus=income_projected - commitment.total,
        variable_expense_estimate=variable,
        expense_projected=expense_projected,
        balance_projected=income_projected - expense_projected,
    )


def determine_alert_level(percentage: Decimal) -> str:
    """
    Map commitment percentage to an alert band.

    - above 80: critical
    - above 60: warning
    - otherwise: healthy
    """
    if percentage > 80:
        return "critical"
    elif percentage > 60:
        return "warning"
    else:
        return "healthy"
