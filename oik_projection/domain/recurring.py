"""Recurring income/expense evaluation for a single target month"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List

from oik_projection.domain.history import HistoricalBaseline
from oik_projection.domain.models import ProjectionDriver, RecurringDefinition
from oik_projection.utils.date_utils import month_end, month_start
from oik_projection.utils.money import ZERO

# Share of the historical average a single item must reach to be listed as a driver
EXPENSE_DRIVER_THRESHOLD = Decimal("0.03")
INCOME_DRIVER_THRESHOLD = Decimal("0.05")


@dataclass
class RecurringContribution:
    """Recurring totals and driver entries for one month"""

    income: Decimal = ZERO
    expense: Decimal = ZERO
    drivers: List[ProjectionDriver] = field(default_factory=list)
    fixed_expenses: List[ProjectionDriver] = field(default_factory=list)


def is_active_in_month(definition: RecurringDefinition, target_month: date) -> bool:
    """Active iff it started by the month's last day and has not ended before its first day"""
    if not definition.is_active:
        return False
    if definition.start_date > month_end(target_month):
        return False
    return definition.end_date is None or definition.end_date >= month_start(target_month)


def evaluate_recurring(
    definitions: List[RecurringDefinition],
    target_month: date,
    baseline: HistoricalBaseline,
) -> RecurringContribution:
    """
    Sum active recurring items for `target_month`, split by type.

    Every active expense is a fixed-expense line item. Only items that are
    large relative to the historical baseline (3% of average expense, 5% of
    average income) enter the generic driver list, in definition order.
    """
    result = RecurringContribution()
    expense_floor = baseline.avg_expense * EXPENSE_DRIVER_THRESHOLD
    income_floor = baseline.avg_income * INCOME_DRIVER_THRESHOLD

    for definition in definitions:
        if not is_active_in_month(definition, target_month):
            continue

        driver = ProjectionDriver(
            type="RECURRING",
            label=definition.description,
            amount=definition.amount,
            category=definition.category_id,
        )

        if definition.type == "income":
            result.income += definition.amount
            if definition.amount >= income_floor:
                result.drivers.append(driver)
        else:
            result.expense += definition.amount
            result.fixed_expenses.append(driver)
            if definition.amount >= expense_floor:
                result.drivers.append(driver)

    return result
