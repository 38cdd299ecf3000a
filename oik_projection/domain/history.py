"""Historical baseline - average monthly income and expense from recent transactions"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List

from oik_projection.domain.models import Transaction
from oik_projection.utils.date_utils import add_months, month_key
from oik_projection.utils.money import ZERO


@dataclass
class HistoricalBaseline:
    """Averages computed once per request and shared by every projected month"""

    avg_income: Decimal = ZERO
    avg_expense: Decimal = ZERO
    income_by_month: Dict[str, Decimal] = field(default_factory=dict)
    expense_by_month: Dict[str, Decimal] = field(default_factory=dict)
    expense_by_category: Dict[str, List[Decimal]] = field(default_factory=dict)

    @property
    def months_observed(self) -> int:
        return len(set(self.income_by_month) | set(self.expense_by_month))


def history_window_start(today: date, window_months: int = 3) -> date:
    """
    First day included in the historical window.

    The window covers `window_months` full months before the current one plus
    the current partial month.
    """
    return add_months(today, -window_months)


def aggregate_history(transactions: List[Transaction]) -> HistoricalBaseline:
    """
    Reduce raw transactions to per-month totals and average baselines.

    Averages divide by the number of distinct months that actually had a
    transaction of that type (minimum 1), so a family with two months of
    salary history is not diluted by an empty third month.
    """
    baseline = HistoricalBaseline()

    for txn in transactions:
        key = month_key(txn.date)
        if txn.type == "income":
            baseline.income_by_month[key] = baseline.income_by_month.get(key, ZERO) + txn.amount
        elif txn.type == "expense":
            baseline.expense_by_month[key] = baseline.expense_by_month.get(key, ZERO) + txn.amount
            category = txn.category_id or "uncategorized"
            baseline.expense_by_category.setdefault(category, []).append(txn.amount)

    income_months = len(baseline.income_by_month) or 1
    expense_months = len(baseline.expense_by_month) or 1
    baseline.avg_income = sum(baseline.income_by_month.values(), ZERO) / income_months
    baseline.avg_expense = sum(baseline.expense_by_month.values(), ZERO) / expense_months

    return baseline
