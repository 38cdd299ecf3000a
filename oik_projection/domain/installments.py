"""Installment amortization across the legacy and grouped schedules"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional, Protocol, Sequence

from oik_projection.domain.models import InstallmentGroup, ProjectionDriver
from oik_projection.utils.date_utils import months_between
from oik_projection.utils.money import ZERO


@dataclass
class InstallmentContribution:
    """Amount and label one installment adds to a month"""

    amount: Decimal
    label: str
    category: Optional[str] = None

    def as_driver(self) -> ProjectionDriver:
        return ProjectionDriver(type="INSTALLMENT", label=self.label, amount=self.amount, category=self.category)


class InstallmentSource(Protocol):
    """Anything that can say what it contributes to a given month"""

    def contribution_for(self, target_month: date) -> Optional[InstallmentContribution]: ...


@dataclass
class LegacyInstallment:
    """
    Flat installment row keyed by a running counter.

    `current_installment` is the index as of `start_date`'s month; the index
    for any other month is found by adding the calendar months in between.
    """

    description: str
    start_date: date
    current_installment: int
    total_installments: int
    installment_amount: Decimal
    category_id: Optional[str] = None

    def installment_number(self, target_month: date) -> int:
        return self.current_installment + months_between(self.start_date, target_month)

    def contribution_for(self, target_month: date) -> Optional[InstallmentContribution]:
        number = self.installment_number(target_month)
        if number < self.current_installment or number > self.total_installments:
            return None
        return InstallmentContribution(
            amount=self.installment_amount,
            label=f"{self.description} ({number}/{self.total_installments})",
            category=self.category_id,
        )


@dataclass
class PlannedInstallment:
    """Grouped-schedule row due on an explicit date"""

    due_date: date
    installment_index: int
    amount: Decimal
    group: Optional[InstallmentGroup] = None
    status: str = "PLANNED"

    @property
    def label(self) -> str:
        description = (self.group.description if self.group else None) or "Parcela"
        total = self.group.installments_total if self.group else "?"
        return f"{description} ({self.installment_index}/{total})"

    def contribution_for(self, target_month: date) -> Optional[InstallmentContribution]:
        if (self.due_date.year, self.due_date.month) != (target_month.year, target_month.month):
            return None
        return InstallmentContribution(
            amount=self.amount,
            label=self.label,
            category=self.group.category_id if self.group else None,
        )


@dataclass
class InstallmentSchedule:
    """Installments due in one month, legacy entries first"""

    total: Decimal = ZERO
    legacy_details: List[ProjectionDriver] = field(default_factory=list)
    grouped_details: List[ProjectionDriver] = field(default_factory=list)

    @property
    def details(self) -> List[ProjectionDriver]:
        return self.legacy_details + self.grouped_details


def _collect(sources: Sequence[InstallmentSource], target_month: date, details: List[ProjectionDriver]) -> Decimal:
    total = ZERO
    for source in sources:
        contribution = source.contribution_for(target_month)
        if contribution is None:
            continue
        total += contribution.amount
        details.append(contribution.as_driver())
    return total


def amortize_installments(
    legacy: Sequence[LegacyInstallment],
    planned: Sequence[PlannedInstallment],
    target_month: date,
) -> InstallmentSchedule:
    """
    Amount due in `target_month` from both installment schedules.

    The two schedules are summed without any cross-check: the same purchase
    entered in both tables is counted twice. Callers own that invariant.
    """
    schedule = InstallmentSchedule()
    schedule.total = _collect(legacy, target_month, schedule.legacy_details) + _collect(
        planned, target_month, schedule.grouped_details
    )
    return schedule
