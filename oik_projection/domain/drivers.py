"""Driver lists surfaced to the UI, in discovery order and capped"""

from dataclasses import dataclass
from typing import List

from oik_projection.domain.installments import InstallmentSchedule
from oik_projection.domain.models import ProjectionDriver
from oik_projection.domain.recurring import RecurringContribution

MAX_DRIVERS = 8
MAX_FIXED_EXPENSES = 10
MAX_INSTALLMENT_DETAILS = 10


@dataclass
class DriverBreakdown:
    drivers: List[ProjectionDriver]
    fixed_expenses: List[ProjectionDriver]
    installment_details: List[ProjectionDriver]


def attribute_drivers(recurring: RecurringContribution, installments: InstallmentSchedule) -> DriverBreakdown:
    """Order: recurring items as defined, legacy installments, grouped installments. Truncate, never sort."""
    drivers = recurring.drivers + installments.details
    return DriverBreakdown(
        drivers=drivers[:MAX_DRIVERS],
        fixed_expenses=recurring.fixed_expenses[:MAX_FIXED_EXPENSES],
        installment_details=installments.details[:MAX_INSTALLMENT_DETAILS],
    )
