"""Horizon orchestration - main entry point for month-by-month projections"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from oik_projection.domain.commitment import (
    calculate_commitment,
    determine_alert_level,
    estimate_surplus,
    resolve_income,
)
from oik_projection.domain.drivers import attribute_drivers
from oik_projection.domain.history import HistoricalBaseline, aggregate_history
from oik_projection.domain.installments import LegacyInstallment, PlannedInstallment, amortize_installments
from oik_projection.domain.models import (
    CurrentMonthSummary,
    FamilySettings,
    MonthProjection,
    RecurringDefinition,
    Transaction,
)
from oik_projection.domain.recurring import evaluate_recurring
from oik_projection.utils.date_utils import add_months, month_key, month_label, month_start
from oik_projection.utils.money import round_cents

DEFAULT_HORIZON_MONTHS = 12


@dataclass
class ProjectionInputs:
    """Everything loaded for one family, read once per request"""

    transactions: List[Transaction] = field(default_factory=list)
    recurring: List[RecurringDefinition] = field(default_factory=list)
    legacy_installments: List[LegacyInstallment] = field(default_factory=list)
    planned_installments: List[PlannedInstallment] = field(default_factory=list)
    settings: FamilySettings = field(default_factory=FamilySettings)


@dataclass
class ProjectionResult:
    baseline: HistoricalBaseline
    projections: List[MonthProjection]
    current_month_summary: Optional[CurrentMonthSummary]
    income_source: Optional[str] = None


def project_month(inputs: ProjectionInputs, baseline: HistoricalBaseline, target_month: date) -> tuple[MonthProjection, str]:
    """
    Project a single month. Intermediate sums keep full precision; every
    output figure is rounded to cents only here, at assembly.

    Returns: (projection, income_source)
    """
    recurring = evaluate_recurring(inputs.recurring, target_month, baseline)
    installments = amortize_installments(inputs.legacy_installments, inputs.planned_installments, target_month)

    income, income_source = resolve_income(inputs.settings, recurring.income, baseline.avg_income)
    commitment = calculate_commitment(recurring.expense, installments.total, income)
    surplus = estimate_surplus(income, commitment, baseline.avg_expense)
    breakdown = attribute_drivers(recurring, installments)

    projection = MonthProjection(
        month=month_key(target_month),
        month_label=month_label(target_month),
        income_projected=round_cents(income),
        recurring_income=round_cents(recurring.income),
        expense_projected=round_cents(surplus.expense_projected),
        recurring_expense=round_cents(recurring.expense),
        fixed_recurring_total=round_cents(commitment.fixed_recurring_total),
        credit_card_installments=round_cents(commitment.credit_card_installments),
        fixed_commitment_total=round_cents(commitment.total),
        fixed_commitment_percentage=round_cents(commitment.percentage),
        projected_surplus=round_cents(surplus.projected_surplus),
        variable_expense_estimate=round_cents(surplus.variable_expense_estimate),
        balance_projected=round_cents(surplus.balance_projected),
        drivers=breakdown.drivers,
        fixed_expenses=breakdown.fixed_expenses,
        installment_details=breakdown.installment_details,
    )
    return projection, income_source


def summarize_current_month(projection: MonthProjection) -> CurrentMonthSummary:
    return CurrentMonthSummary(
        month=projection.month,
        month_label=projection.month_label,
        income_projected=projection.income_projected,
        fixed_recurring_total=projection.fixed_recurring_total,
        credit_card_installments=projection.credit_card_installments,
        fixed_commitment_total=projection.fixed_commitment_total,
        fixed_commitment_percentage=projection.fixed_commitment_percentage,
        projected_surplus=projection.projected_surplus,
        variable_expense_estimate=projection.variable_expense_estimate,
        balance_projected=projection.balance_projected,
        alert_level=determine_alert_level(projection.fixed_commitment_percentage),
    )


def generate_projection(
    inputs: ProjectionInputs,
    months: int = DEFAULT_HORIZON_MONTHS,
    today: date | None = None,
) -> ProjectionResult:
    """
    Main entry point: build the baseline once, then project each month of
    the horizon starting at the month containing `today`.

    The first projection is always the current month and is also returned
    flattened as the current-month summary with its alert level.
    """
    if today is None:
        today = date.today()

    baseline = aggregate_history(inputs.transactions)
    first_month = month_start(today)

    projections: List[MonthProjection] = []
    income_source = None
    for offset in range(months):
        projection, source = project_month(inputs, baseline, add_months(first_month, offset))
        if offset == 0:
            income_source = source
        projections.append(projection)

    summary = summarize_current_month(projections[0]) if projections else None

    return ProjectionResult(
        baseline=baseline,
        projections=projections,
        current_month_summary=summary,
        income_source=income_source,
    )
