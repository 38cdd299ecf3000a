"""Unit tests for installment amortization"""

from datetime import date
from decimal import Decimal
from oik_projection.domain.models import InstallmentGroup
from oik_projection.domain.installments import LegacyInstallment, PlannedInstallment, amortize_installments


def _legacy(current=3, total=5, start=date(2025, 1, 1), amount="250.00", name="Notebook"):
    return LegacyInstallment(
        description=name,
        start_date=start,
        current_installment=current,
        total_installments=total,
        installment_amount=Decimal(amount),
        category_id="electronics",
    )


def _planned(due=date(2025, 6, 15), index=2, amount="120.00", group=None):
    return PlannedInstallment(due_date=due, installment_index=index, amount=Decimal(amount), group=group)


def test_legacy_installment_contributes_from_current_to_last():
    """current=3, total=5 starting Jan/25 covers Jan, Feb, Mar only"""
    installment = _legacy()

    assert installment.contribution_for(date(2024, 12, 1)) is None
    assert installment.contribution_for(date(2025, 1, 1)).label == "Notebook (3/5)"
    assert installment.contribution_for(date(2025, 2, 1)).label == "Notebook (4/5)"
    assert installment.contribution_for(date(2025, 3, 1)).label == "Notebook (5/5)"
    assert installment.contribution_for(date(2025, 4, 1)) is None


def test_legacy_installment_ignores_day_of_month():
    installment = _legacy(current=1, total=1, start=date(2025, 1, 31))

    assert installment.contribution_for(date(2025, 1, 1)).amount == Decimal("250.00")
    assert installment.contribution_for(date(2025, 2, 1)) is None


def test_planned_installment_only_in_due_month():
    group = InstallmentGroup(description="Geladeira", installments_total=10, category_id="home")
    installment = _planned(group=group)

    assert installment.contribution_for(date(2025, 5, 1)) is None
    assert installment.contribution_for(date(2025, 7, 1)) is None
    assert installment.contribution_for(date(2026, 6, 1)) is None

    contribution = installment.contribution_for(date(2025, 6, 1))
    assert contribution.amount == Decimal("120.00")
    assert contribution.label == "Geladeira (2/10)"
    assert contribution.category == "home"


def test_planned_installment_label_without_group():
    assert _planned().label == "Parcela (2/?)"
    assert _planned(group=InstallmentGroup(description=None, installments_total=6)).label == "Parcela (2/6)"


def test_schedules_are_summed_legacy_first():
    schedule = amortize_installments(
        [_legacy(current=1, total=12, start=date(2025, 6, 1), amount="100.00")],
        [_planned(group=InstallmentGroup(description="Sofá", installments_total=4))],
        date(2025, 6, 1),
    )

    assert schedule.total == Decimal("220.00")
    assert [d.label for d in schedule.details] == ["Notebook (1/12)", "Sofá (2/4)"]
    assert all(d.type == "INSTALLMENT" for d in schedule.details)


def test_same_purchase_in_both_schedules_is_counted_twice():
    """No deduplication between legacy and grouped schedules"""
    schedule = amortize_installments(
        [_legacy(current=1, total=3, start=date(2025, 6, 1), amount="120.00", name="TV")],
        [_planned(index=1, group=InstallmentGroup(description="TV", installments_total=3))],
        date(2025, 6, 1),
    )

    assert schedule.total == Decimal("240.00")
    assert len(schedule.details) == 2


def test_nothing_due():
    schedule = amortize_installments([], [], date(2025, 6, 1))

    assert schedule.total == 0
    assert schedule.details == []
