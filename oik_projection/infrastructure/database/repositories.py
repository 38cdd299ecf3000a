"""Read-only data access for projection inputs"""

import uuid
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from oik_projection.domain.exceptions import FamilyResolutionError
from oik_projection.domain.history import history_window_start
from oik_projection.domain.installments import LegacyInstallment, PlannedInstallment
from oik_projection.domain.models import (
    FamilyContext,
    FamilySettings,
    InstallmentGroup,
    RecurringDefinition,
    Transaction,
)
from oik_projection.domain.projection import ProjectionInputs
from oik_projection.infrastructure.database.models import (
    Family,
    FamilyMember,
    InstallmentGroupRecord,
    InstallmentRecord,
    PlannedInstallmentRecord,
    RecurringTransaction,
    TransactionRecord,
)
from oik_projection.utils.date_utils import month_start
from oik_projection.utils.money import to_decimal


class FamilyRepository:
    """Resolves the caller's family and its settings"""

    def __init__(self, db: Session):
        self.db = db

    def get_active_membership(self, user_id: str) -> Optional[FamilyMember]:
        """Oldest active membership for a user"""
        return (
            self.db.query(FamilyMember)
            .filter(FamilyMember.user_id == user_id, FamilyMember.status == "ACTIVE")
            .order_by(FamilyMember.created_at.asc())
            .first()
        )

    def resolve_context(self, user_id: str) -> FamilyContext:
        """
        Build the explicit family context for a request.

        Raises:
            FamilyResolutionError: User has no active family membership
        """
        member = self.get_active_membership(user_id)
        if member is None or member.family is None:
            raise FamilyResolutionError("No family found")

        family: Family = member.family
        return FamilyContext(
            user_id=user_id,
            family_id=str(family.id),
            settings=FamilySettings(
                income_anchor_value=(
                    to_decimal(family.income_anchor_value) if family.income_anchor_value is not None else None
                ),
                income_type=family.income_type,
                accounting_regime=family.accounting_regime or "cash_basis",
            ),
        )


class ProjectionInputRepository:
    """Family-scoped reads feeding the projection engine"""

    def __init__(self, db: Session):
        self.db = db

    def get_transactions(self, family_id: uuid.UUID, since: date) -> List[Transaction]:
        rows = (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.family_id == family_id, TransactionRecord.date >= since)
            .all()
        )
        return [
            Transaction(type=r.type, amount=to_decimal(r.amount), category_id=r.category_id, date=r.date)
            for r in rows
        ]

    def get_recurring(self, family_id: uuid.UUID) -> List[RecurringDefinition]:
        rows = (
            self.db.query(RecurringTransaction)
            .filter(RecurringTransaction.family_id == family_id, RecurringTransaction.is_active.is_(True))
            .order_by(RecurringTransaction.created_at.asc())
            .all()
        )
        return [
            RecurringDefinition(
                description=r.description,
                type=r.type,
                amount=to_decimal(r.amount),
                category_id=r.category_id,
                subcategory_id=r.subcategory_id,
                start_date=r.start_date,
                end_date=r.end_date,
                is_active=r.is_active,
            )
            for r in rows
        ]

    def get_legacy_installments(self, family_id: uuid.UUID) -> List[LegacyInstallment]:
        rows = (
            self.db.query(InstallmentRecord)
            .filter(InstallmentRecord.family_id == family_id, InstallmentRecord.is_active.is_(True))
            .order_by(InstallmentRecord.created_at.asc())
            .all()
        )
        return [
            LegacyInstallment(
                description=r.description,
                start_date=r.start_date,
                current_installment=r.current_installment,
                total_installments=r.total_installments,
                installment_amount=to_decimal(r.installment_amount),
                category_id=r.category_id,
            )
            for r in rows
        ]

    def get_planned_installments(self, family_id: uuid.UUID, due_from: date) -> List[PlannedInstallment]:
        rows = (
            self.db.query(PlannedInstallmentRecord)
            .options(joinedload(PlannedInstallmentRecord.group))
            .filter(
                PlannedInstallmentRecord.family_id == family_id,
                PlannedInstallmentRecord.status == "PLANNED",
                PlannedInstallmentRecord.due_date >= due_from,
            )
            .order_by(PlannedInstallmentRecord.due_date.asc(), PlannedInstallmentRecord.installment_index.asc())
            .all()
        )
        return [
            PlannedInstallment(
                due_date=r.due_date,
                installment_index=r.installment_index,
                amount=to_decimal(r.amount),
                status=r.status,
                group=_to_group(r.group),
            )
            for r in rows
        ]

    def load_inputs(self, context: FamilyContext, today: date, window_months: int = 3) -> ProjectionInputs:
        """Everything the engine needs for one family, as of `today`"""
        family_id = uuid.UUID(context.family_id)
        return ProjectionInputs(
            transactions=self.get_transactions(family_id, history_window_start(today, window_months)),
            recurring=self.get_recurring(family_id),
            legacy_installments=self.get_legacy_installments(family_id),
            planned_installments=self.get_planned_installments(family_id, month_start(today)),
            settings=context.settings,
        )


def _to_group(record: Optional[InstallmentGroupRecord]) -> Optional[InstallmentGroup]:
    if record is None:
        return None
    return InstallmentGroup(
        id=str(record.id),
        description=record.description,
        installments_total=record.installments_total,
        category_id=record.category_id,
        subcategory_id=record.subcategory_id,
        source=record.source,
    )
