"""SQLAlchemy ORM models for the upstream tables the projection reads"""

import uuid
from sqlalchemy import Column, Boolean, Date, DateTime, ForeignKey, Integer, Numeric, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class Family(Base):
    """Household and its projection-relevant settings"""

    __tablename__ = "families"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    income_anchor_value = Column(Numeric(14, 2), nullable=True)
    income_type = Column(Text, nullable=True)
    accounting_regime = Column(Text, nullable=False, default="cash_basis")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    members = relationship("FamilyMember", back_populates="family")


class FamilyMember(Base):
    """Membership of an authenticated user in a family"""

    __tablename__ = "family_members"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    family_id = Column(UUID(as_uuid=True), ForeignKey("families.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Text, nullable=False, index=True)
    display_name = Column(Text, nullable=False, default="")
    status = Column(Text, nullable=False, default="ACTIVE")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    family = relationship("Family", back_populates="members")


class TransactionRecord(Base):
    """Posted income/expense transaction"""

    __tablename__ = "transactions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    family_id = Column(UUID(as_uuid=True), ForeignKey("families.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(Text, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    category_id = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    date = Column(Date, nullable=False, index=True)


class RecurringTransaction(Base):
    """Recurring income/expense definition"""

    __tablename__ = "recurring_transactions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    family_id = Column(UUID(as_uuid=True), ForeignKey("families.id", ondelete="CASCADE"), nullable=False, index=True)
    description = Column(Text, nullable=False)
    type = Column(Text, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    category_id = Column(Text, nullable=True)
    subcategory_id = Column(Text, nullable=True)
    frequency = Column(Text, nullable=False, default="monthly")
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class InstallmentRecord(Base):
    """Legacy flat installment row with a running counter"""

    __tablename__ = "installments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    family_id = Column(UUID(as_uuid=True), ForeignKey("families.id", ondelete="CASCADE"), nullable=False, index=True)
    description = Column(Text, nullable=False)
    category_id = Column(Text, nullable=True)
    subcategory_id = Column(Text, nullable=True)
    start_date = Column(Date, nullable=False)
    current_installment = Column(Integer, nullable=False, default=1)
    total_installments = Column(Integer, nullable=False)
    installment_amount = Column(Numeric(14, 2), nullable=False)
    total_amount = Column(Numeric(14, 2), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class InstallmentGroupRecord(Base):
    """Header of a grouped installment schedule"""

    __tablename__ = "installment_groups"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    family_id = Column(UUID(as_uuid=True), ForeignKey("families.id", ondelete="CASCADE"), nullable=False, index=True)
    description = Column(Text, nullable=True)
    category_id = Column(Text, nullable=False)
    subcategory_id = Column(Text, nullable=True)
    installments_total = Column(Integer, nullable=False)
    installment_value = Column(Numeric(14, 2), nullable=False)
    total_amount = Column(Numeric(14, 2), nullable=False)
    first_due_date = Column(Date, nullable=False)
    source = Column(Text, nullable=False, default="manual")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    planned = relationship("PlannedInstallmentRecord", back_populates="group", cascade="all, delete-orphan")


class PlannedInstallmentRecord(Base):
    """Single due-dated installment of a group"""

    __tablename__ = "planned_installments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    family_id = Column(UUID(as_uuid=True), ForeignKey("families.id", ondelete="CASCADE"), nullable=False, index=True)
    installment_group_id = Column(
        UUID(as_uuid=True), ForeignKey("installment_groups.id", ondelete="CASCADE"), nullable=True
    )
    installment_index = Column(Integer, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    due_date = Column(Date, nullable=False)
    status = Column(Text, nullable=False, default="PLANNED")  # POSTED | PLANNED | RECONCILED | CANCELLED
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    group = relationship("InstallmentGroupRecord", back_populates="planned")
