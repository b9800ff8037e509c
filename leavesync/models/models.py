import uuid
from datetime import datetime, timezone, date
from typing import Optional

from sqlalchemy import (
    String,
    DateTime,
    Date,
    Boolean,
    ForeignKey,
    Integer,
    Float,
    Text,
    Index,
    Uuid,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column, declared_attr

from ..db import Base


ROLE_EMPLOYEE = "employee"
ROLE_MANAGER = "manager"
ROLE_ADMIN = "admin"
ROLES = (ROLE_EMPLOYEE, ROLE_MANAGER, ROLE_ADMIN)

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"
STATUSES = (STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED)

LEAVE_TYPES = ("sick", "casual", "annual", "maternity", "paternity", "unpaid")
REIMBURSEMENT_CATEGORIES = ("Travel", "Food", "Equipment", "Medical", "Other")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def uuid_pk() -> Mapped[uuid.UUID]:
    return mapped_column(Uuid, primary_key=True, default=uuid.uuid4)


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = uuid_pk()
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=ROLE_EMPLOYEE, index=True)
    department: Mapped[str] = mapped_column(String(100), nullable=False, default="General")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    bio: Mapped[Optional[str]] = mapped_column(Text)
    team_name: Mapped[Optional[str]] = mapped_column(String(100))
    employee_count: Mapped[Optional[int]] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class ReviewableMixin:
    """Columns shared by every request that goes through pending -> approved|rejected.

    ``employee_id`` and ``approved_by`` are weak references: users are never
    deleted and deactivating one leaves their requests untouched.
    """

    status: Mapped[str] = mapped_column(String(20), nullable=False, default=STATUS_PENDING, index=True)
    approver_comment: Mapped[str] = mapped_column(Text, nullable=False, default="")
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    @declared_attr
    def employee_id(cls) -> Mapped[uuid.UUID]:
        return mapped_column(Uuid, ForeignKey("users.id"), nullable=False, index=True)

    @declared_attr
    def approved_by(cls) -> Mapped[Optional[uuid.UUID]]:
        return mapped_column(Uuid, ForeignKey("users.id"), nullable=True)

    @declared_attr
    def employee(cls):
        return relationship("User", foreign_keys=f"{cls.__name__}.employee_id", lazy="joined")

    @declared_attr
    def reviewer(cls):
        return relationship("User", foreign_keys=f"{cls.__name__}.approved_by", lazy="joined")


class Leave(ReviewableMixin, Base):
    __tablename__ = "leaves"

    id: Mapped[uuid.UUID] = uuid_pk()
    leave_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_days: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(String(500), nullable=False)

    # Overlap lookups run per employee on the date range
    __table_args__ = (
        Index("idx_leaves_employee_range", "employee_id", "start_date", "end_date"),
    )


class Reimbursement(ReviewableMixin, Base):
    __tablename__ = "reimbursements"

    id: Mapped[uuid.UUID] = uuid_pk()
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    expense_date: Mapped[date] = mapped_column(Date, nullable=False)
    receipt_url: Mapped[str] = mapped_column(Text, nullable=False, default="")  # base64 data URI
