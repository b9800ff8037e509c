"""
Request kinds.

Leave requests and reimbursement claims share one lifecycle (see
``lifecycle.py``). A ``RequestKind`` carries everything that differs between
them: the model, how a new record is validated and built, which column is
its type/category, and which columns the statistics sum.
"""
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from sqlalchemy.orm import Session

from ..errors import ConflictError, ValidationError
from ..models.models import (
    Leave,
    Reimbursement,
    LEAVE_TYPES,
    REIMBURSEMENT_CATEGORIES,
    STATUS_REJECTED,
)
from .workdays import count_working_days


REASON_MIN_CHARS = 10
REASON_MAX_CHARS = 500
TITLE_MAX_CHARS = 100
DESCRIPTION_MAX_CHARS = 500


@dataclass(frozen=True)
class RequestKind:
    name: str
    label: str
    model: type
    type_field: str
    build: Callable[[Session, object, dict], object]
    # stats output key -> summed column name
    type_sums: Dict[str, str] = field(default_factory=dict)
    status_sums: Dict[str, str] = field(default_factory=dict)
    monthly_sums: Dict[str, str] = field(default_factory=dict)
    type_stats_key: str = "byType"

    @property
    def type_column(self):
        return getattr(self.model, self.type_field)


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def find_overlapping_leave(db: Session, employee_id, start, end) -> Optional[Leave]:
    """
    First non-rejected leave of ``employee_id`` whose inclusive range
    intersects [start, end].

    This is a plain read before the insert; two simultaneous submissions for
    the same dates can both pass it.
    """
    return (
        db.query(Leave)
        .filter(
            Leave.employee_id == employee_id,
            Leave.status != STATUS_REJECTED,
            Leave.start_date <= end,
            Leave.end_date >= start,
        )
        .first()
    )


def build_leave(db: Session, actor, data: dict) -> Leave:
    leave_type = data.get("leave_type")
    start = data.get("start_date")
    end = data.get("end_date")
    reason = data.get("reason")

    if _blank(leave_type) or start is None or end is None or _blank(reason):
        raise ValidationError("All fields are required")
    if leave_type not in LEAVE_TYPES:
        raise ValidationError(f"Invalid leave type. Must be one of: {', '.join(LEAVE_TYPES)}")
    if end < start:
        raise ValidationError("End date cannot be before start date")
    if len(reason) < REASON_MIN_CHARS:
        raise ValidationError(f"Reason must be at least {REASON_MIN_CHARS} characters")
    if len(reason) > REASON_MAX_CHARS:
        raise ValidationError(f"Reason must not exceed {REASON_MAX_CHARS} characters")

    if find_overlapping_leave(db, actor.id, start, end) is not None:
        raise ConflictError("You have an overlapping leave request in this date range")

    return Leave(
        employee_id=actor.id,
        leave_type=leave_type,
        start_date=start,
        end_date=end,
        total_days=count_working_days(start, end),
        reason=reason,
    )


def build_reimbursement(db: Session, actor, data: dict) -> Reimbursement:
    title = data.get("title")
    amount = data.get("amount")
    category = data.get("category")
    description = data.get("description")
    expense_date = data.get("expense_date")

    # amount == 0 is reported as missing, like any other falsy field
    if _blank(title) or not amount or _blank(category) or _blank(description) or expense_date is None:
        raise ValidationError("All fields except receipt PDF are required")
    title = title.strip()
    if len(title) > TITLE_MAX_CHARS:
        raise ValidationError(f"Title cannot exceed {TITLE_MAX_CHARS} characters")
    if not math.isfinite(amount) or amount <= 0:
        raise ValidationError("Amount must be greater than 0")
    if category not in REIMBURSEMENT_CATEGORIES:
        raise ValidationError(f"Invalid category. Must be one of: {', '.join(REIMBURSEMENT_CATEGORIES)}")
    if len(description) > DESCRIPTION_MAX_CHARS:
        raise ValidationError(f"Description cannot exceed {DESCRIPTION_MAX_CHARS} characters")

    return Reimbursement(
        employee_id=actor.id,
        title=title,
        amount=float(amount),
        category=category,
        description=description,
        expense_date=expense_date,
        receipt_url=data.get("receipt_url") or "",
    )


LEAVE = RequestKind(
    name="leave",
    label="Leave",
    model=Leave,
    type_field="leave_type",
    build=build_leave,
    type_sums={"totalDays": "total_days"},
    type_stats_key="byType",
)

REIMBURSEMENT = RequestKind(
    name="reimbursement",
    label="Reimbursement",
    model=Reimbursement,
    type_field="category",
    build=build_reimbursement,
    type_sums={"totalAmount": "amount"},
    status_sums={"totalAmount": "amount"},
    monthly_sums={"totalAmount": "amount"},
    type_stats_key="byCategory",
)
