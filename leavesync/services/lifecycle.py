"""
Request lifecycle engine.

    pending --approve--> approved   (terminal)
    pending --reject---> rejected   (terminal)

Works for any ``RequestKind``; the kind supplies validation and the model.
"""
import math
import uuid
from typing import Optional

import structlog
from sqlalchemy import update
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ..models.models import STATUS_APPROVED, STATUS_PENDING, STATUS_REJECTED, STATUSES, utcnow
from . import policy
from .kinds import LEAVE, RequestKind


log = structlog.get_logger(__name__)

DECISIONS = {"approve": STATUS_APPROVED, "reject": STATUS_REJECTED}


def parse_id(value) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise ValidationError("Invalid ID format")


def _load(db: Session, kind: RequestKind, request_id):
    obj = db.get(kind.model, parse_id(request_id))
    if obj is None:
        raise NotFoundError(f"{kind.label} not found")
    return obj


def create_request(db: Session, kind: RequestKind, actor, data: dict):
    if not policy.can_create(actor, kind):
        raise ForbiddenError(policy.denied_message(policy.ACTION_CREATE_REQUEST, actor))
    obj = kind.build(db, actor, data)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    log.info(f"{kind.name}_created", request_id=str(obj.id), employee_id=str(actor.id))
    return obj


def get_request(db: Session, kind: RequestKind, actor, request_id):
    obj = _load(db, kind, request_id)
    if not policy.can_view(actor, obj):
        raise ForbiddenError("Access denied")
    return obj


def review_request(db: Session, kind: RequestKind, actor, request_id, decision: str, comment: Optional[str] = None):
    """
    Move a pending request to approved/rejected.

    The pending check and the write are one conditional UPDATE, so of two
    reviewers racing on the same record exactly one wins; the other gets
    the conflict error below.
    """
    if not policy.can_review(actor):
        raise ForbiddenError(policy.denied_message(policy.ACTION_REVIEW_REQUEST, actor))
    new_status = DECISIONS[decision]
    rid = parse_id(request_id)
    model = kind.model

    result = db.execute(
        update(model)
        .where(model.id == rid, model.status == STATUS_PENDING)
        .values(
            status=new_status,
            approved_by=actor.id,
            approver_comment=comment or "",
            reviewed_at=utcnow(),
            updated_at=utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        current = _load(db, kind, rid)
        raise ConflictError(f"{kind.label} already {current.status}")
    db.commit()

    obj = _load(db, kind, rid)
    log.info("request_reviewed", kind=kind.name, request_id=str(rid), status=new_status, reviewer_id=str(actor.id))
    return obj


def delete_leave(db: Session, actor, leave_id) -> None:
    leave = _load(db, LEAVE, leave_id)
    if not policy.is_owner(actor, leave):
        raise ForbiddenError("Access denied")
    if not policy.can_delete(actor, leave):
        raise ConflictError("Only pending leaves can be deleted")
    db.delete(leave)
    db.commit()
    log.info("leave_deleted", request_id=str(leave.id), employee_id=str(actor.id))


def clamp_paging(page: Optional[int], limit: Optional[int]) -> tuple:
    page = max(1, page or 1)
    limit = min(max(1, limit or settings.default_page_limit), settings.max_page_limit)
    return page, limit


def list_requests(
    db: Session,
    kind: RequestKind,
    actor,
    status: Optional[str] = None,
    type_value: Optional[str] = None,
    employee_id: Optional[str] = None,
    page: Optional[int] = 1,
    limit: Optional[int] = None,
) -> dict:
    """
    Requests visible to ``actor``, newest first.

    Args:
        status: Equality filter on status
        type_value: Equality filter on the kind's type/category column
        employee_id: Narrow to one employee (ignored for employees)
        page: 1-indexed page
        limit: Page size (default from settings)

    Returns:
        ``{"items": [...], "pagination": {"total", "page", "pages"}}``
    """
    model = kind.model
    page, limit = clamp_paging(page, limit)
    # employeeId is ignored for employees, so it is only parsed for reviewers
    narrow_to = parse_id(employee_id) if employee_id and policy.is_reviewer(actor) else None
    criteria = policy.visibility_filter(actor, model, narrow_to)
    if status:
        if status not in STATUSES:
            raise ValidationError(f"Invalid status. Must be one of: {', '.join(STATUSES)}")
        criteria.append(model.status == status)
    if type_value:
        criteria.append(kind.type_column == type_value)

    query = db.query(model).filter(*criteria)
    total = query.count()
    items = (
        query.order_by(model.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "items": items,
        "pagination": {
            "total": total,
            "page": page,
            "pages": math.ceil(total / limit),
        },
    }
