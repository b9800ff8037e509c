from typing import Optional

import structlog
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ..errors import ForbiddenError, NotFoundError, ValidationError
from ..models.models import User, ROLES
from . import policy
from .lifecycle import parse_id


log = structlog.get_logger(__name__)


def _require(allowed: bool, action: str, actor) -> None:
    if not allowed:
        raise ForbiddenError(policy.denied_message(action, actor))


def _load_user(db: Session, user_id) -> User:
    user = db.get(User, parse_id(user_id))
    if user is None:
        raise NotFoundError("User not found")
    return user


def list_users(
    db: Session,
    actor,
    role: Optional[str] = None,
    is_active: Optional[bool] = None,
    search: Optional[str] = None,
) -> list:
    _require(policy.can_list_users(actor), policy.ACTION_LIST_USERS, actor)
    query = db.query(User)
    if role:
        query = query.filter(User.role == role)
    if is_active is not None:
        query = query.filter(User.is_active.is_(is_active))
    if search:
        like = f"%{search.lower()}%"
        query = query.filter(or_(func.lower(User.name).like(like), func.lower(User.email).like(like)))
    return query.order_by(User.created_at.desc()).all()


def get_user(db: Session, actor, user_id) -> User:
    _require(policy.can_manage_users(actor), policy.ACTION_MANAGE_USERS, actor)
    return _load_user(db, user_id)


def user_stats(db: Session, actor) -> dict:
    _require(policy.can_manage_users(actor), policy.ACTION_MANAGE_USERS, actor)
    total = db.query(func.count(User.id)).scalar() or 0
    active = db.query(func.count(User.id)).filter(User.is_active.is_(True)).scalar() or 0
    rows = db.query(User.role, func.count(User.id)).group_by(User.role).order_by(User.role.asc()).all()
    return {
        "totalUsers": total,
        "activeUsers": active,
        "byRole": [{"_id": role, "count": count} for role, count in rows],
    }


def update_role(db: Session, actor, user_id, role: Optional[str]) -> User:
    _require(policy.can_manage_users(actor), policy.ACTION_MANAGE_USERS, actor)
    if role not in ROLES:
        raise ValidationError("Invalid role")
    user = _load_user(db, user_id)
    previous = user.role
    user.role = role
    db.commit()
    db.refresh(user)
    log.info("user_role_updated", user_id=str(user.id), previous=previous, role=role, actor_id=str(actor.id))
    return user


def toggle_status(db: Session, actor, user_id) -> User:
    """Flip ``is_active`` on another user; each call inverts the previous state."""
    _require(policy.can_manage_users(actor), policy.ACTION_MANAGE_USERS, actor)
    user = _load_user(db, user_id)
    policy.check_toggle_self(actor, user)
    user.is_active = not user.is_active
    db.commit()
    db.refresh(user)
    log.info("user_status_toggled", user_id=str(user.id), is_active=user.is_active, actor_id=str(actor.id))
    return user
