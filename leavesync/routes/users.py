from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional

from ..db import get_db
from ..models.models import User
from ..auth.security import require_permission
from ..schemas.auth import RoleUpdate
from ..schemas.serializers import user_to_dict
from ..services import policy
from ..services import users as user_service


router = APIRouter(prefix="/users", tags=["users"])


@router.get("")
def list_users(
    role: Optional[str] = None,
    isActive: Optional[bool] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    actor: User = Depends(require_permission(policy.ACTION_LIST_USERS)),
):
    """
    List users, newest first.

    Args:
        role: Exact role filter
        isActive: Active flag filter
        search: Case-insensitive match on name or email
    """
    users = user_service.list_users(db, actor, role=role, is_active=isActive, search=search)
    return {"count": len(users), "users": [user_to_dict(u) for u in users]}


@router.get("/stats")
def user_stats(db: Session = Depends(get_db), actor: User = Depends(require_permission(policy.ACTION_MANAGE_USERS))):
    return user_service.user_stats(db, actor)


@router.get("/{user_id}")
def get_user(user_id: str, db: Session = Depends(get_db), actor: User = Depends(require_permission(policy.ACTION_MANAGE_USERS))):
    return {"user": user_to_dict(user_service.get_user(db, actor, user_id))}


@router.patch("/{user_id}/role")
def update_role(
    user_id: str,
    payload: Optional[RoleUpdate] = None,
    db: Session = Depends(get_db),
    actor: User = Depends(require_permission(policy.ACTION_MANAGE_USERS)),
):
    u = user_service.update_role(db, actor, user_id, payload.role if payload else None)
    return {"message": "Role updated successfully", "user": user_to_dict(u)}


@router.patch("/{user_id}/status")
def toggle_status(user_id: str, db: Session = Depends(get_db), actor: User = Depends(require_permission(policy.ACTION_MANAGE_USERS))):
    u = user_service.toggle_status(db, actor, user_id)
    state = "activated" if u.is_active else "deactivated"
    return {"message": f"User {state} successfully", "user": user_to_dict(u)}
