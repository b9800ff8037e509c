from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from ..db import get_db
from ..models.models import User
from ..auth.security import get_current_user, require_permission
from ..schemas.requests import LeaveCreate, ReviewRequest
from ..schemas.serializers import leave_to_dict
from ..services import lifecycle, policy
from ..services.kinds import LEAVE
from ..services.stats import request_stats


router = APIRouter(prefix="/leaves", tags=["leaves"])


@router.post("", status_code=status.HTTP_201_CREATED)
def apply_leave(
    payload: LeaveCreate,
    db: Session = Depends(get_db),
    actor: User = Depends(require_permission(policy.ACTION_CREATE_REQUEST)),
):
    leave = lifecycle.create_request(db, LEAVE, actor, payload.model_dump())
    return {"message": "Leave application submitted", "leave": leave_to_dict(leave)}


@router.get("")
def list_leaves(
    status: Optional[str] = None,
    leaveType: Optional[str] = None,
    employeeId: Optional[str] = None,
    page: int = Query(1),
    limit: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    actor: User = Depends(get_current_user),
):
    result = lifecycle.list_requests(
        db, LEAVE, actor,
        status=status, type_value=leaveType, employee_id=employeeId,
        page=page, limit=limit,
    )
    return {"leaves": [leave_to_dict(l) for l in result["items"]], "pagination": result["pagination"]}


@router.get("/stats")
def leave_stats(db: Session = Depends(get_db), actor: User = Depends(get_current_user)):
    return request_stats(db, LEAVE, actor)


@router.get("/{leave_id}")
def get_leave(leave_id: str, db: Session = Depends(get_db), actor: User = Depends(get_current_user)):
    return {"leave": leave_to_dict(lifecycle.get_request(db, LEAVE, actor, leave_id))}


@router.patch("/{leave_id}/approve")
def approve_leave(
    leave_id: str,
    payload: Optional[ReviewRequest] = None,
    db: Session = Depends(get_db),
    actor: User = Depends(require_permission(policy.ACTION_REVIEW_REQUEST)),
):
    leave = lifecycle.review_request(db, LEAVE, actor, leave_id, "approve", payload.comment if payload else None)
    return {"message": "Leave approved successfully", "leave": leave_to_dict(leave)}


@router.patch("/{leave_id}/reject")
def reject_leave(
    leave_id: str,
    payload: Optional[ReviewRequest] = None,
    db: Session = Depends(get_db),
    actor: User = Depends(require_permission(policy.ACTION_REVIEW_REQUEST)),
):
    leave = lifecycle.review_request(db, LEAVE, actor, leave_id, "reject", payload.comment if payload else None)
    return {"message": "Leave rejected", "leave": leave_to_dict(leave)}


@router.delete("/{leave_id}")
def delete_leave(leave_id: str, db: Session = Depends(get_db), actor: User = Depends(get_current_user)):
    lifecycle.delete_leave(db, actor, leave_id)
    return {"message": "Leave application deleted"}
