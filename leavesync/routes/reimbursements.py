from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from ..db import get_db
from ..models.models import User
from ..auth.security import get_current_user, require_permission
from ..schemas.requests import ReimbursementCreate, ReviewRequest
from ..schemas.serializers import reimbursement_to_dict
from ..services import lifecycle, policy
from ..services.kinds import REIMBURSEMENT
from ..services.stats import request_stats


router = APIRouter(prefix="/reimbursements", tags=["reimbursements"])


@router.post("", status_code=status.HTTP_201_CREATED)
def apply_reimbursement(
    payload: ReimbursementCreate,
    db: Session = Depends(get_db),
    actor: User = Depends(require_permission(policy.ACTION_CREATE_REQUEST)),
):
    claim = lifecycle.create_request(db, REIMBURSEMENT, actor, payload.model_dump())
    return {"message": "Reimbursement request submitted", "reimbursement": reimbursement_to_dict(claim)}


@router.get("")
def list_reimbursements(
    status: Optional[str] = None,
    category: Optional[str] = None,
    employeeId: Optional[str] = None,
    page: int = Query(1),
    limit: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    actor: User = Depends(get_current_user),
):
    result = lifecycle.list_requests(
        db, REIMBURSEMENT, actor,
        status=status, type_value=category, employee_id=employeeId,
        page=page, limit=limit,
    )
    return {
        "reimbursements": [reimbursement_to_dict(r) for r in result["items"]],
        "pagination": result["pagination"],
    }


@router.get("/stats")
def reimbursement_stats(db: Session = Depends(get_db), actor: User = Depends(get_current_user)):
    return request_stats(db, REIMBURSEMENT, actor)


@router.patch("/{claim_id}/approve")
def approve_reimbursement(
    claim_id: str,
    payload: Optional[ReviewRequest] = None,
    db: Session = Depends(get_db),
    actor: User = Depends(require_permission(policy.ACTION_REVIEW_REQUEST)),
):
    claim = lifecycle.review_request(db, REIMBURSEMENT, actor, claim_id, "approve", payload.comment if payload else None)
    return {"message": "Reimbursement approved successfully", "reimbursement": reimbursement_to_dict(claim)}


@router.patch("/{claim_id}/reject")
def reject_reimbursement(
    claim_id: str,
    payload: Optional[ReviewRequest] = None,
    db: Session = Depends(get_db),
    actor: User = Depends(require_permission(policy.ACTION_REVIEW_REQUEST)),
):
    claim = lifecycle.review_request(db, REIMBURSEMENT, actor, claim_id, "reject", payload.comment if payload else None)
    return {"message": "Reimbursement rejected", "reimbursement": reimbursement_to_dict(claim)}
