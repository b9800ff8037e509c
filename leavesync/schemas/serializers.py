"""JSON shapes returned by the API (camelCase, ``_id`` identifiers)."""
from typing import Optional

from ..models.models import Leave, Reimbursement, User


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def user_to_dict(u: User) -> dict:
    return {
        "_id": str(u.id),
        "name": u.name,
        "email": u.email,
        "role": u.role,
        "department": u.department,
        "teamName": u.team_name,
        "employeeCount": u.employee_count,
        "isActive": u.is_active,
        "phone": u.phone or "",
        "bio": u.bio or "",
        "createdAt": _iso(u.created_at),
    }


def _employee_ref(u: Optional[User], fallback_id) -> Optional[dict]:
    if u is None:
        return {"_id": str(fallback_id)} if fallback_id else None
    return {"_id": str(u.id), "name": u.name, "email": u.email, "department": u.department, "role": u.role}


def _reviewer_ref(u: Optional[User], fallback_id) -> Optional[dict]:
    if u is None:
        return {"_id": str(fallback_id)} if fallback_id else None
    return {"_id": str(u.id), "name": u.name, "email": u.email}


def _review_fields(r) -> dict:
    return {
        "employeeId": _employee_ref(r.employee, r.employee_id),
        "status": r.status,
        "approvedBy": _reviewer_ref(r.reviewer, r.approved_by),
        "approverComment": r.approver_comment or "",
        "reviewedAt": _iso(r.reviewed_at),
        "createdAt": _iso(r.created_at),
        "updatedAt": _iso(r.updated_at),
    }


def leave_to_dict(r: Leave) -> dict:
    data = {
        "_id": str(r.id),
        "leaveType": r.leave_type,
        "startDate": _iso(r.start_date),
        "endDate": _iso(r.end_date),
        "totalDays": r.total_days,
        "reason": r.reason,
    }
    data.update(_review_fields(r))
    return data


def reimbursement_to_dict(r: Reimbursement) -> dict:
    data = {
        "_id": str(r.id),
        "title": r.title,
        "amount": r.amount,
        "category": r.category,
        "description": r.description,
        "expenseDate": _iso(r.expense_date),
        "receiptUrl": r.receipt_url or "",
    }
    data.update(_review_fields(r))
    return data
