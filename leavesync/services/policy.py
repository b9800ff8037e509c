"""
Authorization policy.

Every role decision in the service is made here. Functions are pure: they
look at the actor (and optionally a record) and return a decision, a set of
SQL criteria, or raise; they never touch the database.
"""
import uuid
from typing import List, Optional

from ..errors import ValidationError
from ..models.models import ROLE_ADMIN, ROLE_EMPLOYEE, ROLE_MANAGER, STATUS_PENDING


ACTION_CREATE_REQUEST = "requests:create"
ACTION_REVIEW_REQUEST = "requests:review"
ACTION_LIST_USERS = "users:read"
ACTION_MANAGE_USERS = "users:write"

# action -> roles allowed to perform it
ROLE_RULES = {
    ACTION_CREATE_REQUEST: (ROLE_EMPLOYEE,),
    ACTION_REVIEW_REQUEST: (ROLE_MANAGER, ROLE_ADMIN),
    ACTION_LIST_USERS: (ROLE_ADMIN, ROLE_MANAGER),
    ACTION_MANAGE_USERS: (ROLE_ADMIN,),
}


def required_roles(action: str) -> tuple:
    return ROLE_RULES[action]


def can(actor, action: str) -> bool:
    return getattr(actor, "role", None) in ROLE_RULES[action]


def denied_message(action: str, actor) -> str:
    roles = ", ".join(required_roles(action))
    return f"Access denied. Required role(s): {roles}. Your role: {getattr(actor, 'role', None)}"


def is_reviewer(actor) -> bool:
    return can(actor, ACTION_REVIEW_REQUEST)


def visibility_filter(actor, model, employee_id: Optional[uuid.UUID] = None) -> List:
    """
    Criteria restricting which request rows ``actor`` may read.

    Employees are pinned to their own rows and ``employee_id`` is ignored for
    them. Reviewers see everything; an explicit ``employee_id`` narrows the
    result but never widens access.
    """
    if not is_reviewer(actor):
        return [model.employee_id == actor.id]
    if employee_id is not None:
        return [model.employee_id == employee_id]
    return []


def can_create(actor, kind=None) -> bool:
    # Same rule for every request kind
    return can(actor, ACTION_CREATE_REQUEST)


def can_review(actor) -> bool:
    return is_reviewer(actor)


def can_view(actor, request) -> bool:
    return is_reviewer(actor) or request.employee_id == actor.id


def is_owner(actor, request) -> bool:
    return request.employee_id == actor.id


def can_delete(actor, leave) -> bool:
    return is_owner(actor, leave) and leave.status == STATUS_PENDING


def can_list_users(actor) -> bool:
    return can(actor, ACTION_LIST_USERS)


def can_manage_users(actor) -> bool:
    return can(actor, ACTION_MANAGE_USERS)


def check_toggle_self(actor, target) -> None:
    if actor.id == target.id:
        raise ValidationError("You cannot deactivate your own account")
