"""
Authentication gate: registration, credential login and profile edits.

Token verification lives in ``security.resolve_user`` so the FastAPI
dependency and this module share one implementation.
"""
import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import ConflictError, ForbiddenError, UnauthorizedError, ValidationError
from ..models.models import User, ROLES, ROLE_ADMIN, ROLE_EMPLOYEE
from ..schemas.auth import ProfileUpdate, RegisterRequest
from .security import create_access_token, get_password_hash, verify_password


log = structlog.get_logger(__name__)

DEFAULT_DEPARTMENT = "General"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def register(db: Session, req: RegisterRequest) -> tuple:
    email = normalize_email(req.email)
    if db.query(User).filter(User.email == email).first():
        raise ConflictError("Email already registered")

    # Self-registration can never grant admin
    role = req.role or ROLE_EMPLOYEE
    if role == ROLE_ADMIN:
        role = ROLE_EMPLOYEE
    if role not in ROLES:
        raise ValidationError("Invalid role")

    user = User(
        name=req.name,
        email=email,
        password_hash=get_password_hash(req.password),
        role=role,
        department=(req.department or "").strip() or DEFAULT_DEPARTMENT,
        team_name=req.team_name,
        employee_count=req.employee_count,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        db.rollback()
        raise ConflictError("Email already registered")
    db.refresh(user)
    log.info("user_registered", user_id=str(user.id), role=user.role, requested_role=req.role)
    return user, create_access_token(str(user.id))


def login(db: Session, email: str, password: str) -> tuple:
    if not email or not password:
        raise ValidationError("Email and password are required")
    user = db.query(User).filter(User.email == normalize_email(email)).first()
    # Same message for unknown email and wrong password
    if user is None or not verify_password(password, user.password_hash):
        log.info("login_failed", email=normalize_email(email))
        raise UnauthorizedError("Invalid credentials")
    if not user.is_active:
        raise ForbiddenError("Account deactivated. Contact admin.")
    return user, create_access_token(str(user.id))


def update_profile(db: Session, user: User, req: ProfileUpdate) -> User:
    if req.name and req.name.strip():
        user.name = req.name.strip()
    if req.department and req.department.strip():
        user.department = req.department.strip()
    if req.phone is not None:
        user.phone = req.phone.strip()
    if req.bio is not None:
        user.bio = req.bio.strip()
    if req.team_name is not None:
        user.team_name = req.team_name.strip()
    if req.employee_count is not None:
        user.employee_count = req.employee_count
    db.commit()
    db.refresh(user)
    return user
