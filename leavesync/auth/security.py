import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt as _bcrypt
import jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..errors import ForbiddenError, UnauthorizedError
from ..models.models import User
from ..services import policy


pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
http_bearer = HTTPBearer(auto_error=False)

LEGACY_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    # Accounts seeded by the previous Node deployment carry bcryptjs hashes
    if hashed.startswith(LEGACY_BCRYPT_PREFIXES):
        pb = plain.encode("utf-8")[:72]
        try:
            return _bcrypt.checkpw(pb, hashed.encode("utf-8"))
        except ValueError:
            return False
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        return False


def create_access_token(user_id: str, ttl_seconds: Optional[int] = None) -> str:
    now = datetime.now(tz=timezone.utc)
    ttl = settings.jwt_ttl_seconds if ttl_seconds is None else ttl_seconds
    payload = {
        "sub": str(user_id),
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=ttl)).timestamp()),
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token expired. Please login again.")
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Invalid token.")


def resolve_user(db: Session, token: Optional[str]) -> User:
    """Turn a bearer token into an active user, or raise."""
    if not token:
        raise UnauthorizedError("Access denied. No token provided.")
    payload = decode_token(token)
    try:
        user_uuid = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise UnauthorizedError("Invalid token.")
    user = db.get(User, user_uuid)
    if user is None:
        raise UnauthorizedError("User not found. Token invalid.")
    if not user.is_active:
        raise ForbiddenError("Account is deactivated. Contact admin.")
    return user


def get_current_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer),
    db: Session = Depends(get_db),
) -> User:
    token = creds.credentials if creds is not None else None
    return resolve_user(db, token)


def require_permission(action: str):
    """Route gate: the caller's role must be allowed ``action`` by the policy table."""

    def _dep(user: User = Depends(get_current_user)):
        if not policy.can(user, action):
            raise ForbiddenError(policy.denied_message(action, user))
        return user

    return _dep
