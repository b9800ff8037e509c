from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..db import get_db
from ..models.models import User
from ..schemas.auth import LoginRequest, ProfileUpdate, RegisterRequest
from ..schemas.serializers import user_to_dict
from . import service
from .security import get_current_user


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    user, token = service.register(db, payload)
    return {"message": "Registration successful", "token": token, "user": user_to_dict(user)}


@router.post("/login")
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user, token = service.login(db, payload.email, payload.password)
    return {"message": "Login successful", "token": token, "user": user_to_dict(user)}


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return {"user": user_to_dict(user)}


@router.put("/profile")
def update_profile(payload: ProfileUpdate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    user = service.update_profile(db, user, payload)
    return {"message": "Profile updated successfully", "user": user_to_dict(user)}
