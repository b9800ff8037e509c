from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6)
    role: Optional[str] = None
    department: Optional[str] = None
    team_name: Optional[str] = Field(default=None, alias="teamName")
    employee_count: Optional[int] = Field(default=None, alias="employeeCount", ge=0)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class LoginRequest(BaseModel):
    # Both optional so a missing field gets the login-specific message
    email: Optional[str] = None
    password: Optional[str] = None


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    department: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    team_name: Optional[str] = Field(default=None, alias="teamName")
    employee_count: Optional[int] = Field(default=None, alias="employeeCount", ge=0)


class RoleUpdate(BaseModel):
    role: Optional[str] = None
