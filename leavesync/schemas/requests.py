from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _date_part(v):
    # Accept "YYYY-MM-DD" as well as full ISO datetimes sent by browsers
    if isinstance(v, str):
        v = v.strip()
        if not v:
            return None
        return v.split("T")[0]
    return v


def _empty_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


class LeaveCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    leave_type: Optional[str] = Field(default=None, alias="leaveType")
    start_date: Optional[date] = Field(default=None, alias="startDate")
    end_date: Optional[date] = Field(default=None, alias="endDate")
    reason: Optional[str] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _dates(cls, v):
        return _date_part(v)


class ReimbursementCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    amount: Optional[float] = Field(default=None, allow_inf_nan=False)
    category: Optional[str] = None
    description: Optional[str] = None
    expense_date: Optional[date] = Field(default=None, alias="expenseDate")
    receipt_url: Optional[str] = Field(default=None, alias="receiptUrl")

    @field_validator("expense_date", mode="before")
    @classmethod
    def _expense_date(cls, v):
        return _date_part(v)

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, v):
        return _empty_to_none(v)


class ReviewRequest(BaseModel):
    comment: Optional[str] = None
