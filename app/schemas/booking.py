"""
Pydantic schemas for booking requests and responses
"""
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List, Literal


class BookingCreateRequest(BaseModel):
    """Customer booking request from the booking calendar"""
    date: str = Field(..., description="Calendar date, YYYY-MM-DD or an ISO timestamp")
    time: str = Field(..., description='Slot as shown in the calendar, e.g. "2:30"')

    service_id: Optional[str] = None
    service_title: str = Field(..., min_length=1, max_length=200)

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone_number: str = Field(..., min_length=3, max_length=30)
    country: Optional[str] = Field(None, min_length=2, max_length=2, description="ISO 3166-1 alpha-2")
    gender: Literal["male", "female", "other"]

    special_requests: str = Field("", max_length=2000)
    message: str = Field("", max_length=2000)

    @field_validator("first_name", "last_name", "phone_number", "service_title")
    @classmethod
    def strip_required(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    def payload(self) -> dict:
        return self.model_dump(exclude={"date", "time", "email"})


class BookingStatusUpdateRequest(BaseModel):
    status: str = Field(..., description="pending, confirmed, cancelled or completed")


class BookingCreateResponse(BaseModel):
    success: bool = True
    message: str
    appointment: dict
    warnings: List[str] = Field(default_factory=list)
