from typing import Optional
from pydantic import BaseModel, Field


class BookingCreate(BaseModel):
    tour_package_id: str
    tour_package_name: str
    customer_name: str = Field(..., min_length=1)
    customer_email: str
    customer_phone: str = ""
    start_date: Optional[str] = None  # ISO 8601 date
    end_date: Optional[str] = None
    guests: int = Field(1, ge=1)
    total_price: Optional[float] = Field(None, ge=0)
    special_requests: str = ""


class BookingUpdate(BaseModel):
    """Admin edits. Payment status only changes through verified notifications."""

    tour_package_id: Optional[str] = None
    tour_package_name: Optional[str] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    guests: Optional[int] = Field(None, ge=1)
    total_price: Optional[float] = Field(None, ge=0)
    status: Optional[str] = Field(None, pattern="^(pending|confirmed|cancelled|completed)$")
    special_requests: Optional[str] = None
