from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


class CheckoutIn(BaseModel):
    """Body of POST /api/payments/checkout (camelCase, as sent by the site)."""

    model_config = ConfigDict(populate_by_name=True)

    booking_id: str = Field(..., alias="bookingId", min_length=1, max_length=64)
    amount: float = Field(..., ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    customer_name: str = Field(..., alias="customerName", min_length=1)
    customer_email: str = Field(..., alias="customerEmail")
    customer_phone: str = Field("", alias="customerPhone")
    customer_address: str = Field("", alias="customerAddress")
    customer_city: str = Field("", alias="customerCity")
    customer_country: Optional[str] = Field(None, alias="customerCountry")
    tour_name: str = Field(..., alias="tourName")


class CheckoutData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    checkout_url: str = Field(..., alias="checkoutUrl")
    form_data: Dict[str, str] = Field(..., alias="formData")


class CheckoutOut(BaseModel):
    success: bool = True
    data: CheckoutData


class NotifyOut(BaseModel):
    success: bool = True
    message: str
    payment_status: Optional[str] = None
    changed: bool = False
