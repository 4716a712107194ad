from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class SiteSettings(BaseModel):
    """Admin settings page payload. The merchant secret is write-only."""

    model_config = ConfigDict(populate_by_name=True)

    site_name: str = Field("", alias="siteName")
    site_url: str = Field("", alias="siteUrl")
    admin_email: str = Field("", alias="adminEmail")
    contact_email: str = Field("", alias="contactEmail")
    contact_phone: str = Field("", alias="contactPhone")
    contact_address: str = Field("", alias="contactAddress")
    currency: str = Field("LKR", alias="currency")
    payhere_merchant_id: str = Field("", alias="payhereMerchantId")
    payhere_merchant_secret: Optional[str] = Field(None, alias="payhereMerchantSecret")
    payhere_sandbox: bool = Field(True, alias="payhereSandbox")
    payhere_base_url: str = Field("http://localhost:3000", alias="payhereBaseUrl")
