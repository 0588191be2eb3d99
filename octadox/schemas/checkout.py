from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CreateCheckoutSessionRequest(BaseModel):
    # Older page builds also send priceId; the server-side price always wins.
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    success_url: str | None = Field(default=None, alias="successUrl", max_length=2048)
    cancel_url: str | None = Field(default=None, alias="cancelUrl", max_length=2048)
    customer_email: str | None = Field(
        default=None, alias="customerEmail", max_length=320
    )

    @field_validator("success_url", "cancel_url", "customer_email", mode="before")
    @classmethod
    def _blank_to_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v


class CreateCheckoutSessionResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")
    id: str
    url: str | None


class ProductInfo(BaseModel):
    name: str | None
    description: str | None
    price: int | None
    currency: str | None


class PublicConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    publishable_key: str | None = Field(alias="publishableKey")
    contact_email: str = Field(alias="contactEmail")
    contact_phone: str = Field(alias="contactPhone")
    demo_mode: bool = Field(alias="demoMode")
