from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import stripe

from octadox.core.config import Settings
from octadox.core.errors import ConfigurationError, ProviderError
from octadox.services.stripe_service import StripeGateway, provider_error_from

logger = logging.getLogger(__name__)

PREORDER_METADATA = {"product": "octadox_preorder", "price_per_client": "100"}

CUSTOM_FIELDS: list[dict[str, Any]] = [
    {
        "key": "firm_name",
        "label": {"type": "custom", "custom": "Law Firm Name"},
        "type": "text",
    },
    {
        "key": "phone",
        "label": {"type": "custom", "custom": "Phone Number"},
        "type": "text",
    },
]


@dataclass(frozen=True)
class CheckoutSessionResult:
    id: str
    url: str | None


def default_redirect_urls(settings: Settings, fallback_base: str) -> tuple[str, str]:
    base = settings.frontend_base() or fallback_base.rstrip("/")
    return f"{base}?payment=success", f"{base}?payment=cancelled"


def build_session_params(
    *,
    price_id: str,
    success_url: str,
    cancel_url: str,
    customer_email: str | None = None,
) -> dict[str, Any]:
    params: dict[str, Any] = {
        "payment_method_types": ["card"],
        "line_items": [{"price": price_id, "quantity": 1}],
        "mode": "payment",
        "success_url": success_url,
        "cancel_url": cancel_url,
        "billing_address_collection": "required",
        "custom_fields": [dict(f) for f in CUSTOM_FIELDS],
        "metadata": dict(PREORDER_METADATA),
        "allow_promotion_codes": True,
    }
    if customer_email:
        params["customer_email"] = customer_email
    return params


async def create_checkout_session(
    *,
    settings: Settings,
    gateway: StripeGateway | None,
    success_url: str,
    cancel_url: str,
    customer_email: str | None = None,
) -> CheckoutSessionResult:
    if gateway is None or not settings.stripe_secret_key:
        raise ConfigurationError(
            "Stripe secret key not configured. Please set STRIPE_SECRET_KEY in your .env file."
        )
    if not settings.stripe_price_id:
        raise ConfigurationError(
            "Stripe price ID not configured. Please set STRIPE_PRICE_ID in your .env file."
        )

    logger.info(
        "Creating checkout session with %s mode key", settings.stripe_key_mode()
    )

    params = build_session_params(
        price_id=settings.stripe_price_id,
        success_url=success_url,
        cancel_url=cancel_url,
        customer_email=customer_email,
    )
    try:
        session = gateway.create_checkout_session(params)
    except stripe.StripeError as e:
        raise provider_error_from(
            e,
            prefix="Failed to create checkout session",
            known_secrets=(gateway.api_key,),
        ) from e

    session_id = getattr(session, "id", None)
    if not session_id:
        raise ProviderError(
            "Failed to create checkout session: No session ID returned"
        )

    logger.info(
        "Checkout session created id=%s mode=%s payment_status=%s",
        session_id,
        getattr(session, "mode", None),
        getattr(session, "payment_status", None),
    )
    url = getattr(session, "url", None)
    return CheckoutSessionResult(id=str(session_id), url=str(url) if url else None)
