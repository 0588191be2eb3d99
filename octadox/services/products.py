from __future__ import annotations

import logging
from typing import Any

import stripe

from octadox.core.config import Settings
from octadox.services.stripe_service import StripeGateway, provider_error_from

logger = logging.getLogger(__name__)

FALLBACK_PRODUCT: dict[str, Any] = {
    "name": "Octadox Pre-Order",
    "description": "Per-client document automation service",
    "price": 10000,  # $100.00 in cents
    "currency": "usd",
}


async def get_product_info(
    *, settings: Settings, gateway: StripeGateway | None
) -> dict[str, Any]:
    if not settings.stripe_price_id or gateway is None:
        return dict(FALLBACK_PRODUCT)

    try:
        price = gateway.retrieve_price(settings.stripe_price_id)
    except stripe.StripeError as e:
        logger.error("Error fetching product: %s", type(e).__name__)
        raise provider_error_from(
            e,
            prefix="Failed to fetch product info",
            include_provider_message=False,
            known_secrets=(gateway.api_key,),
        ) from e

    product = getattr(price, "product", None)
    return {
        "name": getattr(product, "name", None),
        "description": getattr(product, "description", None),
        "price": getattr(price, "unit_amount", None),
        "currency": getattr(price, "currency", None),
    }
