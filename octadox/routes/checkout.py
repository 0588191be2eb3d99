from __future__ import annotations

from fastapi import APIRouter, Request

from octadox.core.deps import GatewayDep, SettingsDep
from octadox.schemas.checkout import (
    CreateCheckoutSessionRequest,
    CreateCheckoutSessionResponse,
    ProductInfo,
    PublicConfig,
)
from octadox.services.checkout import create_checkout_session, default_redirect_urls
from octadox.services.products import get_product_info

router = APIRouter()


@router.post("/create-checkout-session", response_model=CreateCheckoutSessionResponse)
async def create_checkout_session_route(
    settings: SettingsDep,
    gateway: GatewayDep,
    request: Request,
    body: CreateCheckoutSessionRequest | None = None,
) -> dict:
    body = body or CreateCheckoutSessionRequest()
    default_success, default_cancel = default_redirect_urls(
        settings, str(request.base_url)
    )
    session = await create_checkout_session(
        settings=settings,
        gateway=gateway,
        success_url=body.success_url or default_success,
        cancel_url=body.cancel_url or default_cancel,
        customer_email=body.customer_email,
    )
    return {"id": session.id, "url": session.url}


@router.get("/product", response_model=ProductInfo)
async def product(settings: SettingsDep, gateway: GatewayDep) -> dict:
    return await get_product_info(settings=settings, gateway=gateway)


@router.get("/config", response_model=PublicConfig, response_model_by_alias=True)
async def public_config(settings: SettingsDep) -> PublicConfig:
    # Publishable key and contact details only (no secrets).
    return PublicConfig(
        publishable_key=settings.stripe_publishable_key,
        contact_email=settings.contact_email,
        contact_phone=settings.contact_phone,
        demo_mode=not settings.stripe_publishable_key,
    )
