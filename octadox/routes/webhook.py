from __future__ import annotations

import logging

from fastapi import APIRouter, Request

from octadox.core.deps import DispatcherDep, GatewayDep, SettingsDep
from octadox.core.errors import ConfigurationError
from octadox.services.webhooks import parse_event

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    settings: SettingsDep,
    gateway: GatewayDep,
    dispatcher: DispatcherDep,
) -> dict:
    if gateway is None:
        raise ConfigurationError("Stripe not configured")

    payload = await request.body()
    event = parse_event(
        payload=payload,
        sig_header=request.headers.get("stripe-signature"),
        settings=settings,
    )
    outcome = dispatcher.dispatch(event)
    logger.debug(
        "Webhook %s dispatched handled=%s", outcome.event_type, outcome.handled
    )
    return {"received": True}
