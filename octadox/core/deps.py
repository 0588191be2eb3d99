from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from octadox.core.config import Settings
from octadox.services.stripe_service import StripeGateway
from octadox.services.webhooks import WebhookDispatcher


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_gateway(request: Request) -> StripeGateway | None:
    return request.app.state.gateway


def get_dispatcher(request: Request) -> WebhookDispatcher:
    return request.app.state.dispatcher


SettingsDep = Annotated[Settings, Depends(get_settings)]
GatewayDep = Annotated[StripeGateway | None, Depends(get_gateway)]
DispatcherDep = Annotated[WebhookDispatcher, Depends(get_dispatcher)]
