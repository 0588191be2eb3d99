from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from octadox.core.config import Settings
from octadox.core.errors import ConfigurationError
from octadox.services.privacy import sanitize_for_log
from octadox.services.stripe_service import decode_event, verify_webhook

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"
PAYMENT_FAILED = "payment_intent.payment_failed"


@dataclass(frozen=True)
class PreorderDetails:
    session_id: str | None
    customer_email: str | None
    amount_total: int | None
    currency: str | None
    firm_name: str | None
    phone: str | None


@dataclass(frozen=True)
class WebhookOutcome:
    event_type: str | None
    handled: bool
    preorder: PreorderDetails | None = None


PreorderHook = Callable[[PreorderDetails], None]


def parse_event(
    *, payload: bytes, sig_header: str | None, settings: Settings
) -> dict[str, Any]:
    if settings.stripe_webhook_secret:
        return verify_webhook(payload, sig_header, settings.stripe_webhook_secret)
    if settings.allows_unsigned_webhooks():
        logger.warning(
            "STRIPE_WEBHOOK_SECRET not set; accepting unsigned webhook event (%s only)",
            settings.app_env,
        )
        return decode_event(payload)
    raise ConfigurationError(
        "Stripe webhook secret not configured. Please set STRIPE_WEBHOOK_SECRET."
    )


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def custom_field_value(session: dict[str, Any], key: str) -> str | None:
    fields = session.get("custom_fields")
    if not isinstance(fields, list):
        return None
    for f in fields:
        if not isinstance(f, dict) or f.get("key") != key:
            continue
        value = _as_dict(f.get("text")).get("value")
        return value if isinstance(value, str) else None
    return None


def preorder_from_session(session: dict[str, Any]) -> PreorderDetails:
    amount = session.get("amount_total")
    return PreorderDetails(
        session_id=session.get("id"),
        customer_email=_as_dict(session.get("customer_details")).get("email"),
        amount_total=amount if isinstance(amount, int) else None,
        currency=session.get("currency"),
        firm_name=custom_field_value(session, "firm_name"),
        phone=custom_field_value(session, "phone"),
    )


@dataclass
class WebhookDispatcher:
    """Routes verified events by type. Hooks receive completed pre-orders."""

    on_preorder_completed: list[PreorderHook] = field(default_factory=list)

    def dispatch(self, event: dict[str, Any]) -> WebhookOutcome:
        etype = event.get("type")
        data = _as_dict(_as_dict(event.get("data")).get("object"))

        if etype == CHECKOUT_COMPLETED:
            return self._checkout_completed(data)
        if etype == PAYMENT_FAILED:
            error = _as_dict(data.get("last_payment_error"))
            logger.info("Payment failed: %s", error.get("message"))
            return WebhookOutcome(event_type=etype, handled=True)

        logger.info("Unhandled event type: %s", etype)
        return WebhookOutcome(event_type=etype if isinstance(etype, str) else None, handled=False)

    def _checkout_completed(self, session: dict[str, Any]) -> WebhookOutcome:
        preorder = preorder_from_session(session)
        amount = (
            preorder.amount_total / 100 if preorder.amount_total is not None else None
        )
        logger.info(
            "Payment successful! session=%s customer_email=%s amount_paid=%s",
            preorder.session_id,
            sanitize_for_log(preorder.customer_email),
            amount,
        )
        logger.info(
            "Firm name: %s, phone: %s",
            sanitize_for_log(preorder.firm_name),
            sanitize_for_log(preorder.phone),
        )

        for hook in self.on_preorder_completed:
            try:
                hook(preorder)
            except Exception:
                # Hook failures are logged; the event is still acknowledged.
                logger.exception("Pre-order hook %r failed", hook)
        return WebhookOutcome(event_type=CHECKOUT_COMPLETED, handled=True, preorder=preorder)
