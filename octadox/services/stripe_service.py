from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

import stripe

from octadox.core.config import Settings
from octadox.core.errors import (
    ProviderError,
    ProviderErrorKind,
    SignatureVerificationError,
)
from octadox.services.privacy import redact_known_values, redact_secrets_text


@dataclass(frozen=True)
class StripeGateway:
    """
    Thin handle over the stripe library, built once per app.

    The secret key is passed on every call instead of being assigned to
    the module-level ``stripe.api_key``.
    """

    api_key: str

    def create_checkout_session(self, params: dict[str, Any]) -> Any:
        return stripe.checkout.Session.create(api_key=self.api_key, **params)

    def retrieve_price(self, price_id: str) -> Any:
        return stripe.Price.retrieve(price_id, api_key=self.api_key, expand=["product"])


def build_gateway(settings: Settings) -> StripeGateway | None:
    if not settings.stripe_secret_key:
        return None
    return StripeGateway(api_key=settings.stripe_secret_key)


def verify_webhook(payload: bytes, sig_header: str | None, secret: str) -> dict[str, Any]:
    try:
        body = payload.decode("utf-8")
        stripe.WebhookSignature.verify_header(
            body, sig_header or "", secret, tolerance=stripe.Webhook.DEFAULT_TOLERANCE
        )
    except stripe.SignatureVerificationError as e:
        raise SignatureVerificationError(e.user_message or str(e)) from e
    except UnicodeDecodeError as e:
        raise SignatureVerificationError("Invalid payload encoding") from e
    return decode_event(body)


def decode_event(body: str | bytes) -> dict[str, Any]:
    try:
        event = json.loads(body)
    except ValueError as e:
        raise SignatureVerificationError(f"Invalid payload: {e}") from e
    if not isinstance(event, dict):
        raise SignatureVerificationError("Invalid payload: expected a JSON object")
    return event


_CODE_KINDS: dict[str, ProviderErrorKind] = {
    "api_key_expired": ProviderErrorKind.AUTHENTICATION,
    "secret_key_required": ProviderErrorKind.AUTHENTICATION,
    "resource_missing": ProviderErrorKind.RESOURCE_MISSING,
    "rate_limit": ProviderErrorKind.RATE_LIMITED,
    "card_declined": ProviderErrorKind.CARD_DECLINED,
    "expired_card": ProviderErrorKind.CARD_DECLINED,
    "insufficient_funds": ProviderErrorKind.CARD_DECLINED,
}

_FRIENDLY_MESSAGES: dict[ProviderErrorKind, str] = {
    ProviderErrorKind.AUTHENTICATION: (
        "Payments are temporarily unavailable. Please contact us directly."
    ),
    ProviderErrorKind.RESOURCE_MISSING: (
        "Payment session error. Please ensure your Stripe keys are correctly "
        "configured and from the same account."
    ),
    ProviderErrorKind.RATE_LIMITED: "Too many payment attempts. Please wait a moment and try again.",
    ProviderErrorKind.CONNECTION: "Could not reach the payment provider. Please try again.",
    ProviderErrorKind.CARD_DECLINED: "Your card was declined. Please try a different card.",
    ProviderErrorKind.INVALID_REQUEST: (
        "Something went wrong. Please try again or contact us directly."
    ),
    ProviderErrorKind.UNKNOWN: "Something went wrong. Please try again or contact us directly.",
}


def classify_provider_error(exc: BaseException) -> ProviderErrorKind:
    if isinstance(exc, (stripe.AuthenticationError, stripe.PermissionError)):
        return ProviderErrorKind.AUTHENTICATION
    if isinstance(exc, stripe.RateLimitError):
        return ProviderErrorKind.RATE_LIMITED
    if isinstance(exc, stripe.APIConnectionError):
        return ProviderErrorKind.CONNECTION
    if isinstance(exc, stripe.CardError):
        return ProviderErrorKind.CARD_DECLINED

    code = getattr(exc, "code", None)
    if isinstance(code, str) and code in _CODE_KINDS:
        return _CODE_KINDS[code]
    if isinstance(exc, stripe.InvalidRequestError):
        return ProviderErrorKind.INVALID_REQUEST
    return ProviderErrorKind.UNKNOWN


def friendly_message(kind: ProviderErrorKind) -> str:
    return _FRIENDLY_MESSAGES.get(kind, _FRIENDLY_MESSAGES[ProviderErrorKind.UNKNOWN])


def provider_error_from(
    exc: stripe.StripeError,
    *,
    prefix: str,
    include_provider_message: bool = True,
    known_secrets: tuple[str, ...] = (),
) -> ProviderError:
    kind = classify_provider_error(exc)
    message = prefix
    if include_provider_message:
        detail = redact_secrets_text(
            redact_known_values(exc.user_message or "", known_secrets)
        )
        if detail:
            message = f"{prefix}: {detail}"
    error_type = getattr(exc.error, "type", None) if exc.error is not None else None
    return ProviderError(
        message,
        kind=kind,
        provider_type=error_type or type(exc).__name__,
        provider_code=exc.code,
    )
