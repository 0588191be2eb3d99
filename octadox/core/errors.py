from __future__ import annotations

from enum import Enum


class ProviderErrorKind(str, Enum):
    AUTHENTICATION = "provider_authentication"
    RESOURCE_MISSING = "provider_resource_missing"
    RATE_LIMITED = "provider_rate_limited"
    CONNECTION = "provider_connection"
    CARD_DECLINED = "provider_card_declined"
    INVALID_REQUEST = "provider_invalid_request"
    UNKNOWN = "provider_error"


class OctadoxError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(OctadoxError):
    """A required setting is missing. The message names the variable, never its value."""


class ProviderError(OctadoxError):
    """The payment provider rejected or failed a call."""

    def __init__(
        self,
        message: str,
        *,
        kind: ProviderErrorKind = ProviderErrorKind.UNKNOWN,
        provider_type: str | None = None,
        provider_code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.provider_type = provider_type
        self.provider_code = provider_code


class SignatureVerificationError(OctadoxError):
    """Webhook body could not be authenticated (or parsed, on the unsigned path)."""

    status_code = 400
