from __future__ import annotations

import re
from typing import Any


_EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}\b")
_PHONE_RE = re.compile(r"(?<!\d)(?:\+?\d{1,3}[-.\s]?)?(?:\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4})(?!\d)")
_LONG_DIGIT_RE = re.compile(r"\b\d{12,19}\b")

_BEARER_RE = re.compile(r"(?i)\bBearer\s+[A-Za-z0-9\-._~+/]+=*")
_STRIPE_SECRET_RE = re.compile(r"\b(?:sk|rk)_(?:live|test)_[A-Za-z0-9]{8,}\b")
_STRIPE_WEBHOOK_RE = re.compile(r"\bwhsec_[A-Za-z0-9]{8,}\b")
_STRIPE_SIGNATURE_RE = re.compile(r"\bv[01]=[0-9a-f]{16,}\b")


def mask_pii_text(text: str) -> str:
    if not text:
        return text
    out = text
    out = _EMAIL_RE.sub("[REDACTED_EMAIL]", out)
    out = _PHONE_RE.sub("[REDACTED_PHONE]", out)
    out = _LONG_DIGIT_RE.sub("[REDACTED_NUMBER]", out)
    return out


def redact_secrets_text(text: str) -> str:
    if not text:
        return text
    out = text
    out = _BEARER_RE.sub("Bearer [REDACTED_TOKEN]", out)
    out = _STRIPE_SECRET_RE.sub("[REDACTED_STRIPE_SECRET]", out)
    out = _STRIPE_WEBHOOK_RE.sub("[REDACTED_STRIPE_WEBHOOK_SECRET]", out)
    out = _STRIPE_SIGNATURE_RE.sub("[REDACTED_SIGNATURE]", out)
    return out


def sanitize_for_log(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        return redact_secrets_text(mask_pii_text(value))[:1200]
    if isinstance(value, list):
        return [sanitize_for_log(v) for v in value]
    if isinstance(value, dict):
        return {str(k)[:128]: sanitize_for_log(v) for k, v in value.items()}
    if isinstance(value, (int, float, bool)):
        return value
    return str(value)[:1200]


def redact_known_values(text: str, values: tuple[str, ...] | list[str]) -> str:
    # Exact configured secrets, whatever their shape.
    if not text:
        return text
    out = text
    for v in values:
        if v:
            out = out.replace(v, "[REDACTED_SECRET]")
    return out
