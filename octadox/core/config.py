from __future__ import annotations

from pathlib import Path
from urllib.parse import urlparse

from pydantic import AnyUrl, Field
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ROOT_DIR = Path(__file__).resolve().parents[2]

# Later files win: .env.local overrides .env.
ENV_FILES = (str(ROOT_DIR / ".env"), str(ROOT_DIR / ".env.local"), ".env", ".env.local")

_PRODUCTION_ENVS = {"production", "prod"}
_LOCAL_HOSTS = {"localhost", "127.0.0.1"}

DEV_CONTENT_SECURITY_POLICY = (
    "default-src 'self' 'unsafe-inline' 'unsafe-eval' data: blob: http://localhost:* https:; "
    "connect-src 'self' http://localhost:* https: ws: wss:;"
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # App
    app_env: str = Field(default="development", alias="APP_ENV")
    frontend_url: AnyUrl | None = Field(default=None, alias="FRONTEND_URL")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    content_security_policy: str = Field(
        default=DEV_CONTENT_SECURITY_POLICY, alias="CONTENT_SECURITY_POLICY"
    )

    # Contact details shown after a successful payment
    contact_email: str = Field(default="founders@octadox.com", alias="CONTACT_EMAIL")
    contact_phone: str = Field(default="(617) 804-5463", alias="CONTACT_PHONE")

    # Observability
    sentry_dsn: str | None = Field(default=None, alias="SENTRY_DSN")
    sentry_traces_sample_rate: float = Field(
        default=0.0, alias="SENTRY_TRACES_SAMPLE_RATE"
    )

    # Stripe
    # All optional: the landing page runs in demo mode without them.
    stripe_secret_key: str | None = Field(default=None, alias="STRIPE_SECRET_KEY")
    stripe_publishable_key: str | None = Field(
        default=None, alias="STRIPE_PUBLISHABLE_KEY"
    )
    stripe_price_id: str | None = Field(default=None, alias="STRIPE_PRICE_ID")
    stripe_webhook_secret: str | None = Field(
        default=None, alias="STRIPE_WEBHOOK_SECRET"
    )

    @model_validator(mode="after")
    def validate_runtime_constraints(self) -> "Settings":
        if not (1 <= self.port <= 65535):
            raise ValueError("PORT must be between 1 and 65535")
        if not (0.0 <= self.sentry_traces_sample_rate <= 1.0):
            raise ValueError("SENTRY_TRACES_SAMPLE_RATE must be 0..1")

        if not self.is_production():
            return self

        if self.frontend_url is not None:
            host = (urlparse(str(self.frontend_url)).hostname or "").lower()
            if host in _LOCAL_HOSTS:
                raise ValueError(
                    "Invalid FRONTEND_URL for production: localhost is not allowed. "
                    "Set FRONTEND_URL to your public web domain."
                )
        if not self.stripe_webhook_secret:
            # Unsigned webhook events are a local-development convenience only.
            raise ValueError("STRIPE_WEBHOOK_SECRET is required in production.")
        return self

    def is_production(self) -> bool:
        return (self.app_env or "").strip().lower() in _PRODUCTION_ENVS

    def allows_unsigned_webhooks(self) -> bool:
        return not self.stripe_webhook_secret and not self.is_production()

    def stripe_key_mode(self) -> str:
        key = self.stripe_secret_key or ""
        if key.startswith(("sk_test_", "rk_test_")):
            return "test"
        if key.startswith(("sk_live_", "rk_live_")):
            return "live"
        return "unknown"

    def frontend_base(self) -> str | None:
        # Redirect URLs append a query string, so drop any trailing slash.
        if self.frontend_url is None:
            return None
        return str(self.frontend_url).rstrip("/")

    def frontend_origin(self) -> str:
        # CORS compares against the request's Origin (scheme+host+port).
        if self.frontend_url is None:
            return "*"
        p = urlparse(str(self.frontend_url))
        if p.scheme and p.netloc:
            return f"{p.scheme}://{p.netloc}"
        return str(self.frontend_url).rstrip("/")


def load_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
