from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from sentry_sdk.integrations.fastapi import FastApiIntegration

from octadox.core.config import Settings, load_settings
from octadox.core.errors import (
    ConfigurationError,
    ProviderError,
    SignatureVerificationError,
)
from octadox.core.logging import configure_logging, correlation_id_var
from octadox.routes.checkout import router as checkout_router
from octadox.routes.health import router as health_router
from octadox.routes.webhook import router as webhook_router
from octadox.services.error_log import log_system_error
from octadox.services.privacy import redact_secrets_text
from octadox.services.stripe_service import build_gateway, friendly_message
from octadox.services.webhooks import WebhookDispatcher

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"
CORRELATION_HEADER = "x-correlation-id"


def _init_sentry(settings: Settings) -> None:
    if not settings.sentry_dsn:
        return
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        integrations=[FastApiIntegration()],
        traces_sample_rate=settings.sentry_traces_sample_rate,
        send_default_pii=False,
        environment=settings.app_env,
    )


def _response_headers(settings: Settings) -> dict[str, str]:
    return {
        "Content-Security-Policy": settings.content_security_policy,
        "X-Content-Type-Options": "nosniff",
        "Referrer-Policy": "strict-origin-when-cross-origin",
    }


def _log_startup_summary(settings: Settings) -> None:
    logger.info("Octadox payment server listening on %s:%s", settings.host, settings.port)
    if settings.stripe_secret_key:
        logger.info("Stripe configured (%s mode key)", settings.stripe_key_mode())
    else:
        logger.warning("Missing STRIPE_SECRET_KEY")
    if settings.stripe_price_id:
        logger.info("Price ID configured")
    else:
        logger.warning("Missing STRIPE_PRICE_ID")
    if settings.stripe_webhook_secret:
        logger.info("Webhook secret configured")
    else:
        logger.warning("Webhook secret not set (unsigned events accepted in %s)", settings.app_env)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    loc = [p for p in first.get("loc", ()) if isinstance(p, str) and p != "body"]
    where = ".".join(loc)
    msg = first.get("msg") or "invalid value"
    return f"Invalid request body: {where}: {msg}" if where else f"Invalid request body: {msg}"


def _unhandled_error_response(request: Request, exc: Exception) -> JSONResponse:
    log_system_error(
        route=str(request.url.path),
        message="Unhandled server error",
        err=exc,
        meta={"method": request.method},
    )
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def _install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(request: Request, exc: ConfigurationError):
        log_system_error(
            route=str(request.url.path),
            message=exc.message,
            meta={"method": request.method},
        )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(ProviderError)
    async def provider_error_handler(request: Request, exc: ProviderError):
        settings: Settings = request.app.state.settings
        log_system_error(
            route=str(request.url.path),
            message=exc.message,
            err=exc.__cause__ or exc,
            meta={
                "kind": exc.kind.value,
                "type": exc.provider_type,
                "code": exc.provider_code,
            },
        )
        content: dict = {
            "error": redact_secrets_text(exc.message),
            "code": exc.kind.value,
            "message": friendly_message(exc.kind),
        }
        if not settings.is_production():
            content["details"] = {"type": exc.provider_type, "code": exc.provider_code}
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(SignatureVerificationError)
    async def signature_error_handler(request: Request, exc: SignatureVerificationError):
        logger.error("Webhook signature verification failed: %s", exc.message)
        return PlainTextResponse(
            status_code=exc.status_code, content=f"Webhook Error: {exc.message}"
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400, content={"error": _validation_message(exc)}
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        return _unhandled_error_response(request, exc)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)
    _init_sentry(settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        _log_startup_summary(settings)
        yield

    app = FastAPI(title="Octadox Payment Server", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.gateway = build_gateway(settings)
    app.state.dispatcher = WebhookDispatcher()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_origin()],
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    fixed_headers = _response_headers(settings)

    @app.middleware("http")
    async def correlation_and_headers(request: Request, call_next):
        cid = (request.headers.get(CORRELATION_HEADER) or "").strip()[:128] or uuid.uuid4().hex
        token = correlation_id_var.set(cid)
        try:
            response = await call_next(request)
        except Exception as exc:
            # Handled here so 500s still get the fixed headers below.
            response = _unhandled_error_response(request, exc)
        finally:
            correlation_id_var.reset(token)
        response.headers[CORRELATION_HEADER] = cid
        for name, value in fixed_headers.items():
            response.headers[name] = value
        return response

    _install_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(checkout_router, prefix="/api")
    app.include_router(webhook_router, prefix="/api")

    # Last: the landing page owns every path the API does not.
    app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="static")
    return app


app = create_app()
