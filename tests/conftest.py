from __future__ import annotations

import hashlib
import hmac
import os
import time
from collections.abc import Callable, Iterator
from typing import Any

import pytest
from fastapi.testclient import TestClient

# Keep the developer's real Stripe credentials out of the test run.
for _key in (
    "STRIPE_SECRET_KEY",
    "STRIPE_PUBLISHABLE_KEY",
    "STRIPE_PRICE_ID",
    "STRIPE_WEBHOOK_SECRET",
    "SENTRY_DSN",
):
    os.environ.pop(_key, None)
os.environ["APP_ENV"] = "test"

from octadox.core.config import Settings
from octadox.main import create_app

TEST_SECRET_KEY = "sk_test_51TestSecretKeyValue0001"
TEST_PUBLISHABLE_KEY = "pk_test_51TestPublishableKey0001"
TEST_PRICE_ID = "price_test_octadox"
TEST_WEBHOOK_SECRET = "whsec_testWebhookSecretValue0001"


def build_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "APP_ENV": "test",
        "FRONTEND_URL": "http://localhost:3000",
        "STRIPE_SECRET_KEY": TEST_SECRET_KEY,
        "STRIPE_PUBLISHABLE_KEY": TEST_PUBLISHABLE_KEY,
        "STRIPE_PRICE_ID": TEST_PRICE_ID,
        "STRIPE_WEBHOOK_SECRET": TEST_WEBHOOK_SECRET,
        "SENTRY_DSN": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def stripe_signature(
    payload: bytes, *, secret: str = TEST_WEBHOOK_SECRET, timestamp: int | None = None
) -> str:
    ts = int(time.time()) if timestamp is None else timestamp
    signed = f"{ts}.{payload.decode('utf-8')}".encode("utf-8")
    digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={digest}"


@pytest.fixture
def make_client() -> Iterator[Callable[..., TestClient]]:
    opened: list[TestClient] = []

    def _make(*, raise_server_exceptions: bool = True, **overrides: Any) -> TestClient:
        app = create_app(build_settings(**overrides))
        test_client = TestClient(app, raise_server_exceptions=raise_server_exceptions)
        test_client.__enter__()
        opened.append(test_client)
        return test_client

    yield _make
    for test_client in opened:
        test_client.__exit__(None, None, None)


@pytest.fixture
def client(make_client: Callable[..., TestClient]) -> TestClient:
    return make_client()
