from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
import stripe
from fastapi.testclient import TestClient

from tests.conftest import TEST_PRICE_ID, TEST_SECRET_KEY

FALLBACK = {
    "name": "Octadox Pre-Order",
    "price": 10000,
    "currency": "usd",
    "description": "Per-client document automation service",
}


@pytest.mark.parametrize(
    "overrides",
    [{"STRIPE_PRICE_ID": None}, {"STRIPE_SECRET_KEY": None}],
)
def test_product_fallback_without_provider_config(
    make_client, monkeypatch, overrides: dict
) -> None:
    retrieve = MagicMock()
    monkeypatch.setattr(stripe.Price, "retrieve", retrieve)
    client = make_client(**overrides)

    response = client.get("/api/product")

    assert response.status_code == 200
    assert response.json() == FALLBACK
    retrieve.assert_not_called()


def test_product_maps_provider_price(client: TestClient, monkeypatch) -> None:
    retrieve = MagicMock(
        return_value=SimpleNamespace(
            unit_amount=12500,
            currency="usd",
            product=SimpleNamespace(
                name="Octadox Founding Client", description="Founding client seat"
            ),
        )
    )
    monkeypatch.setattr(stripe.Price, "retrieve", retrieve)

    response = client.get("/api/product")

    assert response.status_code == 200
    assert response.json() == {
        "name": "Octadox Founding Client",
        "description": "Founding client seat",
        "price": 12500,
        "currency": "usd",
    }
    retrieve.assert_called_once_with(
        TEST_PRICE_ID, api_key=TEST_SECRET_KEY, expand=["product"]
    )


def test_product_provider_failure_is_generic_500(client: TestClient, monkeypatch) -> None:
    def _raise(*args, **kwargs):
        raise stripe.InvalidRequestError(
            "No such price: 'price_test_octadox'", "id", code="resource_missing"
        )

    monkeypatch.setattr(stripe.Price, "retrieve", _raise)

    response = client.get("/api/product")

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to fetch product info"
