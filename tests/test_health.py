from __future__ import annotations

from datetime import datetime

from fastapi.testclient import TestClient

from tests.conftest import TEST_PUBLISHABLE_KEY


def test_health_returns_status_and_timestamp(client: TestClient) -> None:
    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert datetime.fromisoformat(body["timestamp"]).tzinfo is not None


def test_health_echoes_incoming_correlation_id(client: TestClient) -> None:
    response = client.get("/api/health", headers={"x-correlation-id": "cid-health-echo"})
    assert response.headers.get("x-correlation-id") == "cid-health-echo"


def test_health_generates_correlation_id_when_missing(client: TestClient) -> None:
    response = client.get("/api/health")
    correlation_id = response.headers.get("x-correlation-id")
    assert correlation_id
    assert len(correlation_id) >= 8


def test_fixed_security_headers_on_every_response(client: TestClient) -> None:
    for path in ("/api/health", "/", "/app.js"):
        response = client.get(path)
        assert "default-src 'self'" in response.headers["content-security-policy"]
        assert response.headers["x-content-type-options"] == "nosniff"


def test_content_security_policy_is_configurable(make_client) -> None:
    client = make_client(CONTENT_SECURITY_POLICY="default-src 'self'")
    response = client.get("/api/health")
    assert response.headers["content-security-policy"] == "default-src 'self'"


def test_landing_page_served_at_root(client: TestClient) -> None:
    response = client.get("/")
    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert 'id="checkout-button"' in response.text
    assert 'id="success-modal"' in response.text


def test_static_assets_served(client: TestClient) -> None:
    assert client.get("/app.js").status_code == 200
    assert client.get("/styles.css").status_code == 200


def test_chrome_devtools_manifest_returns_no_content(client: TestClient) -> None:
    response = client.get("/.well-known/appspecific/com.chrome.devtools.json")
    assert response.status_code == 204


def test_public_config_exposes_only_publishable_values(client: TestClient) -> None:
    response = client.get("/api/config")

    assert response.status_code == 200
    assert response.json() == {
        "publishableKey": TEST_PUBLISHABLE_KEY,
        "contactEmail": "founders@octadox.com",
        "contactPhone": "(617) 804-5463",
        "demoMode": False,
    }
    assert "sk_test" not in response.text
    assert "whsec" not in response.text


def test_public_config_demo_mode_without_publishable_key(make_client) -> None:
    client = make_client(STRIPE_PUBLISHABLE_KEY=None)
    body = client.get("/api/config").json()
    assert body["publishableKey"] is None
    assert body["demoMode"] is True


def test_cors_allows_configured_frontend_origin(make_client) -> None:
    client = make_client(FRONTEND_URL="https://octadox.com/landing/")
    response = client.options(
        "/api/create-checkout-session",
        headers={
            "Origin": "https://octadox.com",
            "Access-Control-Request-Method": "POST",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "https://octadox.com"


def test_unhandled_error_returns_generic_body(make_client, monkeypatch) -> None:
    import octadox.routes.checkout as checkout_routes

    async def _boom(**kwargs):
        raise RuntimeError("boom sk_test_51TestSecretKeyValue0001")

    monkeypatch.setattr(checkout_routes, "get_product_info", _boom)
    client = make_client(raise_server_exceptions=False)

    response = client.get("/api/product")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_unhandled_error_keeps_fixed_headers(make_client, monkeypatch) -> None:
    import octadox.routes.checkout as checkout_routes

    async def _boom(**kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(checkout_routes, "get_product_info", _boom)
    client = make_client(raise_server_exceptions=False)

    response = client.get("/api/product", headers={"x-correlation-id": "cid-500"})

    assert response.status_code == 500
    assert response.headers["x-correlation-id"] == "cid-500"
    assert "content-security-policy" in response.headers
    assert response.headers["x-content-type-options"] == "nosniff"
