"""Integration tests for JWT authentication (SimpleJWT).

Validates:
  - /health is public.
  - API endpoints return 401 without, or with a bad, bearer token.
  - A token obtained from /api/v1/auth/token/ grants access.
"""

import pytest
from django.contrib.auth import get_user_model

pytestmark = pytest.mark.integration

TOKEN_URL = "/api/v1/auth/token/"
ORDERS_URL = "/api/v1/orders/"


@pytest.fixture()
def api_user():
    return get_user_model().objects.create_user(username="operator", password="s3cret-pass")


class TestPublicEndpoints:
    def test_health_is_public(self, client):
        response = client.get("/health")
        assert response.status_code == 200


class TestProtectedEndpoints:
    def test_no_token_returns_401(self, api_client):
        response = api_client.get(ORDERS_URL)
        assert response.status_code == 401
        assert "Bearer" in response.get("WWW-Authenticate", "")

    def test_invalid_token_returns_401(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION="Bearer invalid.token.here")
        assert api_client.get(ORDERS_URL).status_code == 401

    def test_malformed_auth_header_returns_401(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION="Token some-token")
        assert api_client.get(ORDERS_URL).status_code == 401


class TestTokenFlow:
    def test_obtained_token_grants_access(self, api_client, api_user):
        response = api_client.post(
            TOKEN_URL, {"username": "operator", "password": "s3cret-pass"}, format="json"
        )
        assert response.status_code == 200
        access = response.json()["access"]

        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        assert api_client.get(ORDERS_URL).status_code == 200

    def test_wrong_password_returns_401(self, api_client, api_user):
        response = api_client.post(
            TOKEN_URL, {"username": "operator", "password": "nope"}, format="json"
        )
        assert response.status_code == 401
        assert response.json()["type"] == "client_error"

    def test_refresh_returns_new_access(self, api_client, api_user):
        tokens = api_client.post(
            TOKEN_URL, {"username": "operator", "password": "s3cret-pass"}, format="json"
        ).json()

        response = api_client.post(
            f"{TOKEN_URL}refresh/", {"refresh": tokens["refresh"]}, format="json"
        )

        assert response.status_code == 200
        assert "access" in response.json()
