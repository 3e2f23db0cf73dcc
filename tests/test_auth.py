"""
Tests for the shared bearer-token check and the /api/* middleware.
"""

import json

import pytest
from fastapi.testclient import TestClient

from jdqna.config import settings
from jdqna.services.auth import is_protected_path, verify_api_auth


def _body(response):
    return json.loads(response.body)


def test_missing_header_is_401():
    resp = verify_api_auth(None, expected_token="secret")
    assert resp.status_code == 401
    assert _body(resp) == {"success": False, "error": "Authentication required"}


def test_header_without_bearer_prefix_is_401():
    resp = verify_api_auth("Token secret", expected_token="secret")
    assert resp.status_code == 401


def test_wrong_token_is_403():
    resp = verify_api_auth("Bearer nope", expected_token="secret")
    assert resp.status_code == 403
    assert _body(resp)["error"] == "Invalid authentication token"


def test_correct_token_passes_through():
    assert verify_api_auth("Bearer secret", expected_token="secret") is None


def test_unconfigured_token_is_500(monkeypatch):
    monkeypatch.setattr(settings, "auth_token", None)
    resp = verify_api_auth("Bearer anything")
    assert resp.status_code == 500
    assert _body(resp)["error"] == "API authentication not configured"


@pytest.mark.parametrize(
    "path,protected",
    [
        ("/api/records", True),
        ("/api/public/ping", False),
        ("/", False),
        ("/docs", False),
    ],
)
def test_protected_paths(path, protected):
    assert is_protected_path(path) is protected


def test_api_requires_auth(client: TestClient):
    response = client.get("/api/records")
    assert response.status_code == 401
    assert response.json()["success"] is False


def test_api_rejects_wrong_token(client: TestClient):
    response = client.get("/api/records", headers={"Authorization": "Bearer wrong"})
    assert response.status_code == 403


def test_api_accepts_valid_token(client: TestClient, auth_headers: dict):
    response = client.get("/api/records", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"success": True, "records": []}


def test_health_is_public(client: TestClient):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"ok": True}
