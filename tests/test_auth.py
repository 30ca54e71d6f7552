"""
Unit tests for identity extraction and JWT verification
"""

import pytest
from datetime import timedelta
from jose import jwt
from starlette.requests import Request

from app.core import dependencies
from app.core.auth import create_access_token, decode_access_token, verify_token
from app.core.config import get_settings
from app.core.dependencies import extract_identity, get_identity, verify_identity
from app.core.errors import Unauthorized

settings = get_settings()


def make_request(headers: dict) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
    }
    return Request(scope)


def test_create_and_decode_token():
    token = create_access_token("auth0|abc", email="ana@example.com", name="Ana", expires_delta=timedelta(hours=1))
    payload = decode_access_token(token)

    assert payload is not None
    assert payload["sub"] == "auth0|abc"
    assert payload["email"] == "ana@example.com"
    assert "exp" in payload
    assert verify_token(token) == "auth0|abc"


def test_expired_token_is_rejected():
    token = create_access_token("auth0|abc", expires_delta=timedelta(seconds=-1))
    assert decode_access_token(token) is None


def test_token_with_wrong_key_is_rejected():
    token = jwt.encode({"sub": "auth0|abc"}, "other-secret", algorithm=settings.JWT_ALGORITHM)
    assert verify_token(token) is None


def test_extract_identity_from_headers():
    identity = extract_identity(make_request({"X-User-Sub": "auth0|abc", "X-User-Email": "ana@example.com"}))
    assert identity.auth_provider_id == "auth0|abc"
    assert identity.email == "ana@example.com"
    assert identity.verified is False
    assert identity.actor == "ana@example.com"


def test_extract_identity_prefers_user_id_as_subject():
    identity = extract_identity(make_request({"X-User-Id": "u-1", "X-User-Sub": "auth0|abc"}))
    assert identity.subject == "u-1"
    assert identity.auth_provider_id == "auth0|abc"


def test_no_identity_headers():
    assert extract_identity(make_request({})) is None


def test_verify_identity_from_bearer():
    token = create_access_token("auth0|xyz", email="bo@example.com")
    identity = verify_identity(make_request({"Authorization": f"Bearer {token}"}))
    assert identity.verified is True
    assert identity.subject == "auth0|xyz"


def test_verify_identity_rejects_garbage():
    assert verify_identity(make_request({"Authorization": "Bearer not-a-token"})) is None
    assert verify_identity(make_request({"Authorization": "Basic abc"})) is None


@pytest.mark.asyncio
async def test_get_identity_requires_claim():
    with pytest.raises(Unauthorized):
        await get_identity(make_request({}))


@pytest.mark.asyncio
async def test_verified_mode_ignores_trusted_headers(monkeypatch):
    monkeypatch.setattr(dependencies.settings, "REQUIRE_VERIFIED_IDENTITY", True)

    with pytest.raises(Unauthorized):
        await get_identity(make_request({"X-User-Sub": "auth0|abc"}))

    token = create_access_token("auth0|abc")
    identity = await get_identity(make_request({"Authorization": f"Bearer {token}"}))
    assert identity.verified is True
