"""
Tests for tenant header resolution
"""

import pytest

from app.core.errors import ValidationFailed
from app.core.tenant_middleware import is_public_route, parse_tenant_header


def test_parse_valid_header():
    assert parse_tenant_header("42") == 42
    assert parse_tenant_header(" 7 ") == 7
    assert parse_tenant_header("2147483647") == 2147483647


@pytest.mark.parametrize("value", [None, "", "   "])
def test_missing_header(value):
    with pytest.raises(ValidationFailed) as exc:
        parse_tenant_header(value)
    assert exc.value.code == "tenant_header_missing"


@pytest.mark.parametrize("value", ["abc", "0", "-3", "1.5", "+5", "1_000", "2147483648", "99999999999999999999999"])
def test_invalid_header(value):
    with pytest.raises(ValidationFailed) as exc:
        parse_tenant_header(value)
    assert exc.value.code == "tenant_header_invalid"


def test_public_routes():
    assert is_public_route("GET", "/health")
    assert is_public_route("GET", "/public/quotes/abc")
    assert is_public_route("POST", "/organizations")
    assert is_public_route("GET", "/invitations/0123456789abcdef")
    assert is_public_route("POST", "/invitations/0123456789abcdef/accept")
    assert is_public_route("OPTIONS", "/quotes")
    assert not is_public_route("GET", "/quotes")
    assert not is_public_route("POST", "/invitations")
    assert not is_public_route("POST", "/public/quotes/abc")


@pytest.mark.asyncio
async def test_health_needs_no_tenant(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_tenant_route_without_header(client):
    response = await client.get("/quotes")
    assert response.status_code == 400
    assert response.json()["code"] == "tenant_header_missing"


@pytest.mark.asyncio
async def test_tenant_route_with_bad_header(client):
    response = await client.get("/quotes", headers={"X-Tenant-Id": "abc"})
    assert response.status_code == 400
    assert response.json()["code"] == "tenant_header_invalid"


@pytest.mark.asyncio
async def test_tenant_route_with_oversized_header(client):
    response = await client.get("/quotes", headers={"X-Tenant-Id": "99999999999999999999999"})
    assert response.status_code == 400
    assert response.json()["code"] == "tenant_header_invalid"
