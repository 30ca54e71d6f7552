"""
Tests for unauthenticated quote links
"""

import pytest


async def create_quote(client, member):
    payload = {
        "customer_name": "Constructora Sur",
        "notes": "Validez 15 días",
        "items": [{"description": "Cemento", "quantity": "2", "unit_price": "50.25", "tax_rate": "0.1"}],
        "additional_charges": [{"type": "Flete", "amount": "5"}],
    }
    response = await client.post("/quotes", json=payload, headers=member.headers)
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_public_quote_is_sanitized(client, owner):
    quote = await create_quote(client, owner)

    response = await client.get(f"/public/quotes/{quote['public_id']}")

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == quote["id"]
    assert body["total"] == 115.55
    assert body["items"][0]["quantity"] == 2
    assert body["items"][0]["discount"] is None
    assert body["additional_charges"][0]["amount"] == 5
    assert "tenant_id" not in body
    assert "public_id" not in body
    assert "customer_id" not in body


@pytest.mark.asyncio
async def test_disabled_and_unknown_links_look_the_same(client, owner):
    quote = await create_quote(client, owner)
    await client.post(f"/quotes/{quote['id']}/public/enable", json={"enabled": False}, headers=owner.headers)

    disabled = await client.get(f"/public/quotes/{quote['public_id']}")
    unknown = await client.get("/public/quotes/does-not-exist")

    assert disabled.status_code == unknown.status_code == 404
    assert disabled.json() == unknown.json()


@pytest.mark.asyncio
async def test_regenerated_link_retires_old_id(client, owner):
    quote = await create_quote(client, owner)
    link = (await client.post(f"/quotes/{quote['id']}/regenerate-public-link", headers=owner.headers)).json()

    assert (await client.get(f"/public/quotes/{quote['public_id']}")).status_code == 404
    assert (await client.get(f"/public/quotes/{link['public_id']}")).status_code == 200
