"""Tests for category endpoints."""

import pytest


@pytest.mark.asyncio
async def test_create_category(client, admin_headers):
    response = await client.post(
        "/api/categories",
        json={"code": "frozen", "name": "Frozen Food"},
        headers=admin_headers,
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["code"] == "frozen"
    assert data["active"] is True


@pytest.mark.asyncio
async def test_create_requires_admin(client, public_headers):
    response = await client.post(
        "/api/categories", json={"code": "frozen", "name": "Frozen"}, headers=public_headers
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_invalid_code_is_400(client, admin_headers):
    response = await client.post(
        "/api/categories", json={"code": "Not Valid", "name": "X"}, headers=admin_headers
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_list_and_get(client, category, other_category, public_headers):
    listing = await client.get("/api/categories", headers=public_headers)
    single = await client.get(f"/api/categories/{other_category.id}", headers=public_headers)

    assert [c["code"] for c in listing.json()["data"]] == ["beverages", "snacks"]
    assert single.json()["data"]["name"] == "Snacks"


@pytest.mark.asyncio
async def test_get_unknown_is_404(client, public_headers):
    response = await client.get("/api/categories/77", headers=public_headers)

    assert response.status_code == 404
    assert response.json()["message"] == "Category 77 not found"


@pytest.mark.asyncio
async def test_deactivated_category_refuses_new_products(
    client, category, admin_headers, public_headers
):
    response = await client.patch(
        f"/api/categories/{category.id}", json={"active": False}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["data"]["active"] is False

    listing = await client.get("/api/categories", headers=public_headers)
    everything = await client.get(
        "/api/categories", params={"include_inactive": "true"}, headers=public_headers
    )
    created = await client.post(
        "/api/products/lifecycle",
        json={"name": "Late", "category_id": category.id, "unit_price": "1.00", "sku": "LATE-1"},
        headers=public_headers,
    )

    assert listing.json()["data"] == []
    assert [c["code"] for c in everything.json()["data"]] == ["beverages"]
    assert created.status_code == 400
    assert created.json()["message"] == f"Category {category.id} is inactive"


@pytest.mark.asyncio
async def test_update_requires_admin(client, category, public_headers):
    response = await client.patch(
        f"/api/categories/{category.id}", json={"name": "Drinks"}, headers=public_headers
    )

    assert response.status_code == 403
