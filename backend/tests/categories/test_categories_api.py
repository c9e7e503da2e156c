"""
Tests d'intégration pour les endpoints des catégories.
"""
import pytest
from fastapi import status
from httpx import AsyncClient

from cleanops.config import settings

API_PREFIX = settings.API_V1_PREFIX

pytestmark = pytest.mark.asyncio


async def test_create_category(test_client: AsyncClient, auth_headers_assistant: dict[str, str]):
    response = await test_client.post(
        f"{API_PREFIX}/categories/",
        json={"name": "Matériel", "description": "Balais, serpillières"},
        headers=auth_headers_assistant,
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["name"] == "Matériel"
    assert data["is_active"] is True

    # La catégorie créée est relisible par son ID
    response = await test_client.get(f"{API_PREFIX}/categories/{data['id']}", headers=auth_headers_assistant)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["description"] == "Balais, serpillières"

async def test_create_category_duplicate_name(
    test_client: AsyncClient, auth_headers_assistant: dict[str, str], test_category
):
    response = await test_client.post(
        f"{API_PREFIX}/categories/", json={"name": test_category.name}, headers=auth_headers_assistant
    )
    assert response.status_code == status.HTTP_409_CONFLICT

async def test_create_category_name_too_short(test_client: AsyncClient, auth_headers_assistant: dict[str, str]):
    response = await test_client.post(f"{API_PREFIX}/categories/", json={"name": "A"}, headers=auth_headers_assistant)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"]["errors"][0]["field"] == "name"

async def test_list_categories_with_product_count(
    test_client: AsyncClient, auth_headers_assistant: dict[str, str], test_category, make_product
):
    await make_product(category_id=test_category.id)
    await make_product(category_id=test_category.id)
    await test_client.post(f"{API_PREFIX}/categories/", json={"name": "Accessoires"}, headers=auth_headers_assistant)

    response = await test_client.get(f"{API_PREFIX}/categories/", headers=auth_headers_assistant)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["total"] == 2
    assert [(c["name"], c["product_count"]) for c in data["items"]] == [("Accessoires", 0), ("Détergents", 2)]

async def test_update_category(test_client: AsyncClient, auth_headers_assistant: dict[str, str], test_category):
    response = await test_client.put(
        f"{API_PREFIX}/categories/{test_category.id}",
        json={"description": "Nouvelle description"},
        headers=auth_headers_assistant,
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["description"] == "Nouvelle description"
    assert response.json()["name"] == test_category.name

async def test_get_unknown_category(test_client: AsyncClient, auth_headers_assistant: dict[str, str]):
    response = await test_client.get(f"{API_PREFIX}/categories/999", headers=auth_headers_assistant)
    assert response.status_code == status.HTTP_404_NOT_FOUND

async def test_delete_category_in_use_is_refused(
    test_client: AsyncClient, auth_headers_admin: dict[str, str], test_category, make_product
):
    await make_product(category_id=test_category.id)
    response = await test_client.delete(f"{API_PREFIX}/categories/{test_category.id}", headers=auth_headers_admin)
    assert response.status_code == status.HTTP_400_BAD_REQUEST

async def test_delete_category(test_client: AsyncClient, auth_headers_admin: dict[str, str], test_category):
    response = await test_client.delete(f"{API_PREFIX}/categories/{test_category.id}", headers=auth_headers_admin)
    assert response.status_code == status.HTTP_204_NO_CONTENT

    response = await test_client.get(f"{API_PREFIX}/categories/{test_category.id}", headers=auth_headers_admin)
    assert response.status_code == status.HTTP_404_NOT_FOUND

async def test_delete_category_requires_admin(
    test_client: AsyncClient, auth_headers_assistant: dict[str, str], test_category
):
    response = await test_client.delete(f"{API_PREFIX}/categories/{test_category.id}", headers=auth_headers_assistant)
    assert response.status_code == status.HTTP_403_FORBIDDEN
