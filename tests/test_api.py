"""
API tests for the property endpoints.
Tests request/response cycles and the structured error format.
"""

import pytest
import uuid
from decimal import Decimal
from httpx import AsyncClient
from fastapi import status

from listing_service.models.user import UserRole
from tests.conftest import UserFactory, PropertyFactory, ConversationFactory

BASE_URL = "/api/v1/properties"


class TestPropertyEndpoints:
    """Tests for the property listing endpoints."""

    @pytest.mark.asyncio
    async def test_list_properties(self, async_client: AsyncClient, test_property):
        response = await async_client.get(BASE_URL)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert len(data) == 1
        assert data[0]["id"] == str(test_property.id)
        assert data[0]["owner"]["username"] == "Acme Realty"
        assert data[0]["is_wished"] is False
        assert data[0]["images"] == []

    @pytest.mark.asyncio
    async def test_list_properties_without_filter_includes_unverified(
        self,
        async_client: AsyncClient,
        property_repository,
        test_agency
    ):
        draft = await PropertyFactory.create_property(property_repository, test_agency.id, is_verified=False)

        response = await async_client.get(BASE_URL)

        assert response.status_code == status.HTTP_200_OK
        assert [item["id"] for item in response.json()] == [str(draft.id)]

        response = await async_client.get(BASE_URL, params={"filter": "active"})
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_list_properties_unknown_filter(self, async_client: AsyncClient, test_property):
        response = await async_client.get(BASE_URL, params={"filter": "sold_rented"})
        assert response.json() == []

        response = await async_client.get(BASE_URL, params={"filter": "all"})
        assert len(response.json()) == 1

    @pytest.mark.asyncio
    async def test_get_property(self, async_client: AsyncClient, test_property, test_buyer, wishlist_repository):
        await wishlist_repository.create({"user_id": test_buyer.id, "property_id": test_property.id})

        response = await async_client.get(f"{BASE_URL}/{test_property.id}", params={"user_id": str(test_buyer.id)})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["title"] == "Harbour View Loft"
        assert data["is_wished"] is True

    @pytest.mark.asyncio
    async def test_get_property_not_found(self, async_client: AsyncClient):
        response = await async_client.get(f"{BASE_URL}/{uuid.uuid4()}")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        error = response.json()["error"]
        assert error["code"] == "NOT_FOUND"
        assert error["message"].startswith("Property not found")
        assert "request_id" in error

    @pytest.mark.asyncio
    async def test_get_property_invalid_id(self, async_client: AsyncClient):
        response = await async_client.get(f"{BASE_URL}/not-a-uuid")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_create_property(self, async_client: AsyncClient, test_seller):
        payload = {
            "owner_id": str(test_seller.id),
            "title": "Canal House",
            "price": "320000.00",
            "images": [{"image_url": "https://img.example.com/canal.jpg", "is_primary": True}],
        }

        response = await async_client.post(BASE_URL, json=payload)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["title"] == "Canal House"
        assert data["currency"] == "USD"
        assert data["is_verified"] is False
        assert len(data["images"]) == 1
        assert len(data["pricing_history"]) == 1
        assert Decimal(data["pricing_history"][0]["price"]) == Decimal("320000.00")

    @pytest.mark.asyncio
    async def test_create_property_quota_exceeded(self, async_client: AsyncClient, user_repository):
        seller = await UserFactory.create_user(user_repository, role=UserRole.PRIVATE_SELLER, listing_limit=0)

        response = await async_client.post(BASE_URL, json={
            "owner_id": str(seller.id),
            "title": "One Too Many",
            "price": "1000",
        })

        assert response.status_code == status.HTTP_403_FORBIDDEN
        error = response.json()["error"]
        assert error["code"] == "QUOTA_EXCEEDED"
        assert error["message"] == "Listings limit reached"

    @pytest.mark.asyncio
    async def test_create_property_validation_error(self, async_client: AsyncClient, test_seller):
        response = await async_client.post(BASE_URL, json={
            "owner_id": str(test_seller.id),
            "price": "-5",
        })

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        fields = {detail["field"] for detail in error["details"]}
        assert "body -> title" in fields
        assert "body -> price" in fields

    @pytest.mark.asyncio
    async def test_update_property(self, async_client: AsyncClient, notifier, test_property):
        response = await async_client.put(f"{BASE_URL}/{test_property.id}", json={
            "price": "199000.00",
            "currency": "gbp",
        })

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert Decimal(data["price"]) == Decimal("199000.00")
        assert data["currency"] == "GBP"
        assert data["title"] == "Harbour View Loft"
        assert len(data["pricing_history"]) == 1

    @pytest.mark.asyncio
    async def test_update_property_not_found(self, async_client: AsyncClient):
        response = await async_client.put(f"{BASE_URL}/{uuid.uuid4()}", json={"title": "Ghost"})

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_delete_property(self, async_client: AsyncClient, test_property):
        response = await async_client.delete(f"{BASE_URL}/{test_property.id}")
        assert response.status_code == status.HTTP_204_NO_CONTENT

        response = await async_client.get(f"{BASE_URL}/{test_property.id}")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_delete_property_not_found(self, async_client: AsyncClient):
        response = await async_client.delete(f"{BASE_URL}/{uuid.uuid4()}")

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_verify_property(self, async_client: AsyncClient, property_repository, db_session, test_agency):
        draft = await PropertyFactory.create_property(property_repository, test_agency.id, is_verified=False)
        prompt = await ConversationFactory.create_prompt(db_session)
        await ConversationFactory.create_conversation(db_session, prompt.id)

        response = await async_client.post(f"{BASE_URL}/{draft.id}/verify")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["id"] == str(draft.id)
        assert data["is_verified"] is True
        assert "images" not in data

    @pytest.mark.asyncio
    async def test_verify_property_not_found(self, async_client: AsyncClient):
        response = await async_client.post(f"{BASE_URL}/{uuid.uuid4()}/verify")

        assert response.status_code == status.HTTP_404_NOT_FOUND
