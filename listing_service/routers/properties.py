"""
Property listing API endpoints.
Thin HTTP layer over ListingService; errors are rendered by the app exception handlers.
"""

from fastapi import APIRouter, Depends, Query, Path, Response, status
from typing import Optional, List
from uuid import UUID

from listing_service.services.listing import ListingService
from listing_service.schemas.property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    PropertyDetails,
    PropertyWithRelations
)
from listing_service.utils.dependencies import get_listing_service


router = APIRouter(prefix="/properties", tags=["Properties"])


@router.get(
    "",
    response_model=List[PropertyWithRelations],
    summary="List properties",
    description="List verified properties by status, or every property for any other filter value"
)
async def list_properties(
    filter_param: Optional[str] = Query(
        None,
        alias="filter",
        description="active, sold_rented or inactive; anything else disables filtering"
    ),
    user_id: Optional[UUID] = Query(None, description="Viewing user for the wishlist flag"),
    listing_service: ListingService = Depends(get_listing_service)
) -> List[PropertyWithRelations]:
    return await listing_service.get_properties(filter_param, user_id)


@router.get(
    "/{property_id}",
    response_model=PropertyWithRelations,
    summary="Get property"
)
async def get_property(
    property_id: UUID = Path(..., description="Property ID"),
    user_id: Optional[UUID] = Query(None, description="Viewing user for the wishlist flag"),
    listing_service: ListingService = Depends(get_listing_service)
) -> PropertyWithRelations:
    return await listing_service.get_property(property_id, user_id)


@router.post(
    "",
    response_model=PropertyDetails,
    status_code=status.HTTP_201_CREATED,
    summary="Create property",
    description="Create a listing; private sellers consume one unit of their listing limit"
)
async def create_property(
    property_data: PropertyCreate,
    listing_service: ListingService = Depends(get_listing_service)
) -> PropertyDetails:
    return await listing_service.add_new_property(property_data)


@router.put(
    "/{property_id}",
    response_model=PropertyWithRelations,
    summary="Update property",
    description="Partially update a listing; a supplied image list replaces the existing set"
)
async def update_property(
    property_data: PropertyUpdate,
    property_id: UUID = Path(..., description="Property ID"),
    listing_service: ListingService = Depends(get_listing_service)
) -> PropertyWithRelations:
    return await listing_service.update_property(property_id, property_data)


@router.delete(
    "/{property_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete property"
)
async def delete_property(
    property_id: UUID = Path(..., description="Property ID"),
    listing_service: ListingService = Depends(get_listing_service)
) -> Response:
    await listing_service.delete_property(property_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{property_id}/verify",
    response_model=PropertyResponse,
    summary="Verify property",
    description="Mark a listing as verified and add it to active assistant conversations"
)
async def verify_property(
    property_id: UUID = Path(..., description="Property ID"),
    listing_service: ListingService = Depends(get_listing_service)
) -> PropertyResponse:
    return await listing_service.verify_property(property_id)
