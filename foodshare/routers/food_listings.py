from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from foodshare import listings as listing_service
from foodshare.auth import require_role
from foodshare.database import get_db
from foodshare.models import ROLE_RESTAURANT, User
from foodshare.schemas import ListingCreate, ListingFilters, ListingSchema, ListingStatus, ListingUpdate

router = APIRouter(prefix="/api/food-listings", tags=["food-listings"])

restaurant_only = require_role(ROLE_RESTAURANT)


@router.post("", status_code=201)
async def create_listing(
    listing_in: ListingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(restaurant_only),
):
    listing = await listing_service.create_listing(db, current_user, listing_in)
    return {
        "message": "Food listing created successfully",
        "listing": ListingSchema.model_validate(listing),
    }


@router.get("/my-listings")
async def my_listings(
    status: Optional[ListingStatus] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(restaurant_only),
):
    return {"listings": await listing_service.list_own_listings(db, current_user, status)}


@router.get("/available")
async def available_listings(
    filters: Annotated[ListingFilters, Query()],
    db: AsyncSession = Depends(get_db),
):
    return {"listings": await listing_service.list_available_listings(db, filters)}


@router.get("/{listing_id}")
async def read_listing(listing_id: int, db: AsyncSession = Depends(get_db)):
    return {"listing": await listing_service.get_listing(db, listing_id)}


@router.put("/{listing_id}")
async def update_listing(
    listing_id: int,
    listing_in: ListingUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(restaurant_only),
):
    listing = await listing_service.update_listing(db, listing_id, current_user, listing_in)
    return {
        "message": "Food listing updated successfully",
        "listing": ListingSchema.model_validate(listing),
    }


@router.delete("/{listing_id}")
async def delete_listing(
    listing_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(restaurant_only),
):
    deleted = await listing_service.delete_listing(db, listing_id, current_user)
    return {"message": "Food listing deleted successfully", "deleted_listing": deleted}
