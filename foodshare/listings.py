import logging
from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy import case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from foodshare.crud import require_profile
from foodshare.models import (
    CLAIM_APPROVED, CLAIM_PENDING, LISTING_AVAILABLE,
    FoodClaim, FoodListing, Restaurant, User,
)
from foodshare.schemas import (
    ListingCreate, ListingFilters, ListingSchema, ListingUpdate, check_pickup_window,
)
from foodshare.utils import haversine_km, utcnow

logger = logging.getLogger(__name__)

NON_NULLABLE_FIELDS = {
    "title", "quantity", "unit", "expiry_date", "pickup_time_start", "pickup_time_end", "status",
}

SORT_ORDERS = {
    "expiry":   (FoodListing.expiry_date.asc(), FoodListing.id.asc()),
    "quantity": (FoodListing.quantity.desc(), FoodListing.id.asc()),
    "created":  (FoodListing.created_at.desc(), FoodListing.id.desc()),
}


def public_listing(listing: FoodListing, restaurant: Restaurant, owner: User,
                   distance: Optional[float] = None) -> dict:
    data = ListingSchema.model_validate(listing).model_dump()
    data.update(
        restaurant_name=restaurant.name,
        address=restaurant.address,
        latitude=restaurant.latitude,
        longitude=restaurant.longitude,
        phone=restaurant.phone,
        cuisine_type=restaurant.cuisine_type,
        first_name=owner.first_name,
        last_name=owner.last_name,
        email=owner.email,
        distance=distance,
    )
    return data


async def create_listing(db: AsyncSession, user: User, listing_in: ListingCreate) -> FoodListing:
    restaurant = await require_profile(db, Restaurant, user.id, status_code=400)
    listing = FoodListing(restaurant_id=restaurant.id, status=LISTING_AVAILABLE, **listing_in.model_dump())
    db.add(listing)
    await db.commit()
    await db.refresh(listing)
    logger.info(f"Restaurant {restaurant.id} created listing {listing.id}")
    return listing


async def list_own_listings(db: AsyncSession, user: User, status: Optional[str] = None) -> List[dict]:
    query = (
        select(
            FoodListing,
            Restaurant.name,
            func.count(FoodClaim.id).label("total_claims"),
            func.count(case((FoodClaim.status == CLAIM_PENDING, FoodClaim.id))).label("pending_claims"),
            func.count(case((FoodClaim.status == CLAIM_APPROVED, FoodClaim.id))).label("approved_claims"),
        )
        .join(Restaurant, FoodListing.restaurant_id == Restaurant.id)
        .outerjoin(FoodClaim, FoodClaim.food_listing_id == FoodListing.id)
        .where(Restaurant.user_id == user.id)
        .group_by(FoodListing.id, Restaurant.name)
        .order_by(FoodListing.created_at.desc(), FoodListing.id.desc())
    )
    if status:
        query = query.where(FoodListing.status == status)

    result = await db.execute(query)
    listings = []
    for listing, restaurant_name, total, pending, approved in result.all():
        data = ListingSchema.model_validate(listing).model_dump()
        data.update(
            restaurant_name=restaurant_name,
            total_claims=total,
            pending_claims=pending,
            approved_claims=approved,
        )
        listings.append(data)
    return listings


async def list_available_listings(db: AsyncSession, filters: ListingFilters) -> List[dict]:
    """
    Listings still open for claims: available, not expired, pickup window not closed.

    Distance is only computed when the caller supplies both coordinates; the
    radius filter runs on the computed distances.
    """
    now = utcnow()
    query = (
        select(FoodListing, Restaurant, User)
        .join(Restaurant, FoodListing.restaurant_id == Restaurant.id)
        .join(User, Restaurant.user_id == User.id)
        .where(
            FoodListing.status == LISTING_AVAILABLE,
            FoodListing.expiry_date > now,
            FoodListing.pickup_time_end > now,
        )
    )
    if filters.search:
        pattern = f"%{filters.search}%"
        query = query.where(or_(
            FoodListing.title.ilike(pattern),
            FoodListing.description.ilike(pattern),
            Restaurant.name.ilike(pattern),
        ))
    if filters.food_type:
        query = query.where(FoodListing.food_type.ilike(f"%{filters.food_type}%"))
    if filters.min_quantity is not None:
        query = query.where(FoodListing.quantity >= filters.min_quantity)
    if filters.max_quantity is not None:
        query = query.where(FoodListing.quantity <= filters.max_quantity)

    query = query.order_by(*SORT_ORDERS.get(filters.sort_by, SORT_ORDERS["created"]))
    result = await db.execute(query)

    has_origin = filters.latitude is not None and filters.longitude is not None
    listings = []
    for listing, restaurant, owner in result.all():
        distance = None
        if has_origin and restaurant.latitude is not None and restaurant.longitude is not None:
            distance = round(
                haversine_km(filters.latitude, filters.longitude, restaurant.latitude, restaurant.longitude),
                2,
            )
        if has_origin and filters.max_distance is not None:
            if distance is None or distance > filters.max_distance:
                continue
        listings.append(public_listing(listing, restaurant, owner, distance))

    if filters.sort_by == "distance" and has_origin:
        # unknown distances go last
        listings.sort(key=lambda l: (l["distance"] is None, l["distance"] or 0.0, l["id"]))
    return listings


async def get_listing(db: AsyncSession, listing_id: int) -> dict:
    result = await db.execute(
        select(FoodListing, Restaurant, User)
        .join(Restaurant, FoodListing.restaurant_id == Restaurant.id)
        .join(User, Restaurant.user_id == User.id)
        .where(FoodListing.id == listing_id)
    )
    row = result.first()
    if not row:
        raise HTTPException(status_code=404, detail="Food listing not found")
    return public_listing(*row)


async def get_owned_listing(db: AsyncSession, listing_id: int, user: User) -> FoodListing:
    result = await db.execute(
        select(FoodListing, Restaurant.user_id)
        .join(Restaurant, FoodListing.restaurant_id == Restaurant.id)
        .where(FoodListing.id == listing_id)
    )
    row = result.first()
    if not row:
        raise HTTPException(status_code=404, detail="Food listing not found")
    listing, owner_id = row
    if owner_id != user.id:
        raise HTTPException(status_code=403, detail="You can only modify your own food listings")
    return listing


async def update_listing(db: AsyncSession, listing_id: int, user: User, listing_in: ListingUpdate) -> FoodListing:
    listing = await get_owned_listing(db, listing_id, user)
    changes = listing_in.model_dump(exclude_unset=True)
    for key, value in changes.items():
        if value is None and key in NON_NULLABLE_FIELDS:
            raise HTTPException(status_code=400, detail=f"{key} cannot be null")

    try:
        check_pickup_window(
            changes.get("pickup_time_start", listing.pickup_time_start),
            changes.get("pickup_time_end", listing.pickup_time_end),
            changes.get("expiry_date", listing.expiry_date),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    for key, value in changes.items():
        setattr(listing, key, value)
    await db.commit()
    await db.refresh(listing)
    return listing


async def delete_listing(db: AsyncSession, listing_id: int, user: User) -> dict:
    listing = await get_owned_listing(db, listing_id, user)
    deleted = {"id": listing.id, "title": listing.title}
    await db.delete(listing)
    await db.commit()
    logger.info(f"Listing {deleted['id']} deleted by user {user.id}")
    return deleted
