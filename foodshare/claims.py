"""
Claim lifecycle.

    pending  -> approved | rejected      (restaurant owning the listing)
    approved -> completed | cancelled    (claiming organization)
    approved -> completed                (assigned volunteer)

rejected, completed and cancelled are terminal. Approving a claim marks its
listing ``claimed``; completing it marks the listing ``completed``.
"""

import logging
from typing import List, Optional

from fastapi import HTTPException
from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from foodshare.crud import get_profile, require_profile
from foodshare.models import (
    CLAIM_APPROVED, CLAIM_CANCELLED, CLAIM_COMPLETED, CLAIM_PENDING, CLAIM_REJECTED,
    LISTING_AVAILABLE, LISTING_CLAIMED, LISTING_COMPLETED,
    ROLE_ORGANIZATION, ROLE_RESTAURANT,
    FoodClaim, FoodListing, Organization, Restaurant, User, Volunteer,
)
from foodshare.notifications import CLAIM_APPROVED as CLAIM_APPROVED_EVENT
from foodshare.notifications import CLAIM_CREATED, CLAIM_REJECTED as CLAIM_REJECTED_EVENT
from foodshare.notifications import notify
from foodshare.schemas import ClaimCreate, ClaimStatusUpdate
from foodshare.utils import utcnow

logger = logging.getLogger(__name__)

# status a caller may request -> status the claim must currently be in
TRANSITIONS = {
    CLAIM_APPROVED: CLAIM_PENDING,
    CLAIM_REJECTED: CLAIM_PENDING,
    CLAIM_COMPLETED: CLAIM_APPROVED,
    CLAIM_CANCELLED: CLAIM_APPROVED,
}

ROLE_TRANSITIONS = {
    ROLE_RESTAURANT: ({CLAIM_APPROVED, CLAIM_REJECTED}, "Restaurants can only approve or reject claims"),
    ROLE_ORGANIZATION: ({CLAIM_COMPLETED, CLAIM_CANCELLED}, "Organizations can only mark claims as completed or cancelled"),
}

LISTING_CASCADE = {
    CLAIM_APPROVED: LISTING_CLAIMED,
    CLAIM_COMPLETED: LISTING_COMPLETED,
}

CLAIM_LOAD_OPTIONS = (
    selectinload(FoodClaim.listing).selectinload(FoodListing.restaurant).selectinload(Restaurant.user),
    selectinload(FoodClaim.organization).selectinload(Organization.user),
)


def claim_detail(claim: FoodClaim) -> dict:
    listing = claim.listing
    restaurant = listing.restaurant
    organization = claim.organization
    return {
        "id": claim.id,
        "food_listing_id": claim.food_listing_id,
        "organization_id": claim.organization_id,
        "claimed_quantity": claim.claimed_quantity,
        "pickup_scheduled_time": claim.pickup_scheduled_time,
        "notes": claim.notes,
        "status": claim.status,
        "volunteer_id": claim.volunteer_id,
        "volunteer_notes": claim.volunteer_notes,
        "volunteer_assigned_at": claim.volunteer_assigned_at,
        "volunteer_completed_at": claim.volunteer_completed_at,
        "created_at": claim.created_at,
        "updated_at": claim.updated_at,
        "title": listing.title,
        "description": listing.description,
        "food_type": listing.food_type,
        "total_quantity": listing.quantity,
        "unit": listing.unit,
        "expiry_date": listing.expiry_date,
        "pickup_time_start": listing.pickup_time_start,
        "pickup_time_end": listing.pickup_time_end,
        "special_instructions": listing.special_instructions,
        "listing_status": listing.status,
        "restaurant_name": restaurant.name,
        "restaurant_address": restaurant.address,
        "restaurant_phone": restaurant.phone,
        "restaurant_latitude": restaurant.latitude,
        "restaurant_longitude": restaurant.longitude,
        "restaurant_contact_email": restaurant.user.email,
        "organization_name": organization.name,
        "organization_type": organization.type,
        "organization_address": organization.address,
        "organization_phone": organization.phone,
        "organization_latitude": organization.latitude,
        "organization_longitude": organization.longitude,
        "organization_contact_email": organization.user.email,
    }


async def load_claims(db: AsyncSession, *criteria, order_by=None, limit: Optional[int] = None) -> List[dict]:
    if order_by is None:
        order_by = (FoodClaim.created_at.desc(), FoodClaim.id.desc())
    query = (
        select(FoodClaim)
        .join(FoodListing, FoodClaim.food_listing_id == FoodListing.id)
        .join(Restaurant, FoodListing.restaurant_id == Restaurant.id)
        .join(Organization, FoodClaim.organization_id == Organization.id)
        .options(*CLAIM_LOAD_OPTIONS)
        .where(*criteria)
        .order_by(*order_by)
        .execution_options(populate_existing=True)
    )
    if limit is not None:
        query = query.limit(limit)
    result = await db.execute(query)
    return [claim_detail(c) for c in result.scalars().all()]


async def get_claim_detail(db: AsyncSession, claim_id: int) -> dict:
    claims = await load_claims(db, FoodClaim.id == claim_id)
    if not claims:
        raise HTTPException(status_code=404, detail="Claim not found")
    return claims[0]


async def _lock_claim(db: AsyncSession, claim_id: int, *criteria) -> Optional[FoodClaim]:
    # row lock on backends that support it; sqlite ignores FOR UPDATE
    result = await db.execute(
        select(FoodClaim)
        .options(*CLAIM_LOAD_OPTIONS)
        .where(FoodClaim.id == claim_id, *criteria)
        .with_for_update(of=FoodClaim)
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


def _owned_by(user: User):
    if user.role == ROLE_RESTAURANT:
        return FoodClaim.listing.has(FoodListing.restaurant.has(Restaurant.user_id == user.id))
    return FoodClaim.organization.has(Organization.user_id == user.id)


async def create_claim(db: AsyncSession, user: User, claim_in: ClaimCreate) -> dict:
    organization = await require_profile(db, Organization, user.id, status_code=400)

    result = await db.execute(
        select(FoodListing).where(
            FoodListing.id == claim_in.food_listing_id,
            FoodListing.status == LISTING_AVAILABLE,
        )
    )
    listing = result.scalars().first()
    if not listing:
        raise HTTPException(status_code=400, detail="Food listing not found or no longer available")

    existing = await db.execute(
        select(FoodClaim.id).where(
            FoodClaim.food_listing_id == listing.id,
            FoodClaim.organization_id == organization.id,
        )
    )
    if existing.first():
        raise HTTPException(status_code=400, detail="You have already claimed this food listing")

    if claim_in.claimed_quantity > listing.quantity:
        raise HTTPException(
            status_code=400,
            detail=(
                f"Cannot claim {claim_in.claimed_quantity} {listing.unit}. "
                f"Only {listing.quantity} {listing.unit} available."
            ),
        )

    claim = FoodClaim(
        food_listing_id=listing.id,
        organization_id=organization.id,
        claimed_quantity=claim_in.claimed_quantity,
        pickup_scheduled_time=claim_in.pickup_scheduled_time,
        notes=claim_in.notes,
        status=CLAIM_PENDING,
    )
    db.add(claim)
    # the unique constraint backs up the lookup above under concurrent claims
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail="You have already claimed this food listing")

    logger.info(f"Organization {organization.id} claimed listing {listing.id} (claim {claim.id})")
    await run_in_threadpool(notify, CLAIM_CREATED, claim.id)
    return await get_claim_detail(db, claim.id)


async def list_organization_claims(db: AsyncSession, user: User) -> List[dict]:
    return await load_claims(db, Organization.user_id == user.id)


async def list_restaurant_claims(db: AsyncSession, user: User) -> List[dict]:
    return await load_claims(db, Restaurant.user_id == user.id)


async def update_claim_status(db: AsyncSession, user: User, claim_id: int, update_in: ClaimStatusUpdate) -> dict:
    allowed, message = ROLE_TRANSITIONS.get(user.role, (set(), "Not allowed to update claims"))
    if update_in.status not in allowed:
        raise HTTPException(status_code=400, detail=message)

    # a missing claim and someone else's claim look the same to the caller
    claim = await _lock_claim(db, claim_id, _owned_by(user))
    if claim is None:
        raise HTTPException(status_code=403, detail="You do not have permission to update this claim")

    if claim.status != TRANSITIONS[update_in.status]:
        raise HTTPException(
            status_code=400,
            detail=f"Cannot change claim status from {claim.status} to {update_in.status}",
        )

    claim.status = update_in.status
    if update_in.notes is not None:
        claim.notes = update_in.notes
    if update_in.status in LISTING_CASCADE:
        claim.listing.status = LISTING_CASCADE[update_in.status]
    await db.commit()
    logger.info(f"Claim {claim.id} moved to {claim.status} by user {user.id}")

    if update_in.status == CLAIM_APPROVED:
        await run_in_threadpool(notify, CLAIM_APPROVED_EVENT, claim.id)
    elif update_in.status == CLAIM_REJECTED:
        await run_in_threadpool(notify, CLAIM_REJECTED_EVENT, claim.id, {"notes": update_in.notes})

    return await get_claim_detail(db, claim.id)


# ── Volunteer assignment ────────────────────────────────────────────────────
# A volunteer is attached to an approved claim through food_claims.volunteer_id,
# so the assignment id seen by clients is the claim id.

async def list_opportunities(db: AsyncSession) -> List[dict]:
    return await load_claims(
        db,
        FoodClaim.status == CLAIM_APPROVED,
        FoodClaim.pickup_scheduled_time > utcnow(),
        FoodClaim.volunteer_id.is_(None),
        order_by=(FoodClaim.pickup_scheduled_time.asc(), FoodClaim.id.asc()),
    )


async def signup_for_claim(db: AsyncSession, user: User, claim_id: int, notes: Optional[str] = None) -> dict:
    volunteer = await require_profile(db, Volunteer, user.id, status_code=400)
    now = utcnow()
    # single conditional UPDATE, so two volunteers cannot both take the claim
    result = await db.execute(
        update(FoodClaim)
        .where(
            FoodClaim.id == claim_id,
            FoodClaim.status == CLAIM_APPROVED,
            FoodClaim.volunteer_id.is_(None),
            FoodClaim.pickup_scheduled_time > now,
        )
        .values(volunteer_id=volunteer.id, volunteer_notes=notes, volunteer_assigned_at=now)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise HTTPException(status_code=400, detail="Volunteer opportunity not found or already taken")
    await db.commit()
    logger.info(f"Volunteer {volunteer.id} signed up for claim {claim_id}")
    return await get_claim_detail(db, claim_id)


async def list_volunteer_assignments(db: AsyncSession, user: User) -> List[dict]:
    volunteer = await get_profile(db, Volunteer, user.id)
    if volunteer is None:
        return []
    return await load_claims(
        db,
        FoodClaim.volunteer_id == volunteer.id,
        order_by=(FoodClaim.pickup_scheduled_time.asc(), FoodClaim.id.asc()),
    )


async def complete_assignment(db: AsyncSession, user: User, claim_id: int) -> dict:
    volunteer = await require_profile(db, Volunteer, user.id, status_code=400)
    claim = await _lock_claim(db, claim_id)
    if claim is None:
        raise HTTPException(status_code=404, detail="Claim not found")
    if claim.volunteer_id != volunteer.id:
        raise HTTPException(status_code=403, detail="This assignment does not belong to you")
    if claim.status != CLAIM_APPROVED:
        raise HTTPException(status_code=400, detail=f"Cannot complete a claim that is {claim.status}")

    # claim and listing are committed together or not at all
    claim.status = CLAIM_COMPLETED
    claim.volunteer_completed_at = utcnow()
    claim.listing.status = LISTING_COMPLETED
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    logger.info(f"Volunteer {volunteer.id} completed claim {claim.id}")
    return await get_claim_detail(db, claim.id)
