from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from foodshare.claims import load_claims
from foodshare.crud import require_profile
from foodshare.models import (
    CLAIM_APPROVED, CLAIM_COMPLETED, CLAIM_PENDING, LISTING_AVAILABLE,
    ROLE_ORGANIZATION, ROLE_RESTAURANT, ROLE_VOLUNTEER,
    FoodClaim, FoodListing, Organization, Restaurant, User, Volunteer,
)
from foodshare.utils import utcnow

RECENT_CLAIMS_LIMIT = 5
RECENT_LISTINGS_LIMIT = 10

# claims counted as food that has left (or is about to leave) a restaurant
DISTRIBUTED = (CLAIM_APPROVED, CLAIM_COMPLETED)


# One AsyncSession cannot run statements concurrently, so the counts below
# are awaited one after another.
async def _scalar(db: AsyncSession, query) -> int:
    result = await db.execute(query)
    return int(result.scalar() or 0)


def _claims_on(restaurant_id: int):
    return (
        select(func.count(FoodClaim.id))
        .join(FoodListing, FoodClaim.food_listing_id == FoodListing.id)
        .where(FoodListing.restaurant_id == restaurant_id)
    )


async def restaurant_dashboard(db: AsyncSession, user: User) -> dict:
    restaurant = await require_profile(db, Restaurant, user.id)
    listings = select(func.count(FoodListing.id)).where(FoodListing.restaurant_id == restaurant.id)

    total_listings = await _scalar(db, listings)
    active_listings = await _scalar(db, listings.where(FoodListing.status == LISTING_AVAILABLE))
    total_claims = await _scalar(db, _claims_on(restaurant.id))
    pending_claims = await _scalar(db, _claims_on(restaurant.id).where(FoodClaim.status == CLAIM_PENDING))
    servings = await _scalar(
        db,
        select(func.coalesce(func.sum(FoodClaim.claimed_quantity), 0))
        .join(FoodListing, FoodClaim.food_listing_id == FoodListing.id)
        .where(FoodListing.restaurant_id == restaurant.id, FoodClaim.status.in_(DISTRIBUTED)),
    )
    recent_claims = await load_claims(
        db, FoodListing.restaurant_id == restaurant.id, limit=RECENT_CLAIMS_LIMIT
    )

    return {
        "total_listings": total_listings,
        "active_listings": active_listings,
        "total_claims": total_claims,
        "pending_claims": pending_claims,
        "total_servings_donated": servings,
        "recent_claims": recent_claims,
    }


async def organization_dashboard(db: AsyncSession, user: User) -> dict:
    organization = await require_profile(db, Organization, user.id)
    claims = select(func.count(FoodClaim.id)).where(FoodClaim.organization_id == organization.id)

    total_claims = await _scalar(db, claims)
    approved_claims = await _scalar(db, claims.where(FoodClaim.status == CLAIM_APPROVED))
    completed_pickups = await _scalar(db, claims.where(FoodClaim.status == CLAIM_COMPLETED))
    servings = await _scalar(
        db,
        select(func.coalesce(func.sum(FoodClaim.claimed_quantity), 0))
        .where(FoodClaim.organization_id == organization.id, FoodClaim.status.in_(DISTRIBUTED)),
    )
    upcoming = await load_claims(
        db,
        FoodClaim.organization_id == organization.id,
        FoodClaim.status == CLAIM_APPROVED,
        FoodClaim.pickup_scheduled_time > utcnow(),
        order_by=(FoodClaim.pickup_scheduled_time.asc(), FoodClaim.id.asc()),
        limit=RECENT_CLAIMS_LIMIT,
    )

    return {
        "total_claims": total_claims,
        "approved_claims": approved_claims,
        "completed_pickups": completed_pickups,
        "total_servings_received": servings,
        "upcoming_pickups": upcoming,
    }


async def volunteer_dashboard(db: AsyncSession, user: User) -> dict:
    volunteer = await require_profile(db, Volunteer, user.id)
    assignments = select(func.count(FoodClaim.id)).where(FoodClaim.volunteer_id == volunteer.id)

    total_assignments = await _scalar(db, assignments)
    completed = await _scalar(db, assignments.where(FoodClaim.status == CLAIM_COMPLETED))
    servings = await _scalar(
        db,
        select(func.coalesce(func.sum(FoodClaim.claimed_quantity), 0))
        .where(FoodClaim.volunteer_id == volunteer.id),
    )
    upcoming = await load_claims(
        db,
        FoodClaim.volunteer_id == volunteer.id,
        FoodClaim.pickup_scheduled_time > utcnow(),
        order_by=(FoodClaim.pickup_scheduled_time.asc(), FoodClaim.id.asc()),
        limit=RECENT_CLAIMS_LIMIT,
    )

    return {
        "total_assignments": total_assignments,
        "completed_deliveries": completed,
        "total_servings_delivered": servings,
        "upcoming_assignments": upcoming,
    }


async def platform_overview(db: AsyncSession) -> dict:
    result = await db.execute(select(User.role, func.count(User.id)).group_by(User.role))
    user_counts = {role: count for role, count in result.all()}

    total_listings = await _scalar(db, select(func.count(FoodListing.id)))
    servings_available = await _scalar(db, select(func.coalesce(func.sum(FoodListing.quantity), 0)))
    distributed = await _scalar(
        db,
        select(func.coalesce(func.sum(FoodClaim.claimed_quantity), 0))
        .where(FoodClaim.status.in_(DISTRIBUTED)),
    )
    waste_saved = await _scalar(
        db,
        select(func.coalesce(func.sum(FoodClaim.claimed_quantity), 0))
        .where(FoodClaim.status == CLAIM_COMPLETED),
    )

    result = await db.execute(
        select(FoodListing.title, FoodListing.quantity, FoodListing.unit,
               FoodListing.created_at, Restaurant.name.label("restaurant_name"))
        .join(Restaurant, FoodListing.restaurant_id == Restaurant.id)
        .order_by(FoodListing.created_at.desc(), FoodListing.id.desc())
        .limit(RECENT_LISTINGS_LIMIT)
    )
    recent_listings = [dict(row._mapping) for row in result.all()]

    return {
        "total_users": {
            "restaurants": user_counts.get(ROLE_RESTAURANT, 0),
            "organizations": user_counts.get(ROLE_ORGANIZATION, 0),
            "volunteers": user_counts.get(ROLE_VOLUNTEER, 0),
            "total": sum(user_counts.values()),
        },
        "total_food_listings": total_listings,
        "total_servings_available": servings_available,
        "servings_distributed": distributed,
        "food_waste_saved": waste_saved,
        "recent_listings": recent_listings,
    }
