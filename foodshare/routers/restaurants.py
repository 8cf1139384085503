from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from foodshare.auth import require_role
from foodshare.crud import (
    get_active_profile, list_active_profiles, public_profile, require_profile, upsert_profile,
)
from foodshare.database import get_db
from foodshare.models import ROLE_RESTAURANT, Restaurant, User
from foodshare.schemas import RestaurantProfileIn, RestaurantSchema

router = APIRouter(prefix="/api/restaurants", tags=["restaurants"])


@router.post("/profile")
async def save_profile(
    profile_in: RestaurantProfileIn,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(ROLE_RESTAURANT)),
):
    profile, created = await upsert_profile(db, Restaurant, current_user.id, profile_in)
    return {
        "message": "Restaurant profile created" if created else "Restaurant profile updated",
        "restaurant": RestaurantSchema.model_validate(profile),
    }


@router.get("/profile")
async def read_profile(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(ROLE_RESTAURANT)),
):
    profile = await require_profile(db, Restaurant, current_user.id)
    return {"restaurant": RestaurantSchema.model_validate(profile)}


@router.get("/all")
async def list_restaurants(db: AsyncSession = Depends(get_db)):
    rows = await list_active_profiles(db, Restaurant)
    return {"restaurants": [public_profile(r, u, RestaurantSchema) for r, u in rows]}


@router.get("/{restaurant_id}")
async def read_restaurant(restaurant_id: int, db: AsyncSession = Depends(get_db)):
    restaurant, owner = await get_active_profile(db, Restaurant, restaurant_id)
    return {"restaurant": public_profile(restaurant, owner, RestaurantSchema)}
