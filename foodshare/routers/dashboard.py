from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from foodshare import dashboard as stats
from foodshare.auth import get_current_user, require_role
from foodshare.database import get_db
from foodshare.models import ROLE_ORGANIZATION, ROLE_RESTAURANT, ROLE_VOLUNTEER, User
from foodshare.schemas import (
    OrganizationDashboard, PlatformOverview, RestaurantDashboard, VolunteerDashboard,
)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/restaurant")
async def restaurant_dashboard(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(ROLE_RESTAURANT)),
):
    data = await stats.restaurant_dashboard(db, current_user)
    return {"dashboard": RestaurantDashboard(**data)}


@router.get("/organization")
async def organization_dashboard(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(ROLE_ORGANIZATION)),
):
    data = await stats.organization_dashboard(db, current_user)
    return {"dashboard": OrganizationDashboard(**data)}


@router.get("/volunteer")
async def volunteer_dashboard(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(ROLE_VOLUNTEER)),
):
    data = await stats.volunteer_dashboard(db, current_user)
    return {"dashboard": VolunteerDashboard(**data)}


@router.get("/overview")
async def overview(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"platform_overview": PlatformOverview(**await stats.platform_overview(db))}
