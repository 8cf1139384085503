from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from foodshare.auth import require_role
from foodshare.crud import (
    get_active_profile, list_active_profiles, public_profile, require_profile, upsert_profile,
)
from foodshare.database import get_db
from foodshare.models import ROLE_ORGANIZATION, Organization, User
from foodshare.schemas import OrganizationProfileIn, OrganizationSchema

router = APIRouter(prefix="/api/organizations", tags=["organizations"])

BY_NAME = (Organization.name.asc(), Organization.id.asc())


@router.post("/profile")
async def save_profile(
    profile_in: OrganizationProfileIn,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(ROLE_ORGANIZATION)),
):
    profile, created = await upsert_profile(db, Organization, current_user.id, profile_in)
    return {
        "message": "Organization profile created" if created else "Organization profile updated",
        "organization": OrganizationSchema.model_validate(profile),
    }


@router.get("/profile")
async def read_profile(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(ROLE_ORGANIZATION)),
):
    profile = await require_profile(db, Organization, current_user.id)
    return {"organization": OrganizationSchema.model_validate(profile)}


@router.get("/all")
async def list_organizations(db: AsyncSession = Depends(get_db)):
    rows = await list_active_profiles(db, Organization, order_by=BY_NAME)
    return {"organizations": [public_profile(o, u, OrganizationSchema) for o, u in rows]}


@router.get("/type/{org_type}")
async def list_organizations_by_type(org_type: str, db: AsyncSession = Depends(get_db)):
    rows = await list_active_profiles(db, Organization, Organization.type == org_type, order_by=BY_NAME)
    return {
        "organizations": [public_profile(o, u, OrganizationSchema) for o, u in rows],
        "type": org_type,
    }


@router.get("/{organization_id}")
async def read_organization(organization_id: int, db: AsyncSession = Depends(get_db)):
    organization, owner = await get_active_profile(db, Organization, organization_id)
    return {"organization": public_profile(organization, owner, OrganizationSchema)}
