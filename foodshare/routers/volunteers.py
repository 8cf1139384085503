from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from foodshare import claims as claim_service
from foodshare.auth import require_role
from foodshare.crud import list_active_profiles, public_profile, require_profile, upsert_profile
from foodshare.database import get_db
from foodshare.models import ROLE_VOLUNTEER, User, Volunteer
from foodshare.schemas import (
    AssignmentResponse, VolunteerProfileIn, VolunteerPublic, VolunteerSchema, VolunteerSignup,
)

router = APIRouter(prefix="/api/volunteers", tags=["volunteers"])

volunteer_only = require_role(ROLE_VOLUNTEER)


@router.post("/profile")
async def save_profile(
    profile_in: VolunteerProfileIn,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(volunteer_only),
):
    profile, created = await upsert_profile(db, Volunteer, current_user.id, profile_in)
    return {
        "message": "Volunteer profile created" if created else "Volunteer profile updated",
        "volunteer": VolunteerSchema.model_validate(profile),
    }


@router.get("/profile")
async def read_profile(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(volunteer_only),
):
    profile = await require_profile(db, Volunteer, current_user.id)
    return {"volunteer": VolunteerSchema.model_validate(profile)}


@router.get("/opportunities")
async def opportunities(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(volunteer_only),
):
    return {"opportunities": await claim_service.list_opportunities(db)}


@router.post("/signup/{claim_id}", response_model=AssignmentResponse)
async def signup(
    claim_id: int,
    signup_in: Optional[VolunteerSignup] = Body(default=None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(volunteer_only),
):
    notes = signup_in.notes if signup_in else None
    assignment = await claim_service.signup_for_claim(db, current_user, claim_id, notes)
    return {"message": "Successfully signed up for volunteer opportunity", "assignment": assignment}


@router.get("/my-assignments")
async def my_assignments(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(volunteer_only),
):
    return {"assignments": await claim_service.list_volunteer_assignments(db, current_user)}


@router.put("/assignments/{claim_id}/complete", response_model=AssignmentResponse)
async def complete(
    claim_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(volunteer_only),
):
    assignment = await claim_service.complete_assignment(db, current_user, claim_id)
    return {"message": "Delivery marked as completed", "assignment": assignment}


@router.get("/all")
async def list_volunteers(db: AsyncSession = Depends(get_db)):
    rows = await list_active_profiles(db, Volunteer)
    return {"volunteers": [public_profile(v, u, VolunteerPublic) for v, u in rows]}
