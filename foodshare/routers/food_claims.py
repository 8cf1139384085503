from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from foodshare import claims as claim_service
from foodshare.auth import require_role
from foodshare.database import get_db
from foodshare.models import ROLE_ORGANIZATION, ROLE_RESTAURANT, User
from foodshare.schemas import ClaimCreate, ClaimList, ClaimResponse, ClaimStatusUpdate

router = APIRouter(prefix="/api/food-claims", tags=["food-claims"])


@router.post("", response_model=ClaimResponse, status_code=status.HTTP_201_CREATED)
async def create_claim(
    claim_in: ClaimCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(ROLE_ORGANIZATION)),
):
    claim = await claim_service.create_claim(db, current_user, claim_in)
    return {"message": "Food listing claimed successfully", "claim": claim}


@router.get("/my-claims", response_model=ClaimList)
async def my_claims(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(ROLE_ORGANIZATION)),
):
    return {"claims": await claim_service.list_organization_claims(db, current_user)}


@router.get("/restaurant-claims", response_model=ClaimList)
async def restaurant_claims(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(ROLE_RESTAURANT)),
):
    return {"claims": await claim_service.list_restaurant_claims(db, current_user)}


@router.put("/{claim_id}/status", response_model=ClaimResponse)
async def update_claim_status(
    claim_id: int,
    update_in: ClaimStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(ROLE_RESTAURANT, ROLE_ORGANIZATION)),
):
    claim = await claim_service.update_claim_status(db, current_user, claim_id, update_in)
    return {"message": f"Claim status updated to {update_in.status}", "claim": claim}
