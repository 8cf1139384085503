import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from foodshare.celery_app import celery_app
from foodshare.database import get_db_sync
from foodshare.models import FoodClaim, FoodListing, Organization, Restaurant
from foodshare.notifications import (
    claim_approved_email,
    claim_rejected_email,
    food_claimed_email,
    send_email,
)

logger = logging.getLogger('celery')


def _load_claim(db: Session, claim_id: int) -> Optional[FoodClaim]:
    return db.execute(
        select(FoodClaim)
        .options(
            selectinload(FoodClaim.listing)
            .selectinload(FoodListing.restaurant)
            .selectinload(Restaurant.user),
            selectinload(FoodClaim.organization).selectinload(Organization.user),
        )
        .where(FoodClaim.id == claim_id)
    ).scalars().first()


def _claim_details(claim: FoodClaim) -> dict:
    return {
        "claimed_quantity": claim.claimed_quantity,
        "unit": claim.listing.unit,
        "pickup_scheduled_time": claim.pickup_scheduled_time,
        "notes": claim.notes,
        "restaurant_address": claim.listing.restaurant.address,
        "restaurant_phone": claim.listing.restaurant.phone,
    }


@celery_app.task(name='tasks.notify_claim_created')
def notify_claim_created(claim_id: int):
    logger.info(f"Starting notify_claim_created for claim {claim_id}")
    db: Session = next(get_db_sync())
    try:
        claim = _load_claim(db, claim_id)
        if claim is None:
            logger.warning(f"Claim {claim_id} not found, nothing to notify")
            return {"success": False, "error": "claim not found"}
        restaurant = claim.listing.restaurant
        template = food_claimed_email(
            restaurant.name,
            claim.organization.name,
            claim.listing.title,
            _claim_details(claim),
        )
        return send_email(restaurant.user.email, template)
    except Exception as e:
        logger.exception(f"notify_claim_created failed for claim {claim_id}")
        return {"success": False, "error": str(e)}
    finally:
        db.close()


@celery_app.task(name='tasks.notify_claim_status')
def notify_claim_status(claim_id: int, status: str, notes: Optional[str] = None):
    logger.info(f"Starting notify_claim_status for claim {claim_id} ({status})")
    db: Session = next(get_db_sync())
    try:
        claim = _load_claim(db, claim_id)
        if claim is None:
            logger.warning(f"Claim {claim_id} not found, nothing to notify")
            return {"success": False, "error": "claim not found"}
        organization = claim.organization
        restaurant = claim.listing.restaurant
        if status == "approved":
            template = claim_approved_email(
                organization.name, restaurant.name, claim.listing.title, _claim_details(claim)
            )
        elif status == "rejected":
            template = claim_rejected_email(
                organization.name, restaurant.name, claim.listing.title, notes
            )
        else:
            logger.info(f"No email template for status {status}")
            return {"success": False, "error": f"no template for {status}"}
        return send_email(organization.user.email, template)
    except Exception as e:
        logger.exception(f"notify_claim_status failed for claim {claim_id}")
        return {"success": False, "error": str(e)}
    finally:
        db.close()
