"""
Claim notifications.

The API only enqueues; rendering and SMTP delivery happen in the Celery
worker (see ``foodshare.tasks``). Nothing in here may fail a request.
"""

import asyncio
import logging
from datetime import datetime
from html import escape
from typing import Optional

from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType

from foodshare.celery_app import celery_app
from foodshare.config import settings

logger = logging.getLogger(__name__)

CLAIM_CREATED = "ClaimCreated"
CLAIM_APPROVED = "ClaimApproved"
CLAIM_REJECTED = "ClaimRejected"

TASK_CLAIM_CREATED = "tasks.notify_claim_created"
TASK_CLAIM_STATUS = "tasks.notify_claim_status"


def notify(event: str, claim_id: int, extra: Optional[dict] = None) -> None:
    extra = extra or {}
    try:
        if event == CLAIM_CREATED:
            task = celery_app.send_task(TASK_CLAIM_CREATED, args=[claim_id])
        elif event in (CLAIM_APPROVED, CLAIM_REJECTED):
            status = "approved" if event == CLAIM_APPROVED else "rejected"
            task = celery_app.send_task(
                TASK_CLAIM_STATUS, args=[claim_id, status, extra.get("notes")]
            )
        else:
            logger.warning(f"Unknown notification event {event} for claim {claim_id}")
            return
        logger.info(f"Queued {event} notification for claim {claim_id} (task {task.id})")
    except Exception:
        logger.exception(f"Could not queue {event} notification for claim {claim_id}")


# ── Templates ───────────────────────────────────────────────────────────────

_WRAPPER = '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">{}</div>'


def _when(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M UTC") if value else "not scheduled"


def food_claimed_email(restaurant_name, organization_name, food_title, claim) -> dict:
    notes = f"<p><strong>Notes:</strong> {escape(claim['notes'])}</p>" if claim.get("notes") else ""
    body = (
        '<h2 style="color: #2c5282;">New Food Claim Received!</h2>'
        f"<p>Hello <strong>{escape(restaurant_name)}</strong>,</p>"
        f"<p><strong>{escape(organization_name)}</strong> has claimed your food listing:</p>"
        f"<h3>{escape(food_title)}</h3>"
        f"<p><strong>Quantity Claimed:</strong> {claim['claimed_quantity']} {escape(claim['unit'])}</p>"
        f"<p><strong>Pickup Time:</strong> {_when(claim['pickup_scheduled_time'])}</p>"
        f"{notes}"
        "<p>Please log in to your dashboard to approve or reject this claim.</p>"
    )
    return {"subject": f"New Food Claim - {food_title}", "html": _WRAPPER.format(body)}


def claim_approved_email(organization_name, restaurant_name, food_title, claim) -> dict:
    body = (
        '<h2 style="color: #38a169;">Claim Approved!</h2>'
        f"<p>Hello <strong>{escape(organization_name)}</strong>,</p>"
        f"<p><strong>{escape(restaurant_name)}</strong> has approved your food claim:</p>"
        f"<h3>{escape(food_title)}</h3>"
        f"<p><strong>Pickup Time:</strong> {_when(claim['pickup_scheduled_time'])}</p>"
        f"<p><strong>Quantity:</strong> {claim['claimed_quantity']} {escape(claim['unit'])}</p>"
        f"<p><strong>Restaurant Address:</strong> {escape(claim['restaurant_address'] or '')}</p>"
        f"<p><strong>Restaurant Phone:</strong> {escape(claim['restaurant_phone'] or '')}</p>"
        "<p>Please arrive at the scheduled pickup time.</p>"
    )
    return {"subject": f"Food Claim Approved - {food_title}", "html": _WRAPPER.format(body)}


def claim_rejected_email(organization_name, restaurant_name, food_title, reason=None) -> dict:
    reason_html = f"<p><strong>Reason:</strong> {escape(reason)}</p>" if reason else ""
    body = (
        '<h2 style="color: #e53e3e;">Claim Update</h2>'
        f"<p>Hello <strong>{escape(organization_name)}</strong>,</p>"
        f"<p>Unfortunately, <strong>{escape(restaurant_name)}</strong> was unable to approve your claim for:</p>"
        f"<h3>{escape(food_title)}</h3>"
        f"{reason_html}"
        "<p>There are many other food listings available on the platform.</p>"
    )
    return {"subject": f"Food Claim Update - {food_title}", "html": _WRAPPER.format(body)}


# ── Delivery ────────────────────────────────────────────────────────────────

def mail_config() -> ConnectionConfig:
    return ConnectionConfig(
        MAIL_USERNAME=settings.EMAIL_USER,
        MAIL_PASSWORD=settings.EMAIL_PASSWORD or "",
        MAIL_FROM=settings.EMAIL_USER,
        MAIL_PORT=settings.EMAIL_PORT,
        MAIL_SERVER=settings.EMAIL_HOST,
        MAIL_STARTTLS=settings.EMAIL_USE_TLS,
        MAIL_SSL_TLS=False,
        USE_CREDENTIALS=bool(settings.EMAIL_PASSWORD),
    )


def send_email(to: str, template: dict) -> dict:
    """Deliver one rendered template. Returns ``{success, error}`` and never raises."""
    if not settings.EMAIL_USER:
        logger.warning(f"EMAIL_USER not configured, skipping email to {to}")
        return {"success": False, "error": "email not configured"}

    try:
        message = MessageSchema(
            subject=template["subject"],
            recipients=[to],
            body=template["html"],
            subtype=MessageType.html,
        )
        # runs inside the Celery worker, which has no event loop of its own
        asyncio.run(FastMail(mail_config()).send_message(message))
    except Exception as e:
        logger.error(f"Email sending failed: {e}")
        return {"success": False, "error": str(e)}

    logger.info(f"Email sent to {to}: {template['subject']}")
    return {"success": True}
