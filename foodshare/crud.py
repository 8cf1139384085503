from typing import Optional, Type

from fastapi import HTTPException
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from foodshare.auth import get_password_hash
from foodshare.models import Organization, Restaurant, User, Volunteer
from foodshare.schemas import UserCreate

DUPLICATE_EMAIL = "User with this email already exists"


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalars().first()


async def create_user(db: AsyncSession, user_in: UserCreate) -> User:
    if await get_user_by_email(db, user_in.email):
        raise HTTPException(status_code=400, detail=DUPLICATE_EMAIL)
    user = User(
        email=user_in.email,
        password_hash=get_password_hash(user_in.password),
        role=user_in.role,
        first_name=user_in.first_name,
        last_name=user_in.last_name,
        phone=user_in.phone,
    )
    db.add(user)
    # the unique index catches a concurrent registration that slipped past the lookup
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail=DUPLICATE_EMAIL)
    await db.refresh(user)
    return user


# ── Profiles ────────────────────────────────────────────────────────────────
# One row per user; POST upserts by user_id.

ProfileModel = Type[Restaurant] | Type[Organization] | Type[Volunteer]


async def get_profile(db: AsyncSession, model: ProfileModel, user_id: int):
    result = await db.execute(select(model).where(model.user_id == user_id))
    return result.scalars().first()


async def require_profile(db: AsyncSession, model: ProfileModel, user_id: int, status_code: int = 404):
    profile = await get_profile(db, model, user_id)
    if not profile:
        label = model.__name__
        if status_code == 404:
            detail = f"{label} profile not found"
        else:
            detail = f"{label} profile required. Please create your {label.lower()} profile first."
        raise HTTPException(status_code=status_code, detail=detail)
    return profile


async def upsert_profile(db: AsyncSession, model: ProfileModel, user_id: int, fields: BaseModel):
    """Returns ``(profile, created)``."""
    profile = await get_profile(db, model, user_id)
    created = profile is None
    if created:
        profile = model(user_id=user_id)
        db.add(profile)
    for key, value in fields.model_dump().items():
        setattr(profile, key, value)
    await db.commit()
    await db.refresh(profile)
    return profile, created


async def list_active_profiles(db: AsyncSession, model: ProfileModel, *criteria, order_by=None):
    if order_by is None:
        order_by = (model.created_at.desc(), model.id.desc())
    query = (
        select(model, User)
        .join(User, model.user_id == User.id)
        .where(model.is_active.is_(True), *criteria)
        .order_by(*order_by)
    )
    result = await db.execute(query)
    return result.all()


async def get_active_profile(db: AsyncSession, model: ProfileModel, profile_id: int):
    result = await db.execute(
        select(model, User)
        .join(User, model.user_id == User.id)
        .where(model.id == profile_id, model.is_active.is_(True))
    )
    row = result.first()
    if not row:
        raise HTTPException(status_code=404, detail=f"{model.__name__} not found")
    return row


def public_profile(profile, user: User, schema: Type[BaseModel]) -> dict:
    """Profile fields plus the owner's contact details."""
    data = schema.model_validate(profile).model_dump()
    data.update(
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
    )
    return data
