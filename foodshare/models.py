# foodshare/models.py

from sqlalchemy import (
    Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
)
from sqlalchemy.orm import relationship

from .database import Base
from .utils import utcnow

ROLE_RESTAURANT   = "restaurant"
ROLE_ORGANIZATION = "organization"
ROLE_VOLUNTEER    = "volunteer"
VALID_ROLES = {ROLE_RESTAURANT, ROLE_ORGANIZATION, ROLE_VOLUNTEER}

LISTING_AVAILABLE = "available"
LISTING_CLAIMED   = "claimed"
LISTING_COMPLETED = "completed"
LISTING_STATUSES = {LISTING_AVAILABLE, LISTING_CLAIMED, LISTING_COMPLETED}

CLAIM_PENDING   = "pending"
CLAIM_APPROVED  = "approved"
CLAIM_REJECTED  = "rejected"
CLAIM_COMPLETED = "completed"
CLAIM_CANCELLED = "cancelled"
CLAIM_STATUSES = {CLAIM_PENDING, CLAIM_APPROVED, CLAIM_REJECTED, CLAIM_COMPLETED, CLAIM_CANCELLED}


class User(Base):
    __tablename__ = "users"
    id            = Column(Integer, primary_key=True, index=True)
    email         = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role          = Column(String(20), nullable=False)
    first_name    = Column(String(100))
    last_name     = Column(String(100))
    phone         = Column(String(50))
    created_at    = Column(DateTime, default=utcnow, nullable=False)
    updated_at    = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class Restaurant(Base):
    __tablename__ = "restaurants"
    id              = Column(Integer, primary_key=True, index=True)
    user_id         = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    name            = Column(String(255), nullable=False)
    address         = Column(Text, nullable=False)
    latitude        = Column(Float)
    longitude       = Column(Float)
    phone           = Column(String(50))
    cuisine_type    = Column(String(100))
    operating_hours = Column(Text)
    is_active       = Column(Boolean, default=True, nullable=False)
    created_at      = Column(DateTime, default=utcnow, nullable=False)
    updated_at      = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user     = relationship("User")
    listings = relationship("FoodListing", back_populates="restaurant", cascade="all, delete-orphan")


class Organization(Base):
    __tablename__ = "organizations"
    id         = Column(Integer, primary_key=True, index=True)
    user_id    = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    name       = Column(String(255), nullable=False)
    type       = Column(String(100), nullable=False)
    address    = Column(Text, nullable=False)
    latitude   = Column(Float)
    longitude  = Column(Float)
    phone      = Column(String(50))
    capacity   = Column(Integer)
    is_active  = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user   = relationship("User")
    claims = relationship("FoodClaim", back_populates="organization")


class Volunteer(Base):
    __tablename__ = "volunteers"
    id                      = Column(Integer, primary_key=True, index=True)
    user_id                 = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    address                 = Column(Text)
    latitude                = Column(Float)
    longitude               = Column(Float)
    phone                   = Column(String(50))
    availability            = Column(Text)
    transportation_type     = Column(String(50))
    max_distance            = Column(Float)
    skills                  = Column(Text)
    emergency_contact_name  = Column(String(255))
    emergency_contact_phone = Column(String(50))
    is_active               = Column(Boolean, default=True, nullable=False)
    created_at              = Column(DateTime, default=utcnow, nullable=False)
    updated_at              = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user        = relationship("User")
    assignments = relationship("FoodClaim", back_populates="volunteer")


class FoodListing(Base):
    __tablename__ = "food_listings"
    id                   = Column(Integer, primary_key=True, index=True)
    restaurant_id        = Column(Integer, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True)
    title                = Column(String(255), nullable=False)
    description          = Column(Text)
    food_type            = Column(String(100))
    quantity             = Column(Integer, nullable=False)
    unit                 = Column(String(50), nullable=False)
    expiry_date          = Column(DateTime, nullable=False)
    pickup_time_start    = Column(DateTime, nullable=False)
    pickup_time_end      = Column(DateTime, nullable=False)
    special_instructions = Column(Text)
    status               = Column(String(20), default=LISTING_AVAILABLE, nullable=False, index=True)
    created_at           = Column(DateTime, default=utcnow, nullable=False)
    updated_at           = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    restaurant = relationship("Restaurant", back_populates="listings")
    claims     = relationship("FoodClaim", back_populates="listing", cascade="all, delete-orphan")


class FoodClaim(Base):
    __tablename__ = "food_claims"
    __table_args__ = (
        UniqueConstraint("food_listing_id", "organization_id", name="uq_food_claims_listing_organization"),
    )
    id                     = Column(Integer, primary_key=True, index=True)
    food_listing_id        = Column(Integer, ForeignKey("food_listings.id", ondelete="CASCADE"), nullable=False, index=True)
    organization_id        = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    claimed_quantity       = Column(Integer, nullable=False)
    pickup_scheduled_time  = Column(DateTime, nullable=False)
    notes                  = Column(Text)
    status                 = Column(String(20), default=CLAIM_PENDING, nullable=False, index=True)
    volunteer_id           = Column(Integer, ForeignKey("volunteers.id", ondelete="SET NULL"), index=True)
    volunteer_notes        = Column(Text)
    volunteer_assigned_at  = Column(DateTime)
    volunteer_completed_at = Column(DateTime)
    created_at             = Column(DateTime, default=utcnow, nullable=False)
    updated_at             = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    listing      = relationship("FoodListing", back_populates="claims")
    organization = relationship("Organization", back_populates="claims")
    volunteer    = relationship("Volunteer", back_populates="assignments")
