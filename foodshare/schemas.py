from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from foodshare.utils import to_naive_utc

Role = Literal["restaurant", "organization", "volunteer"]
ListingStatus = Literal["available", "claimed", "completed"]
ClaimStatus = Literal["pending", "approved", "rejected", "completed", "cancelled"]
SortKey = Literal["expiry", "quantity", "distance", "created"]


class NaiveUTCModel(BaseModel):
    """Incoming datetimes are normalised to naive UTC, the storage convention."""

    @field_validator("*", mode="after")
    @classmethod
    def _naive_utc(cls, value):
        if isinstance(value, datetime):
            return to_naive_utc(value)
        return value


# ── Identity ────────────────────────────────────────────────────────────────

class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    role: Role
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=50)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserSchema(BaseModel):
    id: int
    email: str
    role: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserSchema


class TokenRefresh(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in: int


# ── Profiles ────────────────────────────────────────────────────────────────

class Coordinates(BaseModel):
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)


class RestaurantProfileIn(Coordinates):
    name: str = Field(min_length=1, max_length=255)
    address: str = Field(min_length=1)
    phone: Optional[str] = None
    cuisine_type: Optional[str] = None
    operating_hours: Optional[str] = None


class RestaurantSchema(RestaurantProfileIn):
    id: int
    user_id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrganizationProfileIn(Coordinates):
    name: str = Field(min_length=1, max_length=255)
    type: str = Field(min_length=1, max_length=100)
    address: str = Field(min_length=1)
    phone: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=0)


class OrganizationSchema(OrganizationProfileIn):
    id: int
    user_id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VolunteerProfileIn(Coordinates):
    address: Optional[str] = None
    phone: Optional[str] = None
    availability: Optional[str] = None
    transportation_type: Optional[str] = None
    max_distance: Optional[float] = Field(default=None, ge=0)
    skills: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None


class VolunteerSchema(VolunteerProfileIn):
    id: int
    user_id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VolunteerPublic(BaseModel):
    """What other users may see of a volunteer; no emergency contacts."""
    id: int
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    transportation_type: Optional[str] = None
    max_distance: Optional[float] = None
    availability: Optional[str] = None
    skills: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ── Listings ────────────────────────────────────────────────────────────────

def check_pickup_window(start, end, expiry) -> None:
    if start >= end:
        raise ValueError("pickup_time_start must be before pickup_time_end")
    if end >= expiry:
        raise ValueError("pickup_time_end must be before expiry_date")


class ListingCreate(NaiveUTCModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    food_type: Optional[str] = Field(default=None, max_length=100)
    quantity: int = Field(gt=0)
    unit: str = Field(min_length=1, max_length=50)
    expiry_date: datetime
    pickup_time_start: datetime
    pickup_time_end: datetime
    special_instructions: Optional[str] = None

    @model_validator(mode="after")
    def _window(self):
        check_pickup_window(self.pickup_time_start, self.pickup_time_end, self.expiry_date)
        return self


class ListingUpdate(NaiveUTCModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    food_type: Optional[str] = Field(default=None, max_length=100)
    quantity: Optional[int] = Field(default=None, gt=0)
    unit: Optional[str] = Field(default=None, min_length=1, max_length=50)
    expiry_date: Optional[datetime] = None
    pickup_time_start: Optional[datetime] = None
    pickup_time_end: Optional[datetime] = None
    special_instructions: Optional[str] = None
    status: Optional[ListingStatus] = None


class ListingSchema(BaseModel):
    id: int
    restaurant_id: int
    title: str
    description: Optional[str] = None
    food_type: Optional[str] = None
    quantity: int
    unit: str
    expiry_date: datetime
    pickup_time_start: datetime
    pickup_time_end: datetime
    special_instructions: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OwnListing(ListingSchema):
    restaurant_name: str
    total_claims: int = 0
    pending_claims: int = 0
    approved_claims: int = 0


class PublicListing(ListingSchema):
    restaurant_name: str
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    phone: Optional[str] = None
    cuisine_type: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    distance: Optional[float] = None


class ListingFilters(BaseModel):
    search: Optional[str] = None
    food_type: Optional[str] = None
    min_quantity: Optional[int] = Field(default=None, ge=0)
    max_quantity: Optional[int] = Field(default=None, ge=0)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    max_distance: Optional[float] = Field(default=None, gt=0)
    sort_by: SortKey = "created"


# ── Claims ──────────────────────────────────────────────────────────────────

class ClaimCreate(NaiveUTCModel):
    food_listing_id: int
    claimed_quantity: int = Field(gt=0)
    pickup_scheduled_time: datetime
    notes: Optional[str] = None


class ClaimStatusUpdate(BaseModel):
    status: ClaimStatus
    notes: Optional[str] = None


class VolunteerSignup(BaseModel):
    notes: Optional[str] = None


class ClaimDetail(BaseModel):
    id: int
    food_listing_id: int
    organization_id: int
    claimed_quantity: int
    pickup_scheduled_time: datetime
    notes: Optional[str] = None
    status: str
    volunteer_id: Optional[int] = None
    volunteer_notes: Optional[str] = None
    volunteer_assigned_at: Optional[datetime] = None
    volunteer_completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    title: str
    description: Optional[str] = None
    food_type: Optional[str] = None
    total_quantity: int
    unit: str
    expiry_date: datetime
    pickup_time_start: datetime
    pickup_time_end: datetime
    special_instructions: Optional[str] = None
    listing_status: str

    restaurant_name: str
    restaurant_address: Optional[str] = None
    restaurant_phone: Optional[str] = None
    restaurant_latitude: Optional[float] = None
    restaurant_longitude: Optional[float] = None
    restaurant_contact_email: Optional[str] = None

    organization_name: str
    organization_type: Optional[str] = None
    organization_address: Optional[str] = None
    organization_phone: Optional[str] = None
    organization_latitude: Optional[float] = None
    organization_longitude: Optional[float] = None
    organization_contact_email: Optional[str] = None


class ClaimResponse(BaseModel):
    message: str
    claim: ClaimDetail


class ClaimList(BaseModel):
    claims: List[ClaimDetail]


class AssignmentResponse(BaseModel):
    message: str
    assignment: ClaimDetail


# ── Dashboard ───────────────────────────────────────────────────────────────

class RestaurantDashboard(BaseModel):
    total_listings: int
    active_listings: int
    total_claims: int
    pending_claims: int
    total_servings_donated: int
    recent_claims: List[ClaimDetail]


class OrganizationDashboard(BaseModel):
    total_claims: int
    approved_claims: int
    completed_pickups: int
    total_servings_received: int
    upcoming_pickups: List[ClaimDetail]


class VolunteerDashboard(BaseModel):
    total_assignments: int
    completed_deliveries: int
    total_servings_delivered: int
    upcoming_assignments: List[ClaimDetail]


class PlatformOverview(BaseModel):
    total_users: Dict[str, int]
    total_food_listings: int
    total_servings_available: int
    servings_distributed: int
    food_waste_saved: int
    recent_listings: List[Dict[str, Any]]
