"""
Pydantic Schemas for API Request/Response
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from decimal import Decimal
import re

from dolu.models.booking import BookingStatus, HistoryActor
from dolu.models.messaging import (
    ContactMessageStatus, MessageChannel, MessageLogStatus, MessageTrigger,
)

PHONE_PATTERN = re.compile(r"^\+?\d{7,15}$")
PHONE_SEPARATORS = re.compile(r"[\s\-().]")


def normalize_phone(value: Optional[str]) -> Optional[str]:
    """Strip spaces, dashes, dots and brackets; then require 7-15 digits with an optional +."""
    if value is None:
        return None
    value = PHONE_SEPARATORS.sub("", value)
    if not value:
        return None
    if not PHONE_PATTERN.match(value):
        raise ValueError("Enter a valid phone number")
    return value


def strip_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


# ==================== Locations ====================

class StateCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    code: str = Field(min_length=1, max_length=10)
    active: bool = True


class StateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    code: Optional[str] = Field(None, min_length=1, max_length=10)
    active: Optional[bool] = None


class StateResponse(BaseModel):
    id: str
    name: str
    code: str
    active: bool

    class Config:
        from_attributes = True


class CityCreate(BaseModel):
    state_id: str
    name: str = Field(min_length=1, max_length=100)
    active: bool = True


class CityUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    active: Optional[bool] = None


class CityResponse(BaseModel):
    id: str
    state_id: str
    name: str
    active: bool

    class Config:
        from_attributes = True


class ZoneCreate(BaseModel):
    city_id: str
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    active: bool = True


class ZoneUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    active: Optional[bool] = None


class ZoneResponse(BaseModel):
    id: str
    city_id: str
    name: str
    description: Optional[str] = None
    active: bool

    class Config:
        from_attributes = True


class AreaCreate(BaseModel):
    city_id: str
    zone_id: Optional[str] = None
    name: str = Field(min_length=1, max_length=100)
    active: bool = True


class AreaUpdate(BaseModel):
    """`zone_id: null` clears the zone, which takes the area out of pricing."""
    zone_id: Optional[str] = None
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    active: Optional[bool] = None


class AreaResponse(BaseModel):
    id: str
    city_id: str
    zone_id: Optional[str] = None
    name: str
    active: bool

    class Config:
        from_attributes = True


class AreaZoneResponse(BaseModel):
    area_id: str
    zone: Optional[ZoneResponse] = None


# ==================== Pricing ====================

class ZoneRateCreate(BaseModel):
    from_zone_id: str
    to_zone_id: str
    base_price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    eta_text: Optional[str] = Field(None, max_length=100)
    active: bool = True


class ZoneRateUpdate(BaseModel):
    base_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    eta_text: Optional[str] = Field(None, max_length=100)
    active: Optional[bool] = None


class ZoneRateResponse(BaseModel):
    id: str
    from_zone_id: str
    to_zone_id: str
    base_price: Decimal
    eta_text: Optional[str] = None
    active: bool

    class Config:
        from_attributes = True


class AddonCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    code: str = Field(min_length=1, max_length=30)
    description: Optional[str] = None
    fee: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    active: bool = True

    @field_validator("code")
    @classmethod
    def upper_code(cls, value):
        return value.strip().upper()


class AddonUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    fee: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    active: Optional[bool] = None


class AddonResponse(BaseModel):
    id: str
    name: str
    code: str
    description: Optional[str] = None
    fee: Decimal
    active: bool

    class Config:
        from_attributes = True


class ItemCategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    code: str = Field(min_length=1, max_length=30)
    description: Optional[str] = None
    requires_notes: bool = False
    active: bool = True


class ItemCategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    requires_notes: Optional[bool] = None
    active: Optional[bool] = None


class ItemCategoryResponse(BaseModel):
    id: str
    name: str
    code: str
    description: Optional[str] = None
    requires_notes: bool
    active: bool

    class Config:
        from_attributes = True


# ==================== Quotes ====================

class QuoteRequest(BaseModel):
    pickup_area_id: Optional[str] = None
    dropoff_area_id: Optional[str] = None
    addon_codes: List[str] = []


class QuoteResponse(BaseModel):
    success: bool
    base_price: Decimal
    addons_price: Decimal
    total_price: Decimal
    eta_text: Optional[str] = None
    addon_codes: List[str] = []
    error: Optional[str] = None
    message: Optional[str] = None


# ==================== Bookings ====================

class BookingCreate(BaseModel):
    """Customer pickup request. Prices are never accepted from the client."""

    sender_name: str = Field(min_length=1, max_length=200)
    sender_phone: str
    sender_whatsapp: Optional[str] = None

    pickup_state_id: Optional[str] = None
    pickup_city_id: Optional[str] = None
    pickup_area_id: str
    pickup_address: str = Field(min_length=1)
    pickup_landmark: Optional[str] = Field(None, max_length=200)

    receiver_name: str = Field(min_length=1, max_length=200)
    receiver_phone: str
    receiver_whatsapp: Optional[str] = None

    dropoff_state_id: Optional[str] = None
    dropoff_city_id: Optional[str] = None
    dropoff_area_id: str
    dropoff_address: str = Field(min_length=1)
    dropoff_landmark: Optional[str] = Field(None, max_length=200)

    item_category_id: str
    item_notes: Optional[str] = None

    addons_selected: List[str] = []

    @field_validator("sender_name", "receiver_name", "pickup_address", "dropoff_address")
    @classmethod
    def required_text(cls, value):
        value = value.strip()
        if not value:
            raise ValueError("This field is required")
        return value

    @field_validator("pickup_landmark", "dropoff_landmark", "item_notes")
    @classmethod
    def optional_text(cls, value):
        return strip_text(value)

    @field_validator("sender_phone", "receiver_phone")
    @classmethod
    def required_phone(cls, value):
        value = normalize_phone(value)
        if value is None:
            raise ValueError("Phone number is required")
        return value

    @field_validator("sender_whatsapp", "receiver_whatsapp")
    @classmethod
    def optional_phone(cls, value):
        return normalize_phone(value)


class BookingCreated(BaseModel):
    id: str
    tracking_id: str
    status: BookingStatus
    price_base: Decimal
    price_addons: Decimal
    price_total: Decimal
    addons_selected: List[str] = []
    eta_text: Optional[str] = None


class StatusHistoryResponse(BaseModel):
    id: int
    status: BookingStatus
    status_label: str
    note: str
    created_by: HistoryActor
    created_at: datetime

    @classmethod
    def from_entry(cls, entry) -> "StatusHistoryResponse":
        status = BookingStatus(entry.status)
        return cls(
            id=entry.id,
            status=status,
            status_label=status.label,
            note=entry.note,
            created_by=entry.created_by,
            created_at=entry.created_at,
        )


class TrackingResponse(BaseModel):
    """Public tracking view; no phone numbers or staff notes."""

    tracking_id: str
    status: BookingStatus
    status_label: str
    sender_name: str
    receiver_name: str
    pickup_area: Optional[str] = None
    dropoff_area: Optional[str] = None
    item_category: Optional[str] = None
    price_total: Decimal
    addons_selected: List[str] = []
    rider_name: Optional[str] = None
    created_at: datetime
    history: List[StatusHistoryResponse] = []

    @classmethod
    def from_booking(cls, booking) -> "TrackingResponse":
        status = BookingStatus(booking.status)
        return cls(
            tracking_id=booking.tracking_id,
            status=status,
            status_label=status.label,
            sender_name=booking.sender_name,
            receiver_name=booking.receiver_name,
            pickup_area=booking.pickup_area.name if booking.pickup_area else None,
            dropoff_area=booking.dropoff_area.name if booking.dropoff_area else None,
            item_category=booking.item_category.name if booking.item_category else None,
            price_total=booking.price_total,
            addons_selected=booking.addons_selected or [],
            rider_name=booking.rider_name,
            created_at=booking.created_at,
            history=[StatusHistoryResponse.from_entry(entry) for entry in booking.history],
        )


class BookingSummary(BaseModel):
    id: str
    tracking_id: str
    status: BookingStatus
    sender_name: str
    sender_phone: str
    receiver_name: str
    receiver_phone: str
    price_total: Decimal
    rider_name: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class BookingListResponse(BaseModel):
    total: int
    items: List[BookingSummary]


class BookingDetailResponse(BaseModel):
    id: str
    tracking_id: str
    status: BookingStatus
    status_label: str

    sender_name: str
    sender_phone: str
    sender_whatsapp: Optional[str] = None
    pickup_state_id: Optional[str] = None
    pickup_city_id: Optional[str] = None
    pickup_area_id: Optional[str] = None
    pickup_area: Optional[str] = None
    pickup_address: str
    pickup_landmark: Optional[str] = None

    receiver_name: str
    receiver_phone: str
    receiver_whatsapp: Optional[str] = None
    dropoff_state_id: Optional[str] = None
    dropoff_city_id: Optional[str] = None
    dropoff_area_id: Optional[str] = None
    dropoff_area: Optional[str] = None
    dropoff_address: str
    dropoff_landmark: Optional[str] = None

    item_category_id: Optional[str] = None
    item_category: Optional[str] = None
    item_notes: Optional[str] = None

    price_base: Decimal
    price_addons: Decimal
    price_total: Decimal
    addons_selected: List[str] = []

    rider_name: Optional[str] = None
    rider_phone: Optional[str] = None
    admin_notes: Optional[str] = None

    created_at: datetime
    updated_at: Optional[datetime] = None
    history: List[StatusHistoryResponse] = []

    @classmethod
    def from_booking(cls, booking) -> "BookingDetailResponse":
        status = BookingStatus(booking.status)
        columns = {column.key: getattr(booking, column.key) for column in booking.__table__.columns}
        columns.update(
            status=status,
            status_label=status.label,
            pickup_area=booking.pickup_area.name if booking.pickup_area else None,
            dropoff_area=booking.dropoff_area.name if booking.dropoff_area else None,
            item_category=booking.item_category.name if booking.item_category else None,
            addons_selected=booking.addons_selected or [],
            history=[StatusHistoryResponse.from_entry(entry) for entry in booking.history],
        )
        return cls(**columns)


class StatusTransitionRequest(BaseModel):
    status: BookingStatus
    note: Optional[str] = Field(None, max_length=1000)


class RiderAssignment(BaseModel):
    rider_name: Optional[str] = Field(None, max_length=200)
    rider_phone: Optional[str] = None

    @field_validator("rider_name")
    @classmethod
    def clean_name(cls, value):
        return strip_text(value)

    @field_validator("rider_phone")
    @classmethod
    def clean_phone(cls, value):
        return normalize_phone(value)


class AdminNotesUpdate(BaseModel):
    admin_notes: Optional[str] = None


class SendMessageRequest(BaseModel):
    channel: MessageChannel = MessageChannel.SMS


class BookingStatsResponse(BaseModel):
    total: int
    pending: int
    confirmed: int
    not_accepted: int
    in_progress: int
    delivered: int
    cancelled: int


# ==================== Contact Messages ====================

class ContactMessageCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    subject: Optional[str] = Field(None, max_length=200)
    message: str = Field(min_length=1)

    @field_validator("name", "message")
    @classmethod
    def required_text(cls, value):
        value = value.strip()
        if not value:
            raise ValueError("This field is required")
        return value

    @field_validator("email", "subject")
    @classmethod
    def optional_text(cls, value):
        return strip_text(value)

    @field_validator("email")
    @classmethod
    def check_email(cls, value):
        if value and "@" not in value:
            raise ValueError("Enter a valid email address")
        return value

    @field_validator("phone", "whatsapp")
    @classmethod
    def optional_phone(cls, value):
        return normalize_phone(value)


class ContactMessageUpdate(BaseModel):
    status: Optional[ContactMessageStatus] = None
    admin_notes: Optional[str] = None


class ContactMessageResponse(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    subject: Optional[str] = None
    message: str
    status: ContactMessageStatus
    admin_notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ContactMessageListResponse(BaseModel):
    total: int
    items: List[ContactMessageResponse]


# ==================== Templates & Message Log ====================

class MessageTemplateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    subject: Optional[str] = Field(None, max_length=200)
    body: Optional[str] = Field(None, min_length=1)
    active: Optional[bool] = None


class MessageTemplateResponse(BaseModel):
    id: str
    name: str
    type: MessageChannel
    code: str
    subject: Optional[str] = None
    body: str
    placeholders: List[str] = []
    active: bool

    class Config:
        from_attributes = True


class MessageLogResponse(BaseModel):
    id: str
    message_type: MessageChannel
    recipient: str
    booking_id: Optional[str] = None
    contact_message_id: Optional[str] = None
    template_code: Optional[str] = None
    subject: Optional[str] = None
    body: str
    status: MessageLogStatus
    error_message: Optional[str] = None
    cost: Optional[Decimal] = None
    triggered_by: MessageTrigger
    created_at: datetime

    class Config:
        from_attributes = True


class MessageLogListResponse(BaseModel):
    total: int
    items: List[MessageLogResponse]


# ==================== Settings ====================

class SettingsResponse(BaseModel):
    """All business settings for the staff console; the SMS API key is only reported as set or not."""
    values: Dict[str, Any]
    sms_api_key_set: bool


class PublicSettingsResponse(BaseModel):
    customer_care_phone: str
    customer_care_whatsapp: str
    business_hours_text: str


# ==================== Auth ====================

class LoginRequest(BaseModel):
    password: str = Field(min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class SettingUpdate(BaseModel):
    """One tagged settings entry; `value` is checked against the schema for `key`."""
    key: str
    value: Any
