"""
Database Models Package
"""
from dolu.models.location import State, City, Zone, Area
from dolu.models.pricing import ZoneRate, Addon, ItemCategory
from dolu.models.booking import (
    Booking, BookingStatusHistory,
    BookingStatus, HistoryActor, STATUS_LABELS, TERMINAL_STATUSES
)
from dolu.models.messaging import (
    ContactMessage, MessageTemplate, MessageLog, AppSetting,
    ContactMessageStatus, MessageChannel, MessageLogStatus, MessageTrigger
)

__all__ = [
    # Locations
    "State", "City", "Zone", "Area",
    # Pricing
    "ZoneRate", "Addon", "ItemCategory",
    # Bookings
    "Booking", "BookingStatusHistory", "BookingStatus", "HistoryActor",
    "STATUS_LABELS", "TERMINAL_STATUSES",
    # Messaging and settings
    "ContactMessage", "MessageTemplate", "MessageLog", "AppSetting",
    "ContactMessageStatus", "MessageChannel", "MessageLogStatus", "MessageTrigger",
]
