"""
Booking and Booking Status History Database Models
"""
from sqlalchemy import (
    Column, String, Integer, DateTime, Text, Numeric, JSON, ForeignKey,
    Enum as SQLEnum, CheckConstraint, Index,
)
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from dolu.db.database import Base, new_uuid


def enum_values(enum_cls):
    """Persist enum values ('pending') rather than member names ('PENDING')."""
    return [member.value for member in enum_cls]


class BookingStatus(str, enum.Enum):
    """Booking lifecycle states."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    NOT_ACCEPTED = "not_accepted"
    IN_PROGRESS = "in_progress"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]

    @property
    def is_terminal(self) -> bool:
        # Advisory only: transitions out of terminal states are not blocked.
        return self in TERMINAL_STATUSES


STATUS_LABELS = {
    BookingStatus.PENDING: "Pending",
    BookingStatus.CONFIRMED: "Confirmed",
    BookingStatus.NOT_ACCEPTED: "Not Accepted",
    BookingStatus.IN_PROGRESS: "In Progress",
    BookingStatus.DELIVERED: "Delivered",
    BookingStatus.CANCELLED: "Cancelled",
}

TERMINAL_STATUSES = frozenset({
    BookingStatus.DELIVERED,
    BookingStatus.CANCELLED,
    BookingStatus.NOT_ACCEPTED,
})


class HistoryActor(str, enum.Enum):
    """Who recorded a history entry."""
    SYSTEM = "system"
    ADMIN = "admin"


class Booking(Base):
    """Customer pickup request with its immutable price snapshot."""

    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=new_uuid)
    tracking_id = Column(String(13), nullable=False, unique=True, index=True)

    # Sender (phone only, no email)
    sender_name = Column(String(200), nullable=False)
    sender_phone = Column(String(30), nullable=False, index=True)
    sender_whatsapp = Column(String(30), nullable=True)

    # Pickup
    pickup_state_id = Column(String(36), ForeignKey("locations_states.id"), nullable=True)
    pickup_city_id = Column(String(36), ForeignKey("locations_cities.id"), nullable=True)
    pickup_area_id = Column(String(36), ForeignKey("locations_areas.id"), nullable=True)
    pickup_address = Column(Text, nullable=False)
    pickup_landmark = Column(String(200), nullable=True)

    # Receiver (phone only, no email)
    receiver_name = Column(String(200), nullable=False)
    receiver_phone = Column(String(30), nullable=False, index=True)
    receiver_whatsapp = Column(String(30), nullable=True)

    # Dropoff
    dropoff_state_id = Column(String(36), ForeignKey("locations_states.id"), nullable=True)
    dropoff_city_id = Column(String(36), ForeignKey("locations_cities.id"), nullable=True)
    dropoff_area_id = Column(String(36), ForeignKey("locations_areas.id"), nullable=True)
    dropoff_address = Column(Text, nullable=False)
    dropoff_landmark = Column(String(200), nullable=True)

    # Item
    item_category_id = Column(String(36), ForeignKey("item_categories.id"), nullable=True)
    item_notes = Column(Text, nullable=True)

    # Price snapshot, copied from the quote at creation and never recomputed
    price_base = Column(Numeric(10, 2), nullable=False, default=0)
    price_addons = Column(Numeric(10, 2), nullable=False, default=0)
    price_total = Column(Numeric(10, 2), nullable=False)
    addons_selected = Column(JSON, default=list)  # e.g. ["FRAGILE", "EXPRESS"]

    # Rider (free text, no rider table)
    rider_name = Column(String(200), nullable=True)
    rider_phone = Column(String(30), nullable=True)

    status = Column(
        SQLEnum(BookingStatus, name="booking_status", native_enum=False, length=20,
                values_callable=enum_values, create_constraint=True),
        nullable=False,
        default=BookingStatus.PENDING,
        index=True,
    )
    admin_notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    pickup_area = relationship("Area", foreign_keys=[pickup_area_id])
    dropoff_area = relationship("Area", foreign_keys=[dropoff_area_id])
    item_category = relationship("ItemCategory")
    history = relationship(
        "BookingStatusHistory",
        back_populates="booking",
        order_by=lambda: [BookingStatusHistory.created_at, BookingStatusHistory.id],
    )

    __table_args__ = (
        CheckConstraint("length(tracking_id) = 13", name="ck_bookings_tracking_id_length"),
        CheckConstraint("price_base >= 0", name="ck_bookings_price_base"),
        CheckConstraint("price_addons >= 0", name="ck_bookings_price_addons"),
        CheckConstraint("price_total >= 0", name="ck_bookings_price_total"),
        Index("ix_bookings_status_created_at", "status", "created_at"),
    )

    def __repr__(self):
        return f"<Booking {self.tracking_id} {self.status}>"


class BookingStatusHistory(Base):
    """Append-only record of one status a booking has held."""

    __tablename__ = "booking_status_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(String(36), ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(
        SQLEnum(BookingStatus, name="history_status", native_enum=False, length=20,
                values_callable=enum_values, create_constraint=True),
        nullable=False,
    )
    note = Column(Text, nullable=False)
    created_by = Column(
        SQLEnum(HistoryActor, name="history_actor", native_enum=False, length=10,
                values_callable=enum_values, create_constraint=True),
        nullable=False,
        default=HistoryActor.ADMIN,
    )
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    booking = relationship("Booking", back_populates="history")

    def __repr__(self):
        return f"<BookingStatusHistory {self.booking_id} {self.status} by {self.created_by}>"
