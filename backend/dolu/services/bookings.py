"""
Booking Lifecycle Manager

Invariants kept here:
- A booking is only created from a successful quote, and its price fields
  are a verbatim snapshot of that quote; nothing recomputes them later.
- Every status a booking holds has exactly one history entry. Creation
  writes the booking and its initial "pending" entry in one transaction;
  each staff transition writes the new status and its entry in one
  transaction. Either both rows land or neither does.
- Only the tracking-id claim is retried on conflict, never the booking as a
  whole.
"""
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from dolu.config import settings
from dolu.db.database import new_uuid
from dolu.models.booking import Booking, BookingStatusHistory, BookingStatus, HistoryActor
from dolu.models.location import Area, City, State
from dolu.models.pricing import ItemCategory
from dolu.schemas import BookingCreate
from dolu.services import messaging
from dolu.services.app_settings import load_app_config
from dolu.services.errors import (
    BookingNotFoundError, InvalidTransitionError, QuoteRejectedError,
    TrackingIdUnavailableError, ValidationFailedError,
)
from dolu.services.pricing import PriceQuote
from dolu.services.tracking import (
    TrackingIdGenerator, default_generator, is_tracking_id_conflict, normalize_tracking_id,
)

logger = structlog.get_logger()

INITIAL_HISTORY_NOTE = "Booking received. Customer care will call you shortly."

DEFAULT_TRANSITION_NOTES = {
    BookingStatus.CONFIRMED: "Booking confirmed.",
    BookingStatus.NOT_ACCEPTED: "Booking could not be accepted.",
    BookingStatus.IN_PROGRESS: "Parcel picked up and in transit.",
    BookingStatus.DELIVERED: "Delivered successfully.",
    BookingStatus.CANCELLED: "Booking cancelled.",
}

# pending is assigned by the system at creation only
TRANSITION_TARGETS = frozenset(DEFAULT_TRANSITION_NOTES)


async def _check_item_category(db: AsyncSession, data: BookingCreate) -> None:
    category = await db.get(ItemCategory, data.item_category_id)
    if category is None or not category.active:
        raise ValidationFailedError("Please select a valid item category")
    if category.requires_notes and not data.item_notes:
        raise ValidationFailedError(f"Please describe the item for category '{category.name}'")


async def _check_side(
    db: AsyncSession,
    side: str,
    area_id: str,
    city_id: Optional[str],
    state_id: Optional[str],
) -> Dict[str, str]:
    """Resolve one end of the route to the area's own active city and state."""
    area = await db.get(Area, area_id)
    if area is None or not area.active:
        raise ValidationFailedError(f"Please select a valid {side} area")
    if city_id and city_id != area.city_id:
        raise ValidationFailedError(f"The {side} area is not in the selected city")

    city = await db.get(City, area.city_id)
    if city is None or not city.active:
        raise ValidationFailedError(f"The {side} city is not available")
    if state_id and state_id != city.state_id:
        raise ValidationFailedError(f"The {side} city is not in the selected state")

    state = await db.get(State, city.state_id)
    if state is None or not state.active:
        raise ValidationFailedError(f"The {side} state is not available")

    return {f"{side}_city_id": city.id, f"{side}_state_id": state.id}


async def _check_route(db: AsyncSession, data: BookingCreate) -> Dict[str, str]:
    """City and state ids for both ends; omitted ones are filled from the area."""
    route = await _check_side(db, "pickup", data.pickup_area_id, data.pickup_city_id, data.pickup_state_id)
    route.update(await _check_side(
        db, "dropoff", data.dropoff_area_id, data.dropoff_city_id, data.dropoff_state_id,
    ))
    return route


def _build_booking(
    data: BookingCreate,
    route: Dict[str, str],
    tracking_id: str,
    price_quote: PriceQuote,
) -> Booking:
    fields = data.model_dump(exclude={"addons_selected"})
    fields.update(route)
    return Booking(
        id=new_uuid(),
        tracking_id=tracking_id,
        status=BookingStatus.PENDING,
        price_base=price_quote.base_price,
        price_addons=price_quote.addons_price,
        price_total=price_quote.total_price,
        addons_selected=list(price_quote.addon_codes),
        **fields,
    )


async def create_booking(
    db: AsyncSession,
    data: BookingCreate,
    price_quote: PriceQuote,
    generator: TrackingIdGenerator = default_generator,
    max_attempts: Optional[int] = None,
) -> Booking:
    """
    Persist a new pending booking with its price snapshot and first history entry.

    Raises QuoteRejectedError if the quote failed, TrackingIdExhaustedError
    when the day's sequence is used up, and TrackingIdUnavailableError after
    `max_attempts` tracking-id conflicts.
    """
    if not price_quote.success:
        raise QuoteRejectedError(price_quote.error.value if price_quote.error else "unknown")

    route = await _check_route(db, data)
    await _check_item_category(db, data)
    config = await load_app_config(db)
    max_attempts = max_attempts or settings.tracking_id_max_attempts

    for attempt in range(1, max_attempts + 1):
        tracking_id = await generator.generate(db)

        booking = _build_booking(data, route, tracking_id, price_quote)
        db.add(booking)
        db.add(BookingStatusHistory(
            booking_id=booking.id,
            status=BookingStatus.PENDING,
            note=INITIAL_HISTORY_NOTE,
            created_by=HistoryActor.SYSTEM,
        ))

        try:
            await db.flush()
            await messaging.notify_new_booking(db, booking, config)
            await db.commit()
        except IntegrityError as exc:
            await db.rollback()
            if not is_tracking_id_conflict(exc):
                raise
            logger.warning("Tracking id taken, retrying", tracking_id=tracking_id, attempt=attempt)
            continue

        logger.info(
            "Booking created",
            tracking_id=tracking_id,
            booking_id=booking.id,
            price_total=str(booking.price_total),
        )
        return booking

    logger.error("Could not claim a tracking id", attempts=max_attempts)
    raise TrackingIdUnavailableError(f"No free tracking id after {max_attempts} attempts")


def _with_details(query):
    return query.options(
        selectinload(Booking.history),
        selectinload(Booking.pickup_area),
        selectinload(Booking.dropoff_area),
        selectinload(Booking.item_category),
    ).execution_options(populate_existing=True)


async def fetch_booking_by_tracking_id(db: AsyncSession, tracking_id: str) -> Optional[Booking]:
    """Public tracking lookup; input is trimmed and upper-cased."""
    tracking_id = normalize_tracking_id(tracking_id)
    if not tracking_id:
        return None
    result = await db.execute(_with_details(select(Booking).where(Booking.tracking_id == tracking_id)))
    return result.scalar_one_or_none()


async def get_booking(db: AsyncSession, booking_id: str) -> Booking:
    result = await db.execute(_with_details(select(Booking).where(Booking.id == booking_id)))
    booking = result.scalar_one_or_none()
    if booking is None:
        raise BookingNotFoundError(f"Booking {booking_id} not found")
    return booking


async def fetch_booking_history(db: AsyncSession, booking_id: str) -> List[BookingStatusHistory]:
    """History entries oldest first; insertion order breaks timestamp ties."""
    result = await db.execute(
        select(BookingStatusHistory)
        .where(BookingStatusHistory.booking_id == booking_id)
        .order_by(BookingStatusHistory.created_at.asc(), BookingStatusHistory.id.asc())
    )
    return list(result.scalars().all())


async def transition_status(
    db: AsyncSession,
    booking_id: str,
    new_status,
    note: Optional[str] = None,
    actor: HistoryActor = HistoryActor.ADMIN,
) -> Booking:
    """Change a booking's status and append its history entry atomically."""
    try:
        new_status = BookingStatus(new_status)
    except ValueError:
        raise InvalidTransitionError(f"Unknown status: {new_status}")
    if new_status not in TRANSITION_TARGETS:
        raise InvalidTransitionError(f"Bookings cannot be moved back to '{new_status.value}'")

    config = await load_app_config(db)

    # Row lock serialises concurrent staff edits on databases that support it;
    # populate_existing refreshes a copy already held in this session.
    result = await db.execute(
        select(Booking)
        .where(Booking.id == booking_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    booking = result.scalar_one_or_none()
    if booking is None:
        raise BookingNotFoundError(f"Booking {booking_id} not found")

    previous = BookingStatus(booking.status)
    if previous == new_status:
        raise InvalidTransitionError(f"Booking is already {new_status.label.lower()}")

    note = (note or "").strip() or DEFAULT_TRANSITION_NOTES[new_status]
    booking.status = new_status
    db.add(BookingStatusHistory(
        booking_id=booking.id,
        status=new_status,
        note=note,
        created_by=actor,
    ))
    await messaging.notify_status_change(db, booking, config)

    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Booking status changed",
        tracking_id=booking.tracking_id,
        from_status=previous.value,
        to_status=new_status.value,
        actor=HistoryActor(actor).value,
    )
    return booking


async def assign_rider(
    db: AsyncSession,
    booking_id: str,
    rider_name: Optional[str],
    rider_phone: Optional[str],
) -> Booking:
    """Plain field update; not a status change, so no history entry."""
    booking = await db.get(Booking, booking_id)
    if booking is None:
        raise BookingNotFoundError(f"Booking {booking_id} not found")
    booking.rider_name = rider_name
    booking.rider_phone = rider_phone
    await db.commit()
    logger.info("Rider assigned", tracking_id=booking.tracking_id, rider_name=rider_name)
    return booking


async def update_admin_notes(db: AsyncSession, booking_id: str, admin_notes: Optional[str]) -> Booking:
    booking = await db.get(Booking, booking_id)
    if booking is None:
        raise BookingNotFoundError(f"Booking {booking_id} not found")
    booking.admin_notes = admin_notes
    await db.commit()
    return booking


async def list_bookings(
    db: AsyncSession,
    status: Optional[BookingStatus] = None,
    search: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
) -> Tuple[int, List[Booking]]:
    """Staff desk listing, newest first. `search` matches tracking id or either phone."""
    query = select(Booking).order_by(Booking.created_at.desc())
    if status:
        query = query.where(Booking.status == status)
    if search:
        term = f"%{search.strip()}%"
        query = query.where(or_(
            Booking.tracking_id.ilike(term),
            Booking.sender_phone.ilike(term),
            Booking.receiver_phone.ilike(term),
        ))

    total = await db.scalar(select(func.count()).select_from(query.subquery()))
    result = await db.execute(query.limit(limit).offset(offset))
    return total, list(result.scalars().all())


async def booking_stats(db: AsyncSession) -> Dict[str, int]:
    """Dashboard counts per status plus total."""
    result = await db.execute(select(Booking.status, func.count()).group_by(Booking.status))
    stats = {status.value: 0 for status in BookingStatus}
    for status, count in result.all():
        stats[BookingStatus(status).value] = count
    stats["total"] = sum(stats.values())
    return stats
