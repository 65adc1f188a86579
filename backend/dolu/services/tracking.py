"""
Tracking ID Generator

Format: "DL" + YYYYMMDD + 3-digit daily sequence, e.g. DL20240209001.
The sequence restarts at 001 each calendar day (UTC).

generate() proposes the next id after the highest one already used today.
That read alone is race-prone, so uniqueness is ultimately enforced by the
UNIQUE constraint on bookings.tracking_id: booking creation inserts the
candidate and, on a tracking_id conflict, asks for a fresh one.
"""
from datetime import date, datetime
from typing import Callable, Optional, Tuple
import re

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from dolu.models.booking import Booking
from dolu.services.errors import TrackingIdExhaustedError

logger = structlog.get_logger()

TRACKING_PREFIX = "DL"
MAX_DAILY_SEQUENCE = 999
TRACKING_ID_PATTERN = re.compile(r"^DL[0-9]{11}$")

# Unique-violation wording per backend: SQLite names the column,
# PostgreSQL names the unique index created for bookings.tracking_id.
TRACKING_ID_UNIQUE_MARKERS = (
    "UNIQUE constraint failed: bookings.tracking_id",
    'unique constraint "ix_bookings_tracking_id"',
)


def day_prefix(day: date) -> str:
    return f"{TRACKING_PREFIX}{day:%Y%m%d}"


def format_tracking_id(day: date, sequence: int) -> str:
    """Build a tracking id; sequences past 999 fail instead of widening the field."""
    if sequence < 1:
        raise ValueError(f"Tracking sequence must be positive, got {sequence}")
    if sequence > MAX_DAILY_SEQUENCE:
        raise TrackingIdExhaustedError(
            f"Daily tracking id capacity ({MAX_DAILY_SEQUENCE}) reached for {day.isoformat()}"
        )
    return f"{day_prefix(day)}{sequence:03d}"


def parse_tracking_id(tracking_id: str) -> Tuple[date, int]:
    """Split a tracking id into (date, sequence). Raises ValueError if malformed."""
    if not TRACKING_ID_PATTERN.match(tracking_id or ""):
        raise ValueError(f"Malformed tracking id: {tracking_id!r}")
    day = datetime.strptime(tracking_id[2:10], "%Y%m%d").date()
    return day, int(tracking_id[10:])


def normalize_tracking_id(raw: str) -> str:
    """Customers type ids by hand: trim and upper-case before lookup."""
    return (raw or "").strip().upper()


def is_tracking_id_conflict(exc: IntegrityError) -> bool:
    """True when an insert failed on the tracking_id unique index, and on nothing else."""
    message = str(exc.orig)
    return any(marker in message for marker in TRACKING_ID_UNIQUE_MARKERS)


class TrackingIdGenerator:
    """Proposes date-encoded sequential tracking ids."""

    def __init__(self, clock: Callable[[], datetime] = datetime.utcnow):
        self.clock = clock

    def today(self) -> date:
        return self.clock().date()

    async def highest_sequence(self, db: AsyncSession, day: date) -> int:
        # Fixed-width ids sort lexicographically in sequence order.
        result = await db.execute(
            select(func.max(Booking.tracking_id)).where(
                Booking.tracking_id.like(f"{day_prefix(day)}%")
            )
        )
        highest = result.scalar()
        return int(highest[-3:]) if highest else 0

    async def generate(self, db: AsyncSession, day: Optional[date] = None) -> str:
        """Next unused tracking id for `day` (default: today) as of this read."""
        day = day or self.today()
        sequence = await self.highest_sequence(db, day) + 1
        tracking_id = format_tracking_id(day, sequence)
        logger.debug("Tracking id proposed", tracking_id=tracking_id)
        return tracking_id


default_generator = TrackingIdGenerator()
