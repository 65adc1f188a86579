"""
Price Quoting Engine

Pricing flow:
1. Resolve the zone of the pickup area and of the dropoff area
2. Find the active ZoneRate for the ordered pair (pickup zone -> dropoff zone);
   rates are directional and there is no fallback to the reverse pair
3. Sum the fees of the requested add-ons that exist and are active
4. total = base + add-ons

All money is Decimal with two places. A failed quote is a normal result
(success=False plus an error code), not an exception.
"""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Tuple
import enum

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from dolu.models.pricing import ZoneRate, Addon
from dolu.services.locations import zone_of

logger = structlog.get_logger()

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """Coerce a DB/JSON numeric to a two-place Decimal without going through binary float."""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


class QuoteError(str, enum.Enum):
    """Why a quote could not be produced."""
    INCOMPLETE_ROUTE = "IncompleteRoute"
    INVALID_PICKUP_AREA = "InvalidPickupArea"
    INVALID_DROPOFF_AREA = "InvalidDropoffArea"
    NO_ROUTE_AVAILABLE = "NoRouteAvailable"

    @property
    def message(self) -> str:
        return QUOTE_ERROR_MESSAGES[self]


QUOTE_ERROR_MESSAGES = {
    QuoteError.INCOMPLETE_ROUTE: "Select a pickup and a dropoff area",
    QuoteError.INVALID_PICKUP_AREA: "Invalid pickup area",
    QuoteError.INVALID_DROPOFF_AREA: "Invalid dropoff area",
    QuoteError.NO_ROUTE_AVAILABLE: "No pricing available for this route",
}


@dataclass(frozen=True)
class PriceQuote:
    success: bool
    base_price: Decimal = ZERO
    addons_price: Decimal = ZERO
    total_price: Decimal = ZERO
    eta_text: Optional[str] = None
    error: Optional[QuoteError] = None
    addon_codes: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def failure(cls, error: QuoteError) -> "PriceQuote":
        return cls(success=False, error=error)


def normalize_addon_codes(codes: Optional[Iterable[str]]) -> Tuple[str, ...]:
    """Upper-cased, de-duplicated, sorted codes; blanks dropped."""
    if not codes:
        return ()
    return tuple(sorted({code.strip().upper() for code in codes if code and code.strip()}))


async def find_active_rate(db: AsyncSession, from_zone_id: str, to_zone_id: str) -> Optional[ZoneRate]:
    result = await db.execute(
        select(ZoneRate).where(
            ZoneRate.from_zone_id == from_zone_id,
            ZoneRate.to_zone_id == to_zone_id,
            ZoneRate.active.is_(True),
        )
    )
    return result.scalar_one_or_none()


async def addons_total(db: AsyncSession, codes: Iterable[str]) -> Tuple[Decimal, Tuple[str, ...]]:
    """
    Sum fees of active add-ons among `codes`.

    Unknown or inactive codes contribute nothing and do not fail the quote,
    so retiring an add-on never blocks checkout for stale selections.
    Returns (fee total, codes actually applied).
    """
    codes = normalize_addon_codes(codes)
    if not codes:
        return ZERO, ()

    result = await db.execute(
        select(Addon.code, Addon.fee).where(Addon.code.in_(codes), Addon.active.is_(True))
    )
    rows = result.all()
    total = sum((to_money(fee) for _, fee in rows), ZERO)
    applied = tuple(sorted(code for code, _ in rows))
    return total, applied


async def quote(
    db: AsyncSession,
    pickup_area_id: Optional[str],
    dropoff_area_id: Optional[str],
    addon_codes: Optional[Iterable[str]] = None,
) -> PriceQuote:
    """Compute a price quote for a pickup/dropoff pair plus add-ons."""
    if not pickup_area_id or not dropoff_area_id:
        return PriceQuote.failure(QuoteError.INCOMPLETE_ROUTE)

    pickup_zone_id = await zone_of(db, pickup_area_id)
    if pickup_zone_id is None:
        logger.info("Quote failed", error=QuoteError.INVALID_PICKUP_AREA.value, area_id=pickup_area_id)
        return PriceQuote.failure(QuoteError.INVALID_PICKUP_AREA)

    dropoff_zone_id = await zone_of(db, dropoff_area_id)
    if dropoff_zone_id is None:
        logger.info("Quote failed", error=QuoteError.INVALID_DROPOFF_AREA.value, area_id=dropoff_area_id)
        return PriceQuote.failure(QuoteError.INVALID_DROPOFF_AREA)

    rate = await find_active_rate(db, pickup_zone_id, dropoff_zone_id)
    if rate is None:
        logger.info(
            "Quote failed",
            error=QuoteError.NO_ROUTE_AVAILABLE.value,
            from_zone_id=pickup_zone_id,
            to_zone_id=dropoff_zone_id,
        )
        return PriceQuote.failure(QuoteError.NO_ROUTE_AVAILABLE)

    base_price = to_money(rate.base_price)
    addons_price, applied = await addons_total(db, addon_codes or ())

    return PriceQuote(
        success=True,
        base_price=base_price,
        addons_price=addons_price,
        total_price=base_price + addons_price,
        eta_text=rate.eta_text,
        addon_codes=applied,
    )
