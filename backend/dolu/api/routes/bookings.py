"""
Public Booking Routes: request a pickup and track it
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from dolu.api.errors import http_error
from dolu.db.database import get_db
from dolu.schemas import BookingCreate, BookingCreated, TrackingResponse
from dolu.services import bookings, pricing
from dolu.services.errors import DoluError

router = APIRouter()


@router.post("", response_model=BookingCreated, status_code=201)
async def create_booking(data: BookingCreate, db: AsyncSession = Depends(get_db)):
    """Quote the route server-side, then store the booking with that price snapshot."""
    price_quote = await pricing.quote(
        db, data.pickup_area_id, data.dropoff_area_id, data.addons_selected,
    )
    try:
        booking = await bookings.create_booking(db, data, price_quote)
    except DoluError as exc:
        raise http_error(exc)

    return BookingCreated(
        id=booking.id,
        tracking_id=booking.tracking_id,
        status=booking.status,
        price_base=booking.price_base,
        price_addons=booking.price_addons,
        price_total=booking.price_total,
        addons_selected=booking.addons_selected or [],
        eta_text=price_quote.eta_text,
    )


@router.get("/track/{tracking_id}", response_model=TrackingResponse)
async def track_booking(tracking_id: str, db: AsyncSession = Depends(get_db)):
    booking = await bookings.fetch_booking_by_tracking_id(db, tracking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="No booking found with that tracking ID")
    return TrackingResponse.from_booking(booking)
