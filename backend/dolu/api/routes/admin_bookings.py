"""
Staff Booking Desk Routes
"""
from fastapi import APIRouter, Depends, Query
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from dolu.api.errors import http_error
from dolu.db.database import get_db
from dolu.models.booking import BookingStatus
from dolu.schemas import (
    BookingListResponse, BookingSummary, BookingDetailResponse, BookingStatsResponse,
    StatusTransitionRequest, RiderAssignment, AdminNotesUpdate, SendMessageRequest,
    MessageLogResponse,
)
from dolu.services import bookings, messaging
from dolu.services.app_settings import load_app_config
from dolu.services.errors import DoluError

router = APIRouter()


@router.get("", response_model=BookingListResponse)
async def list_bookings(
    status: Optional[BookingStatus] = Query(None),
    search: Optional[str] = Query(None, description="Tracking id or phone number"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    total, items = await bookings.list_bookings(db, status=status, search=search, limit=limit, offset=offset)
    return BookingListResponse(
        total=total,
        items=[BookingSummary.model_validate(booking) for booking in items],
    )


@router.get("/stats", response_model=BookingStatsResponse)
async def booking_stats(db: AsyncSession = Depends(get_db)):
    return await bookings.booking_stats(db)


@router.get("/{booking_id}", response_model=BookingDetailResponse)
async def get_booking(booking_id: str, db: AsyncSession = Depends(get_db)):
    try:
        booking = await bookings.get_booking(db, booking_id)
    except DoluError as exc:
        raise http_error(exc)
    return BookingDetailResponse.from_booking(booking)


@router.post("/{booking_id}/status", response_model=BookingDetailResponse)
async def transition_status(
    booking_id: str,
    request: StatusTransitionRequest,
    db: AsyncSession = Depends(get_db),
):
    """Move a booking to a new status; the history entry is written in the same transaction."""
    try:
        await bookings.transition_status(db, booking_id, request.status, request.note)
        booking = await bookings.get_booking(db, booking_id)
    except DoluError as exc:
        raise http_error(exc)
    return BookingDetailResponse.from_booking(booking)


@router.put("/{booking_id}/rider", response_model=BookingDetailResponse)
async def assign_rider(booking_id: str, request: RiderAssignment, db: AsyncSession = Depends(get_db)):
    try:
        await bookings.assign_rider(db, booking_id, request.rider_name, request.rider_phone)
        booking = await bookings.get_booking(db, booking_id)
    except DoluError as exc:
        raise http_error(exc)
    return BookingDetailResponse.from_booking(booking)


@router.put("/{booking_id}/notes", response_model=BookingDetailResponse)
async def update_admin_notes(booking_id: str, request: AdminNotesUpdate, db: AsyncSession = Depends(get_db)):
    try:
        await bookings.update_admin_notes(db, booking_id, request.admin_notes)
        booking = await bookings.get_booking(db, booking_id)
    except DoluError as exc:
        raise http_error(exc)
    return BookingDetailResponse.from_booking(booking)


@router.post("/{booking_id}/send-message", response_model=MessageLogResponse, status_code=201)
async def send_tracking_message(
    booking_id: str,
    request: SendMessageRequest,
    db: AsyncSession = Depends(get_db),
):
    """Log a tracking message to the sender. Delivery is not performed; the entry stays pending."""
    try:
        booking = await bookings.get_booking(db, booking_id)
        config = await load_app_config(db)
        entry = await messaging.queue_tracking_message(db, booking, request.channel, config)
    except DoluError as exc:
        raise http_error(exc)
    return entry
