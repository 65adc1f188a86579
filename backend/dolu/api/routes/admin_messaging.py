"""
Staff Messaging Routes: contact inbox, message templates and the message log
"""
from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from dolu.api.errors import http_error
from dolu.db.database import get_db
from dolu.models.messaging import ContactMessageStatus, MessageChannel
from dolu.schemas import (
    ContactMessageListResponse, ContactMessageResponse, ContactMessageUpdate,
    MessageTemplateResponse, MessageTemplateUpdate,
    MessageLogListResponse, MessageLogResponse,
)
from dolu.services import contact, messaging
from dolu.services.errors import DoluError

messages_router = APIRouter()
templates_router = APIRouter()
message_logs_router = APIRouter()


# ==================== Contact Inbox ====================

@messages_router.get("", response_model=ContactMessageListResponse)
async def list_contact_messages(
    status: Optional[ContactMessageStatus] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    total, items = await contact.list_contact_messages(db, status=status, limit=limit, offset=offset)
    return ContactMessageListResponse(
        total=total,
        items=[ContactMessageResponse.model_validate(message) for message in items],
    )


@messages_router.get("/{message_id}", response_model=ContactMessageResponse)
async def get_contact_message(message_id: str, db: AsyncSession = Depends(get_db)):
    try:
        return await contact.get_contact_message(db, message_id)
    except DoluError as exc:
        raise http_error(exc)


@messages_router.patch("/{message_id}", response_model=ContactMessageResponse)
async def update_contact_message(
    message_id: str,
    data: ContactMessageUpdate,
    db: AsyncSession = Depends(get_db),
):
    try:
        return await contact.update_contact_message(db, message_id, data.model_dump(exclude_unset=True))
    except DoluError as exc:
        raise http_error(exc)


@messages_router.delete("/{message_id}", status_code=204)
async def delete_contact_message(message_id: str, db: AsyncSession = Depends(get_db)):
    try:
        await contact.delete_contact_message(db, message_id)
    except DoluError as exc:
        raise http_error(exc)


# ==================== Templates ====================

@templates_router.get("", response_model=List[MessageTemplateResponse])
async def list_templates(db: AsyncSession = Depends(get_db)):
    return await messaging.list_templates(db)


@templates_router.patch("/{template_id}", response_model=MessageTemplateResponse)
async def update_template(
    template_id: str,
    data: MessageTemplateUpdate,
    db: AsyncSession = Depends(get_db),
):
    try:
        return await messaging.update_template(db, template_id, data.model_dump(exclude_unset=True))
    except DoluError as exc:
        raise http_error(exc)


# ==================== Message Log (read only) ====================

@message_logs_router.get("", response_model=MessageLogListResponse)
async def list_message_logs(
    booking_id: Optional[str] = Query(None),
    channel: Optional[MessageChannel] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    total, items = await messaging.list_message_logs(
        db, booking_id=booking_id, channel=channel, limit=limit, offset=offset,
    )
    return MessageLogListResponse(
        total=total,
        items=[MessageLogResponse.model_validate(entry) for entry in items],
    )
