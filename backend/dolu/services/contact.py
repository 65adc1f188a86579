"""
Contact Inbox
"""
from typing import List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from dolu.models.messaging import ContactMessage, ContactMessageStatus
from dolu.schemas import ContactMessageCreate
from dolu.services import messaging
from dolu.services.app_settings import load_app_config
from dolu.services.errors import NotFoundError

logger = structlog.get_logger()


async def submit_contact_message(db: AsyncSession, data: ContactMessageCreate) -> ContactMessage:
    """Store a public inquiry; admin email notice is logged in the same transaction."""
    config = await load_app_config(db)

    message = ContactMessage(**data.model_dump(), status=ContactMessageStatus.NEW)
    db.add(message)
    await db.flush()
    await messaging.notify_new_contact_message(db, message, config)
    await db.commit()

    logger.info("Contact message received", contact_message_id=message.id)
    return message


async def list_contact_messages(
    db: AsyncSession,
    status: Optional[ContactMessageStatus] = None,
    limit: int = 50,
    offset: int = 0,
) -> Tuple[int, List[ContactMessage]]:
    query = select(ContactMessage).order_by(ContactMessage.created_at.desc())
    if status:
        query = query.where(ContactMessage.status == status)

    total = await db.scalar(select(func.count()).select_from(query.subquery()))
    result = await db.execute(query.limit(limit).offset(offset))
    return total, list(result.scalars().all())


async def get_contact_message(db: AsyncSession, message_id: str) -> ContactMessage:
    message = await db.get(ContactMessage, message_id)
    if message is None:
        raise NotFoundError(f"Contact message {message_id} not found")
    return message


async def update_contact_message(db: AsyncSession, message_id: str, changes: dict) -> ContactMessage:
    message = await get_contact_message(db, message_id)
    for field, value in changes.items():
        setattr(message, field, value)
    await db.commit()
    logger.info("Contact message updated", contact_message_id=message_id, fields=sorted(changes))
    return message


async def delete_contact_message(db: AsyncSession, message_id: str) -> None:
    message = await get_contact_message(db, message_id)
    await db.delete(message)
    await db.commit()
    logger.info("Contact message deleted", contact_message_id=message_id)
