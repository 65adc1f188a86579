"""
Message Templates and Message Log

Templates carry {placeholder} tokens filled from a booking or contact
message. Nothing is delivered from here: "sending" a message means appending
a pending row to the message log, which is never updated or deleted.
"""
from typing import Any, Dict, Iterable, List, Optional
import re

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from dolu.models.booking import Booking, BookingStatus
from dolu.models.location import Area
from dolu.models.messaging import (
    ContactMessage, MessageTemplate, MessageLog,
    MessageChannel, MessageLogStatus, MessageTrigger,
)
from dolu.services.app_settings import AppConfig
from dolu.services.errors import ConflictError, NotFoundError, ValidationFailedError

logger = structlog.get_logger()

PLACEHOLDER = re.compile(r"\{(\w+)\}")

TRACKING_TEMPLATES = {
    MessageChannel.SMS: "sms_tracking",
    MessageChannel.WHATSAPP: "whatsapp_tracking",
}
NEW_BOOKING_TEMPLATE = "email_new_booking"
NEW_CONTACT_TEMPLATE = "email_contact_message"


def render(text: Optional[str], context: Dict[str, Any]) -> Optional[str]:
    """Substitute {name} tokens; tokens with no value in `context` are left as-is."""
    if text is None:
        return None

    def replace(match):
        value = context.get(match.group(1))
        return match.group(0) if value is None else str(value)

    return PLACEHOLDER.sub(replace, text)


def format_naira(amount) -> str:
    return f"{amount:,.2f}"


async def _area_name(db: AsyncSession, area_id: Optional[str]) -> str:
    if not area_id:
        return "Unknown Area"
    name = await db.scalar(select(Area.name).where(Area.id == area_id))
    return name or "Unknown Area"


async def booking_context(db: AsyncSession, booking: Booking, config: AppConfig) -> Dict[str, Any]:
    """Placeholder values available to booking templates."""
    status = BookingStatus(booking.status)
    return {
        "tracking_id": booking.tracking_id,
        "sender_name": booking.sender_name,
        "sender_phone": booking.sender_phone,
        "receiver_name": booking.receiver_name,
        "receiver_phone": booking.receiver_phone,
        "status": status.label,
        "pickup_area": await _area_name(db, booking.pickup_area_id),
        "dropoff_area": await _area_name(db, booking.dropoff_area_id),
        "rider_name": booking.rider_name,
        "price_total": format_naira(booking.price_total),
        "customer_care_phone": config.customer_care_phone,
    }


def contact_context(message: ContactMessage) -> Dict[str, Any]:
    return {
        "name": message.name,
        "email": message.email or "-",
        "phone": message.phone or "-",
        "subject": message.subject or "-",
        "message": message.message,
    }


async def get_active_template(db: AsyncSession, code: str) -> Optional[MessageTemplate]:
    result = await db.execute(
        select(MessageTemplate).where(MessageTemplate.code == code, MessageTemplate.active.is_(True))
    )
    return result.scalar_one_or_none()


def log_message(
    db: AsyncSession,
    *,
    channel: MessageChannel,
    recipient: str,
    body: str,
    triggered_by: MessageTrigger,
    subject: Optional[str] = None,
    template_code: Optional[str] = None,
    booking_id: Optional[str] = None,
    contact_message_id: Optional[str] = None,
) -> MessageLog:
    """Append a log row to the caller's transaction (no commit)."""
    entry = MessageLog(
        message_type=channel,
        recipient=recipient,
        body=body,
        subject=subject,
        template_code=template_code,
        booking_id=booking_id,
        contact_message_id=contact_message_id,
        status=MessageLogStatus.PENDING,
        triggered_by=triggered_by,
    )
    db.add(entry)
    logger.info(
        "Message logged",
        channel=channel.value,
        template=template_code,
        booking_id=booking_id,
        triggered_by=triggered_by.value,
    )
    return entry


async def log_from_template(
    db: AsyncSession,
    code: str,
    recipients: Iterable[str],
    context: Dict[str, Any],
    triggered_by: MessageTrigger,
    booking_id: Optional[str] = None,
    contact_message_id: Optional[str] = None,
) -> List[MessageLog]:
    """Render template `code` once per recipient. A missing or inactive template logs nothing."""
    template = await get_active_template(db, code)
    if template is None:
        logger.warning("Message template unavailable, nothing logged", template=code)
        return []

    subject = render(template.subject, context)
    body = render(template.body, context)
    return [
        log_message(
            db,
            channel=MessageChannel(template.type),
            recipient=recipient,
            body=body,
            subject=subject,
            template_code=template.code,
            triggered_by=triggered_by,
            booking_id=booking_id,
            contact_message_id=contact_message_id,
        )
        for recipient in recipients
    ]


async def notify_new_booking(db: AsyncSession, booking: Booking, config: AppConfig) -> List[MessageLog]:
    if not config.email_on_new_booking or not config.admin_emails:
        return []
    context = await booking_context(db, booking, config)
    return await log_from_template(
        db, NEW_BOOKING_TEMPLATE, config.admin_emails, context,
        MessageTrigger.SYSTEM, booking_id=booking.id,
    )


async def notify_new_contact_message(db: AsyncSession, message: ContactMessage, config: AppConfig) -> List[MessageLog]:
    if not config.email_on_new_contact_message or not config.admin_emails:
        return []
    return await log_from_template(
        db, NEW_CONTACT_TEMPLATE, config.admin_emails, contact_context(message),
        MessageTrigger.SYSTEM, contact_message_id=message.id,
    )


async def notify_status_change(db: AsyncSession, booking: Booking, config: AppConfig) -> List[MessageLog]:
    """Auto tracking SMS when a parcel goes in progress, if enabled in settings."""
    if booking.status != BookingStatus.IN_PROGRESS or not config.auto_sms_on_in_progress:
        return []
    context = await booking_context(db, booking, config)
    return await log_from_template(
        db, TRACKING_TEMPLATES[MessageChannel.SMS], [booking.sender_phone], context,
        MessageTrigger.AUTO, booking_id=booking.id,
    )


async def queue_tracking_message(
    db: AsyncSession,
    booking: Booking,
    channel: MessageChannel,
    config: AppConfig,
) -> MessageLog:
    """Staff "send tracking message": render and log for the sender."""
    code = TRACKING_TEMPLATES.get(channel)
    if code is None:
        raise ValidationFailedError(f"Tracking messages cannot be sent by {channel.value}")

    if channel == MessageChannel.SMS and not config.sms_enabled:
        raise ValidationFailedError("SMS is disabled in settings")

    recipient = booking.sender_phone
    if channel == MessageChannel.WHATSAPP:
        recipient = booking.sender_whatsapp or booking.sender_phone

    context = await booking_context(db, booking, config)
    entries = await log_from_template(
        db, code, [recipient], context, MessageTrigger.ADMIN, booking_id=booking.id,
    )
    if not entries:
        raise NotFoundError(f"Template {code!r} is missing or inactive")

    await db.commit()
    return entries[0]


async def list_message_logs(
    db: AsyncSession,
    booking_id: Optional[str] = None,
    channel: Optional[MessageChannel] = None,
    limit: int = 50,
    offset: int = 0,
):
    query = select(MessageLog).order_by(MessageLog.created_at.desc())
    if booking_id:
        query = query.where(MessageLog.booking_id == booking_id)
    if channel:
        query = query.where(MessageLog.message_type == channel)

    total = await db.scalar(select(func.count()).select_from(query.subquery()))
    result = await db.execute(query.limit(limit).offset(offset))
    return total, list(result.scalars().all())


async def list_templates(db: AsyncSession) -> List[MessageTemplate]:
    result = await db.execute(select(MessageTemplate).order_by(MessageTemplate.type, MessageTemplate.name))
    return list(result.scalars().all())


async def update_template(db: AsyncSession, template_id: str, changes: Dict[str, Any]) -> MessageTemplate:
    template = await db.get(MessageTemplate, template_id)
    if template is None:
        raise NotFoundError("Template not found")

    for field, value in changes.items():
        setattr(template, field, value)
    if "body" in changes or "subject" in changes:
        found = set(PLACEHOLDER.findall(template.body or "")) | set(PLACEHOLDER.findall(template.subject or ""))
        template.placeholders = sorted(found)

    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise ConflictError("A template with that name already exists") from exc
    logger.info("Template updated", code=template.code, fields=sorted(changes))
    return template
