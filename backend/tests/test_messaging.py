"""
Template rendering and message-log production. Nothing is delivered; log
entries stay pending.
"""
import pytest
from sqlalchemy import select, update

from dolu.models import MessageLog, MessageTemplate
from dolu.models.booking import BookingStatus
from dolu.models.messaging import MessageChannel, MessageLogStatus, MessageTrigger
from dolu.schemas import ContactMessageCreate
from dolu.services import bookings, contact, messaging
from dolu.services.app_settings import load_app_config, parse_setting, update_setting
from dolu.services.errors import ConflictError, NotFoundError, ValidationFailedError
from dolu.services.pricing import quote


async def create(db, booking_payload, generator):
    data = booking_payload()
    price_quote = await quote(db, data.pickup_area_id, data.dropoff_area_id, data.addons_selected)
    return await bookings.create_booking(db, data, price_quote, generator=generator)


async def logs(db, **filters):
    result = await db.execute(select(MessageLog).filter_by(**filters).order_by(MessageLog.created_at))
    return list(result.scalars().all())


def test_render_substitutes_known_tokens_only():
    text = "Hi {sender_name}, parcel {tracking_id} {unknown}"
    rendered = messaging.render(text, {"sender_name": "Ada", "tracking_id": "DL20240209001"})
    assert rendered == "Hi Ada, parcel DL20240209001 {unknown}"
    assert messaging.render(None, {}) is None


async def test_new_booking_logs_admin_email(db, booking_payload, generator):
    booking = await create(db, booking_payload, generator)

    entries = await logs(db, booking_id=booking.id)
    assert len(entries) == 1
    entry = entries[0]
    assert entry.message_type == MessageChannel.EMAIL
    assert entry.recipient == "admin@dolulogistics.com"
    assert entry.template_code == "email_new_booking"
    assert entry.subject == "New Booking: DL20240209001"
    assert "Rumuola → Eliozu" in entry.body
    assert "₦1,500.00" in entry.body
    assert entry.status == MessageLogStatus.PENDING
    assert entry.triggered_by == MessageTrigger.SYSTEM


async def test_new_booking_email_can_be_switched_off(db, booking_payload, generator):
    await update_setting(db, parse_setting("email_on_new_booking", False))
    booking = await create(db, booking_payload, generator)
    assert await logs(db, booking_id=booking.id) == []


async def test_contact_message_logs_admin_email(db, seeded):
    message = await contact.submit_contact_message(
        db, ContactMessageCreate(name="Ngozi", message="Do you deliver to Onne?", phone="0803-000-1111"),
    )

    entries = await logs(db, contact_message_id=message.id)
    assert len(entries) == 1
    assert entries[0].subject == "New Contact Message from Ngozi"
    assert "Email: -" in entries[0].body
    assert "Phone: 08030001111" in entries[0].body


async def test_auto_sms_when_parcel_goes_in_progress(db, booking_payload, generator):
    await update_setting(db, parse_setting("sms_enabled", True))
    await update_setting(db, parse_setting("sms_send_mode", "auto_on_in_progress"))
    booking = await create(db, booking_payload, generator)

    await bookings.transition_status(db, booking.id, BookingStatus.CONFIRMED)
    assert await logs(db, booking_id=booking.id, message_type=MessageChannel.SMS) == []

    await bookings.transition_status(db, booking.id, BookingStatus.IN_PROGRESS)
    entries = await logs(db, booking_id=booking.id, message_type=MessageChannel.SMS)
    assert len(entries) == 1
    assert entries[0].recipient == "08031234567"
    assert entries[0].triggered_by == MessageTrigger.AUTO
    assert "DL20240209001" in entries[0].body


async def test_no_auto_sms_in_manual_mode(db, booking_payload, generator):
    await update_setting(db, parse_setting("sms_enabled", True))
    booking = await create(db, booking_payload, generator)

    await bookings.transition_status(db, booking.id, BookingStatus.IN_PROGRESS)
    assert await logs(db, booking_id=booking.id, message_type=MessageChannel.SMS) == []


async def test_staff_tracking_message(db, booking_payload, generator):
    booking = await create(db, booking_payload, generator)
    config = await load_app_config(db)

    entry = await messaging.queue_tracking_message(db, booking, MessageChannel.WHATSAPP, config)
    assert entry.recipient == "08031234567"
    assert entry.triggered_by == MessageTrigger.ADMIN
    assert "Status: *Pending*" in entry.body

    with pytest.raises(ValidationFailedError):
        await messaging.queue_tracking_message(db, booking, MessageChannel.SMS, config)
    with pytest.raises(ValidationFailedError):
        await messaging.queue_tracking_message(db, booking, MessageChannel.EMAIL, config)


async def test_inactive_template_skips_entry(db, booking_payload, generator):
    await db.execute(update(MessageTemplate).where(MessageTemplate.code == "email_new_booking").values(active=False))
    await db.execute(update(MessageTemplate).where(MessageTemplate.code == "whatsapp_tracking").values(active=False))
    await db.commit()

    booking = await create(db, booking_payload, generator)
    assert await logs(db, booking_id=booking.id) == []

    config = await load_app_config(db)
    with pytest.raises(NotFoundError):
        await messaging.queue_tracking_message(db, booking, MessageChannel.WHATSAPP, config)


async def test_update_template_refreshes_placeholders(db, seeded):
    template = (await db.execute(
        select(MessageTemplate).where(MessageTemplate.code == "sms_tracking")
    )).scalar_one()

    updated = await messaging.update_template(
        db, template.id, {"body": "{tracking_id} is {status}. Rider: {rider_name}"},
    )
    assert updated.placeholders == ["rider_name", "status", "tracking_id"]


async def test_update_template_duplicate_name(db, seeded):
    template = (await db.execute(
        select(MessageTemplate).where(MessageTemplate.code == "sms_tracking")
    )).scalar_one()
    template_id = template.id

    with pytest.raises(ConflictError):
        await messaging.update_template(db, template_id, {"name": "Tracking WhatsApp"})


async def test_message_log_listing(db, booking_payload, generator):
    booking = await create(db, booking_payload, generator)
    config = await load_app_config(db)
    await messaging.queue_tracking_message(db, booking, MessageChannel.WHATSAPP, config)

    total, items = await messaging.list_message_logs(db, booking_id=booking.id)
    assert total == 2

    total, items = await messaging.list_message_logs(db, channel=MessageChannel.WHATSAPP)
    assert total == 1
    assert items[0].template_code == "whatsapp_tracking"
