"""
Default reference data: the Port Harcourt launch zones, rates, add-ons,
item categories, business settings and message templates.

Seeding is idempotent: rows whose natural key already exists are left alone.
"""
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from dolu.models.location import State, City, Zone, Area
from dolu.models.pricing import ZoneRate, Addon, ItemCategory
from dolu.models.messaging import MessageTemplate, MessageChannel, AppSetting
from dolu.services.app_settings import SETTING_DESCRIPTIONS, parse_setting
from dolu.services.messaging import PLACEHOLDER

logger = structlog.get_logger()

ZONES = {
    "Zone A": "City center and surrounding areas",
    "Zone B": "Mid-range areas",
    "Zone C": "Outer areas",
}

AREAS = {
    "Zone A": ["D-Line", "Rumuola", "GRA Phase 1", "GRA Phase 2", "Old GRA", "Trans Amadi", "Rumukurushi"],
    "Zone B": ["Rumuokoro", "Rumueprikom", "Rumuokwuta", "Rukpokwu", "Eliozu", "Alakahia", "Choba", "Ada George"],
    "Zone C": ["Rumuokwurusi", "Rumuodomaya", "Rumueme", "Eleme Junction", "Igwuruta", "Ozuoba"],
}

ZONE_RATES = [
    ("Zone A", "Zone A", "800.00", "30-45 minutes"),
    ("Zone A", "Zone B", "1200.00", "45-60 minutes"),
    ("Zone A", "Zone C", "1500.00", "60-90 minutes"),
    ("Zone B", "Zone A", "1200.00", "45-60 minutes"),
    ("Zone B", "Zone B", "1000.00", "30-45 minutes"),
    ("Zone B", "Zone C", "1300.00", "45-60 minutes"),
    ("Zone C", "Zone A", "1500.00", "60-90 minutes"),
    ("Zone C", "Zone B", "1300.00", "45-60 minutes"),
    ("Zone C", "Zone C", "1200.00", "30-60 minutes"),
]

ADDONS = [
    ("Fragile Handling", "FRAGILE", "Extra care for delicate items", "300.00"),
    ("Express Delivery", "EXPRESS", "Priority delivery service", "500.00"),
]

ITEM_CATEGORIES = [
    ("Documents", "DOCUMENTS", "Papers, contracts, certificates, etc.", False),
    ("Food Items", "FOOD", "Meals, groceries, perishables", False),
    ("Electronics/Gadgets", "ELECTRONICS", "Phones, laptops, accessories", False),
    ("Fashion/Clothing", "FASHION", "Clothes, shoes, accessories", False),
    ("Cosmetics", "COSMETICS", "Beauty products, skincare items", False),
    ("Gifts/Packages", "GIFTS", "Gift items, wrapped packages", False),
    ("Household Items", "HOUSEHOLD", "Home goods, kitchen items, etc.", False),
    ("Other", "OTHER", "Other items (please specify in notes)", True),
]

DEFAULT_SETTINGS = {
    "customer_care_phone": "+234 913 027 8580",
    "customer_care_whatsapp": "+234 913 027 8580",
    "business_hours_text": "Monday-Friday: 8:30 AM - 5:00 PM, Saturday: 9:00 AM - 5:00 PM, Sunday: Closed",
    "admin_emails": ["admin@dolulogistics.com"],
    "email_on_new_booking": True,
    "email_on_new_contact_message": True,
    "sms_enabled": False,
    "sms_send_mode": "manual_only",
    "sms_provider": "termii",
    "sms_api_key": "",
    "sms_sender_name": "DoluLog",
}

TEMPLATES = [
    (
        "Tracking SMS", MessageChannel.SMS, "sms_tracking", None,
        "Hi {sender_name}, your parcel (ID: {tracking_id}) is on the way! "
        "Track it at dolulogistics.com/track. Questions? Call {customer_care_phone}. - Dolu Logistics",
    ),
    (
        "Tracking WhatsApp", MessageChannel.WHATSAPP, "whatsapp_tracking", None,
        "Hello {sender_name}! \U0001F4E6\n\n"
        "Your parcel is being delivered:\n"
        "Tracking ID: *{tracking_id}*\n"
        "Status: *{status}*\n"
        "Route: {pickup_area} → {dropoff_area}\n\n"
        "Track online: dolulogistics.com/track\n\n"
        "Need help? Call us: {customer_care_phone}\n\n"
        "Thank you for choosing Dolu Logistics! \U0001F69A",
    ),
    (
        "New Booking Email (Admin)", MessageChannel.EMAIL, "email_new_booking", "New Booking: {tracking_id}",
        "A new booking has been received.\n\n"
        "Tracking ID: {tracking_id}\n"
        "Sender: {sender_name} ({sender_phone})\n"
        "Receiver: {receiver_name} ({receiver_phone})\n"
        "Route: {pickup_area} → {dropoff_area}\n"
        "Total: ₦{price_total}\n\n"
        "Status: Pending\n\n"
        "- Dolu Logistics System",
    ),
    (
        "New Contact Message Email (Admin)", MessageChannel.EMAIL, "email_contact_message",
        "New Contact Message from {name}",
        "A new contact message has been received.\n\n"
        "From: {name}\n"
        "Email: {email}\n"
        "Phone: {phone}\n"
        "Subject: {subject}\n\n"
        "Message:\n{message}\n\n"
        "- Dolu Logistics System",
    ),
]


async def _get_or_create(db: AsyncSession, model, lookup: dict, **values):
    result = await db.execute(select(model).filter_by(**lookup))
    row = result.scalar_one_or_none()
    if row is None:
        row = model(**lookup, **values)
        db.add(row)
        await db.flush()
    return row


async def seed_locations(db: AsyncSession) -> dict:
    """Rivers / Port Harcourt with zones A-C. Returns zones by name."""
    state = await _get_or_create(db, State, {"code": "NG-RI"}, name="Rivers")
    city = await _get_or_create(db, City, {"state_id": state.id, "name": "Port Harcourt"})

    zones = {}
    for name, description in ZONES.items():
        zones[name] = await _get_or_create(db, Zone, {"city_id": city.id, "name": name}, description=description)

    for zone_name, area_names in AREAS.items():
        for area_name in area_names:
            await _get_or_create(
                db, Area, {"city_id": city.id, "name": area_name}, zone_id=zones[zone_name].id,
            )
    return zones


async def seed_pricing(db: AsyncSession, zones: dict) -> None:
    for from_name, to_name, price, eta in ZONE_RATES:
        await _get_or_create(
            db, ZoneRate,
            {"from_zone_id": zones[from_name].id, "to_zone_id": zones[to_name].id},
            base_price=Decimal(price), eta_text=eta,
        )
    for name, code, description, fee in ADDONS:
        await _get_or_create(db, Addon, {"code": code}, name=name, description=description, fee=Decimal(fee))
    for name, code, description, requires_notes in ITEM_CATEGORIES:
        await _get_or_create(
            db, ItemCategory, {"code": code},
            name=name, description=description, requires_notes=requires_notes,
        )


async def seed_settings(db: AsyncSession) -> None:
    for key, value in DEFAULT_SETTINGS.items():
        parse_setting(key, value)
        await _get_or_create(db, AppSetting, {"key": key}, value=value, description=SETTING_DESCRIPTIONS[key])


async def seed_templates(db: AsyncSession) -> None:
    for name, channel, code, subject, body in TEMPLATES:
        placeholders = sorted(set(PLACEHOLDER.findall(body)) | set(PLACEHOLDER.findall(subject or "")))
        await _get_or_create(
            db, MessageTemplate, {"code": code},
            name=name, type=channel, subject=subject, body=body, placeholders=placeholders,
        )


async def seed_all(db: AsyncSession) -> None:
    zones = await seed_locations(db)
    await seed_pricing(db, zones)
    await seed_settings(db)
    await seed_templates(db)
    await db.commit()
    logger.info("Reference data seeded")
