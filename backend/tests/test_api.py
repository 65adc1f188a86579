"""
HTTP surface: public booking flow, staff console and the bearer-token gate.
"""
from decimal import Decimal

import pytest

from dolu.api.auth import create_access_token


def booking_body(seeded, **overrides):
    body = {
        "sender_name": "Ada Obi",
        "sender_phone": "08031234567",
        "pickup_area_id": seeded.areas["Rumuola"],
        "pickup_address": "12 Rumuola Road",
        "receiver_name": "Chidi Eze",
        "receiver_phone": "08091112222",
        "dropoff_area_id": seeded.areas["Eliozu"],
        "dropoff_address": "4 Eliozu Close",
        "item_category_id": seeded.categories["DOCUMENTS"],
        "addons_selected": ["FRAGILE"],
    }
    body.update(overrides)
    return body


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_location_cascade(client, seeded):
    states = (await client.get("/api/locations/states")).json()
    assert [state["code"] for state in states] == ["NG-RI"]

    cities = (await client.get(f"/api/locations/states/{seeded.state_id}/cities")).json()
    assert [city["name"] for city in cities] == ["Port Harcourt"]

    areas = (await client.get(f"/api/locations/cities/{seeded.city_id}/areas")).json()
    assert "Rumuola" in [area["name"] for area in areas]

    zone = (await client.get(f"/api/locations/areas/{seeded.areas['Rumuola']}/zone")).json()
    assert zone["zone"]["name"] == "Zone A"

    missing = (await client.get("/api/locations/areas/missing/zone")).json()
    assert missing["zone"] is None


async def test_quote_success_and_failures(client, seeded):
    response = await client.post("/api/quotes", json={
        "pickup_area_id": seeded.areas["Rumuola"],
        "dropoff_area_id": seeded.areas["Eliozu"],
        "addon_codes": ["FRAGILE"],
    })
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert Decimal(body["base_price"]) == Decimal("1200.00")
    assert Decimal(body["addons_price"]) == Decimal("300.00")
    assert Decimal(body["total_price"]) == Decimal("1500.00")
    assert body["eta_text"] == "45-60 minutes"

    incomplete = (await client.post("/api/quotes", json={"pickup_area_id": seeded.areas["Rumuola"]})).json()
    assert incomplete["success"] is False
    assert incomplete["error"] == "IncompleteRoute"

    invalid = (await client.post("/api/quotes", json={
        "pickup_area_id": "missing", "dropoff_area_id": seeded.areas["Eliozu"],
    })).json()
    assert invalid["error"] == "InvalidPickupArea"
    assert invalid["message"] == "Invalid pickup area"


async def test_public_catalogs(client, seeded):
    addons = (await client.get("/api/pricing/addons")).json()
    assert {addon["code"] for addon in addons} == {"FRAGILE", "EXPRESS"}

    categories = (await client.get("/api/item-categories")).json()
    assert len(categories) == 8


async def test_create_and_track_booking(client, seeded):
    response = await client.post("/api/bookings", json=booking_body(seeded))
    assert response.status_code == 201
    created = response.json()
    assert created["status"] == "pending"
    assert Decimal(created["price_total"]) == Decimal("1500.00")
    assert created["addons_selected"] == ["FRAGILE"]
    tracking_id = created["tracking_id"]
    assert tracking_id.startswith("DL") and len(tracking_id) == 13

    tracked = await client.get(f"/api/bookings/track/{tracking_id.lower()}")
    assert tracked.status_code == 200
    body = tracked.json()
    assert body["status_label"] == "Pending"
    assert body["pickup_area"] == "Rumuola"
    assert [entry["status"] for entry in body["history"]] == ["pending"]
    assert body["history"][0]["created_by"] == "system"
    assert "sender_phone" not in body
    assert "admin_notes" not in body


async def test_track_unknown_booking(client):
    response = await client.get("/api/bookings/track/DL20990101001")
    assert response.status_code == 404


async def test_booking_rejects_malformed_phone(client, seeded):
    response = await client.post("/api/bookings", json=booking_body(seeded, sender_phone="call me"))
    assert response.status_code == 422


async def test_booking_without_route_is_rejected(client, seeded):
    response = await client.post("/api/bookings", json=booking_body(seeded, dropoff_area_id="missing"))
    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "InvalidDropoffArea"


async def test_booking_requires_item_category(client, seeded):
    body = booking_body(seeded)
    del body["item_category_id"]
    response = await client.post("/api/bookings", json=body)
    assert response.status_code == 422


async def test_booking_with_foreign_city_is_rejected(client, seeded):
    response = await client.post("/api/bookings", json=booking_body(seeded, pickup_city_id="no-such-city"))
    assert response.status_code == 422

    response = await client.post("/api/bookings", json=booking_body(seeded, pickup_city_id=seeded.city_id))
    assert response.status_code == 201


async def test_contact_form(client, seeded, staff_headers):
    response = await client.post("/api/contact", json={"name": "Ngozi", "message": "Hello"})
    assert response.status_code == 201

    inbox = (await client.get("/api/admin/messages", headers=staff_headers)).json()
    assert inbox["total"] == 1
    message_id = inbox["items"][0]["id"]

    updated = await client.patch(
        f"/api/admin/messages/{message_id}", json={"status": "resolved"}, headers=staff_headers,
    )
    assert updated.json()["status"] == "resolved"

    deleted = await client.delete(f"/api/admin/messages/{message_id}", headers=staff_headers)
    assert deleted.status_code == 204


async def test_public_settings(client, seeded):
    body = (await client.get("/api/settings/public")).json()
    assert body == {
        "customer_care_phone": "+234 913 027 8580",
        "customer_care_whatsapp": "+234 913 027 8580",
        "business_hours_text": "Monday-Friday: 8:30 AM - 5:00 PM, Saturday: 9:00 AM - 5:00 PM, Sunday: Closed",
    }


# ==================== Staff gate ====================

async def test_login_wrong_password(client):
    response = await client.post("/api/auth/login", json={"password": "nope"})
    assert response.status_code == 401


@pytest.mark.parametrize("headers", [
    {},
    {"Authorization": "Bearer not-a-token"},
    {"Authorization": f"Bearer {create_access_token(subject='someone-else')}"},
])
async def test_staff_routes_require_token(client, headers):
    response = await client.get("/api/admin/bookings", headers=headers)
    assert response.status_code == 401


# ==================== Staff console ====================

async def test_staff_status_transition_flow(client, seeded, staff_headers):
    created = (await client.post("/api/bookings", json=booking_body(seeded))).json()
    booking_id = created["id"]

    response = await client.post(
        f"/api/admin/bookings/{booking_id}/status",
        json={"status": "confirmed", "note": "Rider assigned: John Doe"},
        headers=staff_headers,
    )
    assert response.status_code == 200
    detail = response.json()
    assert detail["status"] == "confirmed"
    assert [(entry["status"], entry["created_by"]) for entry in detail["history"]] == [
        ("pending", "system"),
        ("confirmed", "admin"),
    ]
    assert detail["history"][1]["note"] == "Rider assigned: John Doe"

    again = await client.post(
        f"/api/admin/bookings/{booking_id}/status", json={"status": "confirmed"}, headers=staff_headers,
    )
    assert again.status_code == 422

    back = await client.post(
        f"/api/admin/bookings/{booking_id}/status", json={"status": "pending"}, headers=staff_headers,
    )
    assert back.status_code == 422

    missing = await client.post(
        "/api/admin/bookings/missing/status", json={"status": "delivered"}, headers=staff_headers,
    )
    assert missing.status_code == 404


async def test_staff_booking_desk(client, seeded, staff_headers):
    created = (await client.post("/api/bookings", json=booking_body(seeded))).json()
    booking_id = created["id"]

    rider = await client.put(
        f"/api/admin/bookings/{booking_id}/rider",
        json={"rider_name": "John Doe", "rider_phone": "0805 555 6666"},
        headers=staff_headers,
    )
    assert rider.json()["rider_phone"] == "08055556666"

    notes = await client.put(
        f"/api/admin/bookings/{booking_id}/notes", json={"admin_notes": "Fragile glassware"}, headers=staff_headers,
    )
    assert notes.json()["admin_notes"] == "Fragile glassware"
    assert len(notes.json()["history"]) == 1

    listing = (await client.get("/api/admin/bookings?search=0803123", headers=staff_headers)).json()
    assert listing["total"] == 1

    stats = (await client.get("/api/admin/bookings/stats", headers=staff_headers)).json()
    assert stats["total"] == 1
    assert stats["pending"] == 1

    sent = await client.post(
        f"/api/admin/bookings/{booking_id}/send-message", json={"channel": "whatsapp"}, headers=staff_headers,
    )
    assert sent.status_code == 201
    assert sent.json()["status"] == "pending"

    sms = await client.post(
        f"/api/admin/bookings/{booking_id}/send-message", json={"channel": "sms"}, headers=staff_headers,
    )
    assert sms.status_code == 422

    log = (await client.get(f"/api/admin/message-logs?booking_id={booking_id}", headers=staff_headers)).json()
    assert log["total"] == 2


async def test_rate_change_leaves_booking_price(client, seeded, staff_headers):
    created = (await client.post("/api/bookings", json=booking_body(seeded))).json()

    rate_id = seeded.rates[("Zone A", "Zone B")]
    response = await client.patch(
        f"/api/admin/pricing/zone-rates/{rate_id}", json={"base_price": "1500.00"}, headers=staff_headers,
    )
    assert response.status_code == 200

    fresh = (await client.post("/api/quotes", json={
        "pickup_area_id": seeded.areas["Rumuola"],
        "dropoff_area_id": seeded.areas["Eliozu"],
        "addon_codes": ["FRAGILE"],
    })).json()
    assert Decimal(fresh["total_price"]) == Decimal("1800.00")

    detail = (await client.get(f"/api/admin/bookings/{created['id']}", headers=staff_headers)).json()
    assert Decimal(detail["price_base"]) == Decimal("1200.00")
    assert Decimal(detail["price_total"]) == Decimal("1500.00")


async def test_duplicate_zone_rate_conflicts(client, seeded, staff_headers):
    response = await client.post("/api/admin/pricing/zone-rates", json={
        "from_zone_id": seeded.zones["Zone A"],
        "to_zone_id": seeded.zones["Zone B"],
        "base_price": "999.00",
    }, headers=staff_headers)
    assert response.status_code == 409


async def test_addon_admin(client, seeded, staff_headers):
    created = await client.post("/api/admin/pricing/addons", json={
        "name": "Weekend Delivery", "code": "weekend", "fee": "250.00",
    }, headers=staff_headers)
    assert created.status_code == 201
    addon = created.json()
    assert addon["code"] == "WEEKEND"

    await client.patch(f"/api/admin/pricing/addons/{addon['id']}", json={"active": False}, headers=staff_headers)
    public = (await client.get("/api/pricing/addons")).json()
    assert "WEEKEND" not in {item["code"] for item in public}

    deleted = await client.delete(f"/api/admin/pricing/addons/{addon['id']}", headers=staff_headers)
    assert deleted.status_code == 204


async def test_area_admin_can_clear_zone(client, seeded, staff_headers):
    area_id = seeded.areas["Choba"]
    response = await client.patch(
        f"/api/admin/locations/areas/{area_id}", json={"zone_id": None}, headers=staff_headers,
    )
    assert response.status_code == 200
    assert response.json()["zone_id"] is None

    quote = (await client.post("/api/quotes", json={
        "pickup_area_id": area_id, "dropoff_area_id": seeded.areas["Eliozu"],
    })).json()
    assert quote["error"] == "InvalidPickupArea"


async def test_area_zone_must_belong_to_city(client, seeded, staff_headers):
    state = (await client.post(
        "/api/admin/locations/states", json={"name": "Lagos", "code": "NG-LA"}, headers=staff_headers,
    )).json()
    city = (await client.post(
        "/api/admin/locations/cities", json={"state_id": state["id"], "name": "Ikeja"}, headers=staff_headers,
    )).json()

    response = await client.post("/api/admin/locations/areas", json={
        "city_id": city["id"], "zone_id": seeded.zones["Zone A"], "name": "Allen",
    }, headers=staff_headers)
    assert response.status_code == 422


async def test_settings_admin(client, seeded, staff_headers):
    current = (await client.get("/api/admin/settings", headers=staff_headers)).json()
    assert "sms_api_key" not in current["values"]
    assert current["sms_api_key_set"] is False

    response = await client.put(
        "/api/admin/settings", json={"key": "sms_api_key", "value": "abc123"}, headers=staff_headers,
    )
    assert response.status_code == 200
    assert response.json()["sms_api_key_set"] is True
    assert "abc123" not in response.text

    bad = await client.put(
        "/api/admin/settings", json={"key": "sms_enabled", "value": "yes"}, headers=staff_headers,
    )
    assert bad.status_code == 422

    unknown = await client.put(
        "/api/admin/settings", json={"key": "theme", "value": "dark"}, headers=staff_headers,
    )
    assert unknown.status_code == 422


async def test_templates_admin(client, seeded, staff_headers):
    templates = (await client.get("/api/admin/templates", headers=staff_headers)).json()
    sms = next(template for template in templates if template["code"] == "sms_tracking")

    response = await client.patch(
        f"/api/admin/templates/{sms['id']}", json={"body": "Parcel {tracking_id}"}, headers=staff_headers,
    )
    assert response.status_code == 200
    assert response.json()["placeholders"] == ["tracking_id"]
