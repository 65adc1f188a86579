"""
Location hierarchy lookups only ever expose active rows.
"""
from sqlalchemy import update

from dolu.models import Area, City, State, Zone
from dolu.services import locations


async def test_active_cascade(db, seeded):
    states = await locations.list_active_states(db)
    assert [state.name for state in states] == ["Rivers"]

    cities = await locations.list_active_cities(db, seeded.state_id)
    assert [city.name for city in cities] == ["Port Harcourt"]

    areas = await locations.list_active_areas(db, seeded.city_id)
    assert len(areas) == 21
    assert [area.name for area in areas] == sorted(area.name for area in areas)

    zones = await locations.list_active_zones(db, seeded.city_id)
    assert [zone.name for zone in zones] == ["Zone A", "Zone B", "Zone C"]


async def test_inactive_area_is_hidden_and_unpriced(db, seeded):
    await db.execute(update(Area).where(Area.name == "Choba").values(active=False))
    await db.commit()

    names = [area.name for area in await locations.list_active_areas(db, seeded.city_id)]
    assert "Choba" not in names
    assert await locations.zone_of(db, seeded.areas["Choba"]) is None


async def test_inactive_parent_hides_children(db, seeded):
    await db.execute(update(State).values(active=False))
    await db.commit()
    assert await locations.list_active_cities(db, seeded.state_id) == []

    await db.execute(update(City).values(active=False))
    await db.commit()
    assert await locations.list_active_areas(db, seeded.city_id) == []


async def test_zone_of_resolves_assigned_zone(db, seeded):
    assert await locations.zone_of(db, seeded.areas["Rumuola"]) == seeded.zones["Zone A"]
    assert await locations.zone_of(db, seeded.areas["Eliozu"]) == seeded.zones["Zone B"]


async def test_zone_of_never_defaults(db, seeded):
    assert await locations.zone_of(db, None) is None
    assert await locations.zone_of(db, "missing") is None

    await db.execute(update(Area).where(Area.name == "Eliozu").values(zone_id=None))
    await db.commit()
    assert await locations.zone_of(db, seeded.areas["Eliozu"]) is None


async def test_inactive_zone_hidden(db, seeded):
    await db.execute(update(Zone).where(Zone.name == "Zone C").values(active=False))
    await db.commit()

    zones = await locations.list_active_zones(db, seeded.city_id)
    assert [zone.name for zone in zones] == ["Zone A", "Zone B"]
    assert await locations.zone_for_area(db, seeded.areas["Ozuoba"]) is None
