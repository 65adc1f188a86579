"""
Location Hierarchy Resolver

Public lookups over the State -> City -> Area/Zone hierarchy. Only active
rows are ever returned; an inactive state, city, area or zone is invisible
to pricing and to customer-facing selection.
"""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from dolu.models.location import State, City, Zone, Area

logger = structlog.get_logger()


async def list_active_states(db: AsyncSession) -> List[State]:
    result = await db.execute(
        select(State).where(State.active.is_(True)).order_by(State.name)
    )
    return list(result.scalars().all())


async def list_active_cities(db: AsyncSession, state_id: str) -> List[City]:
    """Active cities of a state (empty if the state itself is inactive)."""
    result = await db.execute(
        select(City)
        .join(State, City.state_id == State.id)
        .where(City.state_id == state_id, City.active.is_(True), State.active.is_(True))
        .order_by(City.name)
    )
    return list(result.scalars().all())


async def list_active_areas(db: AsyncSession, city_id: str) -> List[Area]:
    """Active areas of a city (empty if the city itself is inactive)."""
    result = await db.execute(
        select(Area)
        .join(City, Area.city_id == City.id)
        .where(Area.city_id == city_id, Area.active.is_(True), City.active.is_(True))
        .order_by(Area.name)
    )
    return list(result.scalars().all())


async def list_active_zones(db: AsyncSession, city_id: str) -> List[Zone]:
    result = await db.execute(
        select(Zone)
        .where(Zone.city_id == city_id, Zone.active.is_(True))
        .order_by(Zone.name)
    )
    return list(result.scalars().all())


async def zone_for_area(db: AsyncSession, area_id: Optional[str]) -> Optional[Zone]:
    """
    Resolve the pricing zone of an area.

    Returns None when the area does not exist, is inactive, has no zone, or
    its zone is inactive. Never falls back to a default zone.
    """
    if not area_id:
        return None

    result = await db.execute(
        select(Zone)
        .join(Area, Area.zone_id == Zone.id)
        .where(Area.id == area_id, Area.active.is_(True), Zone.active.is_(True))
    )
    zone = result.scalar_one_or_none()
    if zone is None:
        logger.debug("Area has no pricing zone", area_id=area_id)
    return zone


async def zone_of(db: AsyncSession, area_id: Optional[str]) -> Optional[str]:
    """Zone id for an area, or None (the definite "no zone" signal)."""
    zone = await zone_for_area(db, area_id)
    return zone.id if zone else None
