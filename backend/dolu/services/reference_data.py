"""
Staff maintenance of reference data: locations, zone rates, add-ons and item categories.

Reference rows are read by pricing and booking creation but never copied
into a booking except as the price snapshot, so editing or deactivating them
does not change existing bookings.
"""
from typing import Any, Dict, List, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from dolu.db.database import Base
from dolu.models.location import State, City, Zone, Area
from dolu.models.pricing import ZoneRate, Addon, ItemCategory
from dolu.services.errors import ConflictError, NotFoundError, ValidationFailedError

logger = structlog.get_logger()

ModelT = TypeVar("ModelT", bound=Base)

LABELS = {
    State: "State",
    City: "City",
    Zone: "Zone",
    Area: "Area",
    ZoneRate: "Zone rate",
    Addon: "Add-on",
    ItemCategory: "Item category",
}


async def get_row(db: AsyncSession, model: Type[ModelT], row_id: str) -> ModelT:
    row = await db.get(model, row_id)
    if row is None:
        raise NotFoundError(f"{LABELS[model]} {row_id} not found")
    return row


async def _commit(db: AsyncSession, model, action: str) -> None:
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        logger.warning("Reference data write rejected", model=model.__tablename__, action=action)
        raise ConflictError(f"{LABELS[model]} conflicts with an existing record") from exc


async def create_row(db: AsyncSession, model: Type[ModelT], values: Dict[str, Any]) -> ModelT:
    await _check_references(db, model, values)
    row = model(**values)
    db.add(row)
    await _commit(db, model, "create")
    logger.info("Reference data created", model=model.__tablename__, id=row.id)
    return row


async def update_row(db: AsyncSession, model: Type[ModelT], row_id: str, changes: Dict[str, Any]) -> ModelT:
    row = await get_row(db, model, row_id)
    await _check_references(db, model, changes, current=row)
    for field, value in changes.items():
        setattr(row, field, value)
    await _commit(db, model, "update")
    logger.info("Reference data updated", model=model.__tablename__, id=row.id, fields=sorted(changes))
    return row


async def delete_row(db: AsyncSession, model: Type[ModelT], row_id: str) -> None:
    row = await get_row(db, model, row_id)
    await db.delete(row)
    await _commit(db, model, "delete")
    logger.info("Reference data deleted", model=model.__tablename__, id=row_id)


async def list_rows(db: AsyncSession, model: Type[ModelT], *order_by, **filters) -> List[ModelT]:
    """All rows including inactive ones; `filters` are equality matches, None skipped."""
    query = select(model)
    for field, value in filters.items():
        if value is not None:
            query = query.where(getattr(model, field) == value)
    result = await db.execute(query.order_by(*order_by))
    return list(result.scalars().all())


async def _check_references(db: AsyncSession, model, values: Dict[str, Any], current=None) -> None:
    """Foreign keys are not enforced by SQLite by default; check the ones staff can set."""
    if values.get("state_id"):
        await get_row(db, State, values["state_id"])
    if values.get("city_id"):
        await get_row(db, City, values["city_id"])
    for key in ("zone_id", "from_zone_id", "to_zone_id"):
        if values.get(key):
            await get_row(db, Zone, values[key])

    if model is Area and values.get("zone_id"):
        city_id: Optional[str] = values.get("city_id") or (current.city_id if current else None)
        await _check_area_zone(db, values["zone_id"], city_id)


async def _check_area_zone(db: AsyncSession, zone_id: str, city_id: Optional[str]) -> None:
    zone = await db.get(Zone, zone_id)
    if city_id and zone.city_id != city_id:
        raise ValidationFailedError("An area can only be assigned to a zone of its own city")
