"""
Staff Reference Data Routes: locations, zone rates, add-ons and item categories
"""
from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from dolu.api.errors import http_error
from dolu.db.database import get_db
from dolu.models.location import State, City, Zone, Area
from dolu.models.pricing import ZoneRate, Addon, ItemCategory
from dolu.schemas import (
    StateCreate, StateUpdate, StateResponse,
    CityCreate, CityUpdate, CityResponse,
    ZoneCreate, ZoneUpdate, ZoneResponse,
    AreaCreate, AreaUpdate, AreaResponse,
    ZoneRateCreate, ZoneRateUpdate, ZoneRateResponse,
    AddonCreate, AddonUpdate, AddonResponse,
    ItemCategoryCreate, ItemCategoryUpdate, ItemCategoryResponse,
)
from dolu.services import reference_data
from dolu.services.errors import DoluError

locations_router = APIRouter()
pricing_router = APIRouter()
item_categories_router = APIRouter()


async def _create(db, model, data):
    try:
        return await reference_data.create_row(db, model, data.model_dump())
    except DoluError as exc:
        raise http_error(exc)


async def _update(db, model, row_id, data):
    try:
        return await reference_data.update_row(db, model, row_id, data.model_dump(exclude_unset=True))
    except DoluError as exc:
        raise http_error(exc)


# ==================== Locations ====================

@locations_router.get("/states", response_model=List[StateResponse])
async def list_states(db: AsyncSession = Depends(get_db)):
    return await reference_data.list_rows(db, State, State.name)


@locations_router.post("/states", response_model=StateResponse, status_code=201)
async def create_state(data: StateCreate, db: AsyncSession = Depends(get_db)):
    return await _create(db, State, data)


@locations_router.patch("/states/{state_id}", response_model=StateResponse)
async def update_state(state_id: str, data: StateUpdate, db: AsyncSession = Depends(get_db)):
    return await _update(db, State, state_id, data)


@locations_router.get("/cities", response_model=List[CityResponse])
async def list_cities(state_id: Optional[str] = Query(None), db: AsyncSession = Depends(get_db)):
    return await reference_data.list_rows(db, City, City.name, state_id=state_id)


@locations_router.post("/cities", response_model=CityResponse, status_code=201)
async def create_city(data: CityCreate, db: AsyncSession = Depends(get_db)):
    return await _create(db, City, data)


@locations_router.patch("/cities/{city_id}", response_model=CityResponse)
async def update_city(city_id: str, data: CityUpdate, db: AsyncSession = Depends(get_db)):
    return await _update(db, City, city_id, data)


@locations_router.get("/zones", response_model=List[ZoneResponse])
async def list_zones(city_id: Optional[str] = Query(None), db: AsyncSession = Depends(get_db)):
    return await reference_data.list_rows(db, Zone, Zone.name, city_id=city_id)


@locations_router.post("/zones", response_model=ZoneResponse, status_code=201)
async def create_zone(data: ZoneCreate, db: AsyncSession = Depends(get_db)):
    return await _create(db, Zone, data)


@locations_router.patch("/zones/{zone_id}", response_model=ZoneResponse)
async def update_zone(zone_id: str, data: ZoneUpdate, db: AsyncSession = Depends(get_db)):
    return await _update(db, Zone, zone_id, data)


@locations_router.get("/areas", response_model=List[AreaResponse])
async def list_areas(
    city_id: Optional[str] = Query(None),
    zone_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await reference_data.list_rows(db, Area, Area.name, city_id=city_id, zone_id=zone_id)


@locations_router.post("/areas", response_model=AreaResponse, status_code=201)
async def create_area(data: AreaCreate, db: AsyncSession = Depends(get_db)):
    return await _create(db, Area, data)


@locations_router.patch("/areas/{area_id}", response_model=AreaResponse)
async def update_area(area_id: str, data: AreaUpdate, db: AsyncSession = Depends(get_db)):
    return await _update(db, Area, area_id, data)


# ==================== Zone Rates & Add-ons ====================

@pricing_router.get("/zone-rates", response_model=List[ZoneRateResponse])
async def list_zone_rates(db: AsyncSession = Depends(get_db)):
    return await reference_data.list_rows(db, ZoneRate, ZoneRate.from_zone_id, ZoneRate.to_zone_id)


@pricing_router.post("/zone-rates", response_model=ZoneRateResponse, status_code=201)
async def create_zone_rate(data: ZoneRateCreate, db: AsyncSession = Depends(get_db)):
    return await _create(db, ZoneRate, data)


@pricing_router.patch("/zone-rates/{rate_id}", response_model=ZoneRateResponse)
async def update_zone_rate(rate_id: str, data: ZoneRateUpdate, db: AsyncSession = Depends(get_db)):
    """Changes apply to future quotes only; stored booking prices are snapshots."""
    return await _update(db, ZoneRate, rate_id, data)


@pricing_router.get("/addons", response_model=List[AddonResponse])
async def list_addons(db: AsyncSession = Depends(get_db)):
    return await reference_data.list_rows(db, Addon, Addon.name)


@pricing_router.post("/addons", response_model=AddonResponse, status_code=201)
async def create_addon(data: AddonCreate, db: AsyncSession = Depends(get_db)):
    return await _create(db, Addon, data)


@pricing_router.patch("/addons/{addon_id}", response_model=AddonResponse)
async def update_addon(addon_id: str, data: AddonUpdate, db: AsyncSession = Depends(get_db)):
    return await _update(db, Addon, addon_id, data)


@pricing_router.delete("/addons/{addon_id}", status_code=204)
async def delete_addon(addon_id: str, db: AsyncSession = Depends(get_db)):
    try:
        await reference_data.delete_row(db, Addon, addon_id)
    except DoluError as exc:
        raise http_error(exc)


# ==================== Item Categories ====================

@item_categories_router.get("", response_model=List[ItemCategoryResponse])
async def list_item_categories(db: AsyncSession = Depends(get_db)):
    return await reference_data.list_rows(db, ItemCategory, ItemCategory.name)


@item_categories_router.post("", response_model=ItemCategoryResponse, status_code=201)
async def create_item_category(data: ItemCategoryCreate, db: AsyncSession = Depends(get_db)):
    return await _create(db, ItemCategory, data)


@item_categories_router.patch("/{category_id}", response_model=ItemCategoryResponse)
async def update_item_category(category_id: str, data: ItemCategoryUpdate, db: AsyncSession = Depends(get_db)):
    return await _update(db, ItemCategory, category_id, data)
