"""
Public Location Routes (cascading State -> City -> Area selection)
"""
from fastapi import APIRouter, Depends
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession

from dolu.db.database import get_db
from dolu.schemas import StateResponse, CityResponse, AreaResponse, ZoneResponse, AreaZoneResponse
from dolu.services import locations

router = APIRouter()


@router.get("/states", response_model=List[StateResponse])
async def list_states(db: AsyncSession = Depends(get_db)):
    return await locations.list_active_states(db)


@router.get("/states/{state_id}/cities", response_model=List[CityResponse])
async def list_cities(state_id: str, db: AsyncSession = Depends(get_db)):
    return await locations.list_active_cities(db, state_id)


@router.get("/cities/{city_id}/areas", response_model=List[AreaResponse])
async def list_areas(city_id: str, db: AsyncSession = Depends(get_db)):
    return await locations.list_active_areas(db, city_id)


@router.get("/cities/{city_id}/zones", response_model=List[ZoneResponse])
async def list_zones(city_id: str, db: AsyncSession = Depends(get_db)):
    return await locations.list_active_zones(db, city_id)


@router.get("/areas/{area_id}/zone", response_model=AreaZoneResponse)
async def area_zone(area_id: str, db: AsyncSession = Depends(get_db)):
    """Pricing zone of an area; `zone` is null when the area cannot be priced."""
    zone = await locations.zone_for_area(db, area_id)
    return AreaZoneResponse(
        area_id=area_id,
        zone=ZoneResponse.model_validate(zone) if zone else None,
    )
