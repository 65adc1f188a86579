"""
Public Settings Route (customer care contact details)
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dolu.api.errors import http_error
from dolu.db.database import get_db
from dolu.schemas import PublicSettingsResponse
from dolu.services.app_settings import load_app_config
from dolu.services.errors import DoluError

router = APIRouter()


@router.get("/public", response_model=PublicSettingsResponse)
async def public_settings(db: AsyncSession = Depends(get_db)):
    try:
        config = await load_app_config(db)
    except DoluError as exc:
        raise http_error(exc)
    return config.public_view()
