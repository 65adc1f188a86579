"""
Staff Business Settings Routes
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dolu.api.errors import http_error
from dolu.db.database import get_db
from dolu.schemas import SettingsResponse, SettingUpdate
from dolu.services.app_settings import load_app_config, parse_setting, update_setting
from dolu.services.errors import DoluError

router = APIRouter()


async def _settings_response(db: AsyncSession) -> SettingsResponse:
    config = await load_app_config(db)
    return SettingsResponse(
        values=config.model_dump(mode="json", exclude={"sms_api_key"}),
        sms_api_key_set=bool(config.sms_api_key.get_secret_value()),
    )


@router.get("", response_model=SettingsResponse)
async def get_settings(db: AsyncSession = Depends(get_db)):
    try:
        return await _settings_response(db)
    except DoluError as exc:
        raise http_error(exc)


@router.put("", response_model=SettingsResponse)
async def put_setting(data: SettingUpdate, db: AsyncSession = Depends(get_db)):
    """Update one setting. Unknown keys and mistyped values are rejected with 422."""
    try:
        entry = parse_setting(data.key, data.value)
        await update_setting(db, entry)
        return await _settings_response(db)
    except DoluError as exc:
        raise http_error(exc)
