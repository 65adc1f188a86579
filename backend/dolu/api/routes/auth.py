"""
Staff Login Route
"""
from fastapi import APIRouter, HTTPException
import structlog

from dolu.api.auth import check_password, create_access_token
from dolu.config import settings
from dolu.schemas import LoginRequest, TokenResponse

router = APIRouter()
logger = structlog.get_logger()


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest):
    if not check_password(request.password):
        logger.warning("Staff login failed")
        raise HTTPException(status_code=401, detail="Incorrect password")

    logger.info("Staff login")
    return TokenResponse(
        access_token=create_access_token(),
        expires_in=settings.jwt_access_token_expire_minutes * 60,
    )
