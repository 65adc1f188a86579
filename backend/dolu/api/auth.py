"""
Staff authentication

One shared staff password is exchanged for a signed, expiring JWT. Every
staff route depends on `require_staff`, which verifies the bearer token.
"""
from datetime import datetime, timedelta
import hmac

from fastapi import HTTPException, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
import structlog

from dolu.config import settings

logger = structlog.get_logger()

STAFF_SUBJECT = "staff"

security = HTTPBearer(auto_error=False)


def check_password(candidate: str) -> bool:
    return hmac.compare_digest(candidate.encode("utf-8"), settings.admin_password.encode("utf-8"))


def create_access_token(subject: str = STAFF_SUBJECT) -> str:
    expire = datetime.utcnow() + timedelta(minutes=settings.jwt_access_token_expire_minutes)
    to_encode = {"sub": subject, "exp": expire}
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def require_staff(
    credentials: HTTPAuthorizationCredentials = Security(security),
) -> dict:
    if credentials is None:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        raise HTTPException(
            status_code=401,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if payload.get("sub") != STAFF_SUBJECT:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return payload
