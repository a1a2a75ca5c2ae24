from datetime import timedelta
from typing import Any, Dict

import jwt

from core.config import settings
from utils.dates import utc_now


def create_access_token(subject: Dict[str, Any], expires_minutes: int | None = None) -> str:
    minutes = settings.JWT_EXPIRES_MINUTES if expires_minutes is None else expires_minutes
    payload = dict(subject)
    payload["exp"] = utc_now() + timedelta(minutes=minutes)
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Levanta jwt.PyJWTError se o token for inválido ou estiver expirado."""
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
