import hmac
from datetime import datetime, timedelta, timezone

from jose import jwt

from sproutify.core.config import settings


def create_access_token(profile_id: int, expires_minutes: int = None):
    minutes = expires_minutes or settings.JWT_EXPIRE_MINUTES
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    payload = {"sub": str(profile_id), "exp": expire}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])


def verify_service_token(token: str) -> bool:
    return hmac.compare_digest((token or "").encode(), settings.AI_CHAT_TOKEN.encode())
