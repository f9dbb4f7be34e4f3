import base64
import hashlib
import bcrypt as _bcrypt
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from app.config import settings


def _prehash(password: str) -> bytes:
    """SHA-256 prehash to base64 so long passphrases stay under bcrypt's 72-byte limit."""
    digest = hashlib.sha256(password.encode("utf-8")).digest()
    return base64.b64encode(digest)


def hash_password(password: str) -> str:
    salt = _bcrypt.gensalt(rounds=settings.bcrypt_cost_factor)
    return _bcrypt.hashpw(_prehash(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return _bcrypt.checkpw(_prehash(plain_password), hashed_password.encode("utf-8"))


def _encode(data: dict, token_type: str, lifetime: timedelta) -> str:
    to_encode = data.copy()
    to_encode.update({"exp": datetime.now(timezone.utc) + lifetime, "type": token_type})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a short-lived access token"""
    lifetime = expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes)
    return _encode(data, "access", lifetime)


def create_refresh_token(data: dict) -> str:
    """Create a refresh token with long expiration"""
    return _encode(data, "refresh", timedelta(days=settings.jwt_refresh_token_expire_days))


def verify_token(token: str, expected_type: str = "access") -> Optional[dict]:
    """Decode a token; None when invalid, expired, or of the wrong type"""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    if payload.get("type") != expected_type:
        return None
    return payload
