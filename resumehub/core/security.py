"""
Security Module

Password hashing (passlib, bcrypt) and JWT access tokens (python-jose).

Tokens carry the user id as "sub" and the tenant the user logged into as
"tenant_id". A token is only accepted on requests routed to that same tenant.
"""
from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from passlib.context import CryptContext
from resumehub.config import get_settings

settings = get_settings()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password. Slow on purpose; keep it out of hot paths."""
    return pwd_context.hash(password)


def create_access_token(
    user_id: str,
    tenant_id: str,
    extra_claims: Optional[Dict[str, Any]] = None,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a JWT access token for a user of a tenant.

    Payload: sub, tenant_id, exp, iat, plus any extra claims.
    """
    now = datetime.utcnow()
    to_encode: Dict[str, Any] = dict(extra_claims or {})
    to_encode.update({
        "sub": user_id,
        "tenant_id": tenant_id,
        "exp": now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)),
        "iat": now,
    })

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode and verify a JWT token.

    Returns the payload, or None if the token is invalid, expired or
    tampered with. The tenant check happens in the request dependency.
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
