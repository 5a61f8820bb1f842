"""
Token management and validation logic.
All JWT and authentication dependency operations are centralized here.
"""

from datetime import datetime, timedelta
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from testbook.core.config import settings
from testbook.core.errors import AuthenticationError

EMAIL_VERIFICATION = "email_verification"

# HTTP Bearer scheme. auto_error is off so missing credentials surface as our own 401
security_scheme = HTTPBearer(auto_error=False)


def _encode(claims: dict, expires_delta: timedelta) -> str:
    now = datetime.utcnow()
    to_encode = claims.copy()
    to_encode.update({"exp": now + expires_delta, "iat": now, "iss": settings.app_name})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token"""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    return _encode({**data, "type": "access"}, expires_delta)


def create_email_verification_token(user_id: str, email: str) -> str:
    """Create the signed token mailed to users to confirm their address"""
    return _encode(
        {"user_id": user_id, "email": email, "type": EMAIL_VERIFICATION},
        timedelta(hours=settings.email_verification_expire_hours),
    )


def decode_token(token: str) -> Optional[dict]:
    """Decode and validate JWT token string"""
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.app_name,
        )
    except JWTError:
        return None


def verify_token(token: str) -> Optional[str]:
    """Verify an access token and extract user ID (sub claim)"""
    payload = decode_token(token)
    if payload is None or payload.get("type") != "access":
        return None
    return payload.get("sub")


async def get_optional_user_id(
    auth: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security_scheme)],
) -> Optional[str]:
    """
    Resolve the caller's user ID when a valid bearer token is present.
    Anonymous callers and bad tokens both resolve to None.
    """
    if auth is None:
        return None
    return verify_token(auth.credentials)


async def get_current_user_id(
    auth: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security_scheme)],
) -> str:
    """
    FastAPI dependency to validate token and return current user ID.
    Used in protected routes.
    """
    if auth is None:
        raise AuthenticationError("Authentication required")
    user_id = verify_token(auth.credentials)
    if not user_id:
        raise AuthenticationError("Could not validate credentials")
    return user_id


CurrentUserIdDep = Annotated[str, Depends(get_current_user_id)]
OptionalUserIdDep = Annotated[Optional[str], Depends(get_optional_user_id)]
