"""Bearer tokens shared with the auth service

The auth service signs short-lived access tokens with the shared
``SECRET_KEY``; this service only needs to read the user id back out.
"""

from datetime import timedelta
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt

from billboard.config import settings
from billboard.utils.time import get_utc_now

ACCESS_TOKEN_TYPE = "access"


def issue_access_token(user_id: UUID, expires_delta: Optional[timedelta] = None) -> str:
    """Sign an access token for ``user_id`` with the auth service's claims."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    claims = {
        "sub": str(user_id),
        "type": ACCESS_TOKEN_TYPE,
        "exp": get_utc_now() + expires_delta,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def user_id_from_token(token: str) -> Optional[UUID]:
    """
    Return the user id an access token was issued for.

    None when the signature or expiry is bad, the token is not an access
    token, or ``sub`` is not a UUID.
    """
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

    if claims.get("type") != ACCESS_TOKEN_TYPE:
        return None
    try:
        return UUID(str(claims.get("sub")))
    except ValueError:
        return None
