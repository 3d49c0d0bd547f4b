"""API Dependencies"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from billboard.database import get_db
from billboard.core.security import user_id_from_token
from billboard.models.user import User

bearer = HTTPBearer()

__all__ = ["get_db", "get_current_user", "bearer"]


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    credentials: HTTPAuthorizationCredentials = Depends(bearer)
) -> User:
    """
    Resolve the caller from the bearer token.

    Shop membership is not checked here; services do that per shop.
    """
    user_id = user_id_from_token(credentials.credentials)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await db.scalar(
        select(User).where(User.id == user_id, User.live())
    )
    if user is None or not user.is_active:
        # Unknown and deactivated accounts look the same to the caller
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user
