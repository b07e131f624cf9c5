"""FastAPI dependencies."""

from typing import Annotated
from uuid import UUID

import redis
from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.messages import resolve_locale
from app.core.redis_client import CacheManager, get_redis_client
from app.core.security import decode_access_token
from app.database import get_db
from app.services.account_service import AccountService

# Security
security = HTTPBearer()


def get_cache_manager(
    redis_client: Annotated[redis.Redis, Depends(get_redis_client)],
) -> CacheManager:
    """Wrap the shared Redis client in a cache manager."""
    return CacheManager(redis_client)


def get_locale(accept_language: Annotated[str | None, Header()] = None) -> str:
    """Pick the language for user-facing messages."""
    return resolve_locale(accept_language, settings.default_locale)


async def get_current_account_id(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
) -> UUID:
    """
    Extract and validate account ID from JWT token.

    Args:
        credentials: Bearer token credentials

    Returns:
        Account ID from token

    Raises:
        HTTPException: If token is invalid or expired
    """
    payload = decode_access_token(credentials.credentials)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    account_id_str = payload.get("sub")
    if account_id_str is None or not isinstance(account_id_str, str):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return UUID(account_id_str)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid account ID format",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_current_account(
    account_id: Annotated[UUID, Depends(get_current_account_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """
    Load the account behind the bearer token.

    The admin flag is read from storage, not from the token claims.

    Raises:
        HTTPException: If the account no longer exists
    """
    account = await AccountService().get_account_by_id(db, account_id)

    if not account:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return account


async def require_admin(
    current_account: Annotated[dict, Depends(get_current_account)],
) -> dict:
    """
    Ensure the current account is an administrator.

    Raises:
        HTTPException: If the account is not an admin
    """
    if not current_account.get("is_admin"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_account


# Type aliases for dependency injection
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
CacheManagerDep = Annotated[CacheManager, Depends(get_cache_manager)]
Locale = Annotated[str, Depends(get_locale)]
CurrentAccount = Annotated[dict, Depends(get_current_account)]
AdminAccount = Annotated[dict, Depends(require_admin)]
