"""Account endpoints used by session restore, registration and the admin console."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.exceptions import BadRequestException, ForbiddenException
from app.dependencies import (
    AdminAccount,
    CacheManagerDep,
    DatabaseSession,
    get_current_account,
    get_current_account_id,
)
from app.schemas.accounts import (
    AccountCreate,
    AccountListResponse,
    AccountProfile,
    AccountUpdate,
)
from app.services.account_resolver import AccountResolver, LoginMode
from app.services.account_service import AccountService, strip_credentials

router = APIRouter(prefix="/users", tags=["Users"])

optional_security = HTTPBearer(auto_error=False)


@router.get("", response_model=AccountListResponse)
async def list_accounts(
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
    admin_account: AdminAccount,
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    is_admin: bool | None = Query(None, description="Filter by admin flag"),
    search: str | None = Query(None, description="Search by name, email or medical ID"),
) -> AccountListResponse:
    """List accounts (admin only)."""
    account_service = AccountService(cache_manager)
    rows, total = await account_service.list_accounts(
        db, page=page, page_size=page_size, is_admin=is_admin, search=search
    )
    return AccountListResponse(
        accounts=[AccountProfile.model_validate(row) for row in rows],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/lookup", response_model=AccountProfile)
async def lookup_account(
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
    identifier: str = Query(..., min_length=1, description="Email or medical ID"),
):
    """Find an account by email or medical ID."""
    resolver = AccountResolver(AccountService(cache_manager))
    account = await resolver.resolve(db, identifier, LoginMode.USER)
    return AccountProfile.model_validate(strip_credentials(account))


@router.get("/{user_id}", response_model=AccountProfile)
async def get_account_profile(
    user_id: UUID,
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
):
    """Get the sanitized profile behind a stored session marker."""
    profile = await AccountService(cache_manager).get_profile(db, user_id)

    if not profile:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Account not found",
        )

    return AccountProfile.model_validate(profile)


@router.post("", response_model=AccountProfile, status_code=status.HTTP_201_CREATED)
async def register_account(
    account_data: AccountCreate,
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(optional_security)
    ] = None,
):
    """
    Register an attendee, or an administrator when called by an administrator.

    Attendee registration is open. Creating an administrator requires an
    admin bearer token.
    """
    if account_data.is_admin:
        if credentials is None:
            raise ForbiddenException("Admin access required")
        account_id = await get_current_account_id(credentials)
        current = await get_current_account(account_id, db)
        if not current.get("is_admin"):
            raise ForbiddenException("Admin access required")

    account = await AccountService(cache_manager).create_account(db, account_data)
    return AccountProfile.model_validate(account)


@router.put("/{user_id}", response_model=AccountProfile)
async def update_account(
    user_id: UUID,
    account_data: AccountUpdate,
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
    admin_account: AdminAccount,
):
    """Update an account (admin only)."""
    account = await AccountService(cache_manager).update_account(db, user_id, account_data)

    if not account:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Account not found",
        )

    return AccountProfile.model_validate(account)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(
    user_id: UUID,
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
    admin_account: AdminAccount,
) -> None:
    """Delete an account (admin only). Admins cannot delete themselves."""
    if user_id == admin_account["id"]:
        raise BadRequestException("Administrators cannot delete their own account")

    deleted = await AccountService(cache_manager).delete_account(db, user_id)

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Account not found",
        )
