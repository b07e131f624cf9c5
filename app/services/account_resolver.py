"""Resolve a login identifier to exactly one account."""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AccountNotFoundException
from app.core.identifiers import (
    IdentifierKind,
    classify_identifier,
    normalize_email,
    normalize_medical_id,
)

if TYPE_CHECKING:
    from app.services.account_service import AccountService


class LoginMode(str, Enum):
    """Which login form the attempt came through."""

    ADMIN = "admin"
    USER = "user"


@dataclass(frozen=True)
class ByEmail:
    """Lookup strictly by normalized email (admin form)."""

    email: str


@dataclass(frozen=True)
class ByEmailOrMedicalId:
    """
    Lookup by normalized email OR trimmed medical ID in a single query.

    `prefer` decides which field wins when the same string matches one
    account by email and another by medical ID.
    """

    email: str
    medical_id: str
    prefer: IdentifierKind


LoginQuery = ByEmail | ByEmailOrMedicalId


def build_login_query(identifier: str, mode: LoginMode) -> LoginQuery:
    """
    Build the storage query for an identifier under a login mode.

    Args:
        identifier: Raw identifier as typed
        mode: Admin or user login

    Returns:
        The typed login query
    """
    if mode is LoginMode.ADMIN:
        return ByEmail(email=normalize_email(identifier))
    return ByEmailOrMedicalId(
        email=normalize_email(identifier),
        medical_id=normalize_medical_id(identifier),
        prefer=classify_identifier(identifier),
    )


class AccountResolver:
    """Looks up the single account behind a login identifier."""

    def __init__(self, account_service: "AccountService"):
        self.accounts = account_service

    async def resolve(self, db: AsyncSession, identifier: str, mode: LoginMode) -> dict:
        """
        Resolve an identifier to one account.

        Uniqueness of email and medical ID is enforced by the storage layer;
        this only ever returns the first match.

        Raises:
            AccountNotFoundException: If nothing matches
        """
        account = await self.accounts.find_one(db, build_login_query(identifier, mode))
        if account is None:
            raise AccountNotFoundException(
                "admin_not_found" if mode is LoginMode.ADMIN else "user_not_found"
            )
        return account
