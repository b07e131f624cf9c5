"""Authentication service: one login attempt in, one decision out."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    LOGIN_EXCEPTIONS,
    AuthRejection,
    InvalidCredentialsException,
    LoginValidationException,
    RoleMismatchException,
    StorageUnavailableException,
)
from app.core.identifiers import IdentifierKind, classify_identifier
from app.core.redis_client import CacheManager
from app.core.security import create_access_token, verify_password
from app.services.account_resolver import AccountResolver, LoginMode
from app.services.account_service import AccountService, strip_credentials

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class LoginResult:
    """Outcome of a login attempt: either a profile or a rejection reason."""

    success: bool
    profile: dict[str, Any] | None = None
    rejection: AuthRejection | None = None
    message_key: str | None = None
    status_code: int = 200

    @classmethod
    def succeeded(cls, profile: dict[str, Any]) -> "LoginResult":
        return cls(success=True, profile=profile)

    @classmethod
    def rejected(cls, exc: Exception, mode: LoginMode) -> "LoginResult":
        reason = exc.reason  # type: ignore[attr-defined]
        message_key = exc.message_key  # type: ignore[attr-defined]
        status_code = exc.status_code  # type: ignore[attr-defined]

        # Unknown admin email and wrong admin password look identical to the caller.
        if mode is LoginMode.ADMIN and reason is AuthRejection.ACCOUNT_NOT_FOUND:
            message_key = InvalidCredentialsException().message_key
            status_code = InvalidCredentialsException().status_code

        return cls(
            success=False,
            rejection=reason,
            message_key=message_key,
            status_code=status_code,
        )


class AuthService:
    """Authenticator for the admin and user login forms."""

    def __init__(
        self,
        cache_manager: CacheManager | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize auth service with cache manager and an optional clock."""
        self.accounts = AccountService(cache_manager)
        self.resolver = AccountResolver(self.accounts)
        self.clock = clock or (lambda: datetime.now(UTC))

    async def authenticate(
        self,
        db: AsyncSession,
        identifier: str | None,
        password: str | None = None,
        is_admin: bool = False,
    ) -> LoginResult:
        """
        Run a single login attempt.

        Every failure in the login taxonomy is turned into a rejected result;
        nothing from that taxonomy escapes this method.

        Args:
            db: Database session
            identifier: Email or medical ID as typed
            password: Plaintext password (admin form only)
            is_admin: Whether the attempt came through the admin form

        Returns:
            Login result with a sanitized profile on success
        """
        mode = LoginMode.ADMIN if is_admin else LoginMode.USER
        identifier = (identifier or "").strip()
        log = logger.bind(
            login_mode=mode.value,
            identifier_kind=classify_identifier(identifier).value if identifier else None,
        )

        try:
            profile = await self._authenticate(db, identifier, password, mode)
        except LOGIN_EXCEPTIONS as exc:
            result = LoginResult.rejected(exc, mode)
            log.info(
                "login_rejected",
                reason=result.rejection.value if result.rejection else None,
                status_code=result.status_code,
            )
            return result

        log.info("login_succeeded", account_id=str(profile["id"]))
        return LoginResult.succeeded(profile)

    async def _authenticate(
        self,
        db: AsyncSession,
        identifier: str,
        password: str | None,
        mode: LoginMode,
    ) -> dict[str, Any]:
        if not identifier:
            raise LoginValidationException("identifier_required")
        if mode is LoginMode.ADMIN and classify_identifier(identifier) is IdentifierKind.MEDICAL_ID:
            raise LoginValidationException("admin_email_required")

        try:
            account = await self.resolver.resolve(db, identifier, mode)
        except (SQLAlchemyError, OSError) as e:
            logger.error("account_lookup_failed", error=str(e))
            raise StorageUnavailableException() from e

        if mode is LoginMode.ADMIN:
            if not account["is_admin"]:
                raise RoleMismatchException(AuthRejection.NOT_AN_ADMIN, "not_an_admin")
            if not password:
                raise LoginValidationException("password_required", AuthRejection.MISSING_PASSWORD)
            verified = await asyncio.to_thread(
                verify_password, password, account.get("password_hash")
            )
            if not verified:
                raise InvalidCredentialsException()
        elif account["is_admin"]:
            raise RoleMismatchException(AuthRejection.ADMIN_VIA_USER_FORM, "admin_via_user_form")

        logged_in_at = self.clock()
        try:
            await self.accounts.update_last_login(db, account["id"], logged_in_at)
        except (SQLAlchemyError, OSError) as e:
            logger.error("last_login_update_failed", account_id=str(account["id"]), error=str(e))
            raise StorageUnavailableException() from e

        profile = strip_credentials(account)
        profile["last_login_at"] = logged_in_at
        return profile

    def issue_access_token(self, profile: dict[str, Any]) -> str:
        """Create the bearer token that authorizes admin-console calls."""
        return create_access_token(
            data={"sub": str(profile["id"]), "is_admin": bool(profile.get("is_admin"))}
        )
