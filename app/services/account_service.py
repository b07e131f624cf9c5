"""Account storage operations."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import case, delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestException, ConflictException
from app.core.identifiers import IdentifierKind
from app.core.redis_client import CacheManager
from app.core.security import get_password_hash
from app.models.accounts import accounts
from app.schemas.accounts import AccountCreate, AccountUpdate
from app.services.account_resolver import ByEmail, ByEmailOrMedicalId, LoginQuery


def strip_credentials(account: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of an account row without its password hash."""
    sanitized = dict(account)
    sanitized.pop("password_hash", None)
    return sanitized


class AccountService:
    """Service for account operations."""

    # Cache TTL in seconds (30 minutes for account profiles)
    PROFILE_CACHE_TTL = 1800

    def __init__(self, cache_manager: CacheManager | None = None):
        """Initialize service with optional cache manager."""
        self.cache = cache_manager

    @staticmethod
    def _get_profile_cache_key(account_id: UUID) -> str:
        """Generate cache key for an account profile."""
        return f"account:{account_id}"

    def _invalidate(self, account_id: UUID) -> None:
        if self.cache:
            self.cache.delete(self._get_profile_cache_key(account_id))

    async def find_one(self, db: AsyncSession, query: LoginQuery) -> dict | None:
        """
        Find at most one account for a login query.

        Args:
            db: Database session
            query: Email lookup, or email-or-medical-ID lookup

        Returns:
            Raw account row (password hash included) or None
        """
        if isinstance(query, ByEmail):
            stmt = select(accounts).where(accounts.c.email == query.email).limit(1)
        elif isinstance(query, ByEmailOrMedicalId):
            if query.prefer is IdentifierKind.MEDICAL_ID:
                rank = case((accounts.c.medical_id == query.medical_id, 0), else_=1)
            else:
                rank = case((accounts.c.email == query.email, 0), else_=1)
            stmt = (
                select(accounts)
                .where(
                    or_(
                        accounts.c.email == query.email,
                        accounts.c.medical_id == query.medical_id,
                    )
                )
                .order_by(rank)
                .limit(1)
            )
        else:
            raise TypeError(f"Unsupported login query: {query!r}")

        result = await db.execute(stmt)
        account = result.mappings().first()
        return dict(account) if account else None

    async def get_account_by_id(self, db: AsyncSession, account_id: UUID) -> dict | None:
        """Get raw account row by ID."""
        query = select(accounts).where(accounts.c.id == account_id)
        result = await db.execute(query)
        account = result.mappings().first()
        return dict(account) if account else None

    async def get_profile(self, db: AsyncSession, account_id: UUID) -> dict | None:
        """Get sanitized account profile by ID with caching."""
        if self.cache:
            cached = self.cache.get_json(self._get_profile_cache_key(account_id))
            if cached:
                return cached

        account = await self.get_account_by_id(db, account_id)
        if not account:
            return None

        profile = strip_credentials(account)

        if self.cache:
            self.cache.set_json(
                self._get_profile_cache_key(account_id), profile, ttl=self.PROFILE_CACHE_TTL
            )

        return profile

    async def _raise_if_taken(
        self,
        db: AsyncSession,
        email: str | None,
        medical_id: str | None,
        exclude_id: UUID | None = None,
    ) -> None:
        conditions = []
        if email:
            conditions.append(accounts.c.email == email)
        if medical_id:
            conditions.append(accounts.c.medical_id == medical_id)
        if not conditions:
            return

        query = select(accounts.c.id, accounts.c.email).where(or_(*conditions))
        if exclude_id is not None:
            query = query.where(accounts.c.id != exclude_id)
        result = await db.execute(query.limit(1))
        existing = result.mappings().first()
        if existing:
            raise ConflictException(
                "email_taken" if email and existing["email"] == email else "medical_id_taken"
            )

    async def create_account(self, db: AsyncSession, account_data: AccountCreate) -> dict:
        """Register a new account. Only admins get a password hash."""
        await self._raise_if_taken(db, account_data.email, account_data.medical_id)

        password_hash = None
        if account_data.is_admin and account_data.password:
            password_hash = get_password_hash(account_data.password)

        query = (
            accounts.insert()
            .values(
                email=account_data.email,
                medical_id=account_data.medical_id,
                name=account_data.name,
                city=account_data.city,
                specialty=account_data.specialty,
                is_admin=account_data.is_admin,
                password_hash=password_hash,
                terms_accepted=account_data.terms_accepted,
            )
            .returning(accounts)
        )

        try:
            result = await db.execute(query)
            await db.commit()
        except IntegrityError:
            # Lost a race against a concurrent registration
            await db.rollback()
            raise ConflictException("email_taken")

        account = result.mappings().first()
        if not account:
            raise ValueError("Failed to create account")

        return strip_credentials(dict(account))

    async def update_account(
        self, db: AsyncSession, account_id: UUID, account_data: AccountUpdate
    ) -> dict | None:
        """
        Update an account profile.

        Attendees keep a medical ID and never get a password; both rules are
        checked against the stored row since the admin flag cannot change.

        Raises:
            BadRequestException: If the update breaks the attendee rules
            ConflictException: If the new email or medical ID is taken
        """
        current = await self.get_account_by_id(db, account_id)
        if not current:
            return None

        update_data = account_data.model_dump(exclude_unset=True)
        # Not-null columns; an explicit null means "leave as is"
        for field in ("email", "name", "terms_accepted"):
            if field in update_data and update_data[field] is None:
                del update_data[field]
        if not update_data:
            return await self.get_profile(db, account_id)

        if not current["is_admin"]:
            if update_data.get("password"):
                raise BadRequestException("attendee_password_not_allowed")
            if "medical_id" in update_data and not update_data["medical_id"]:
                raise BadRequestException("medical_id_required")

        await self._raise_if_taken(
            db,
            update_data.get("email"),
            update_data.get("medical_id"),
            exclude_id=account_id,
        )

        password = update_data.pop("password", None)
        if password:
            update_data["password_hash"] = get_password_hash(password)

        update_data["updated_at"] = datetime.now(UTC)

        query = (
            update(accounts)
            .where(accounts.c.id == account_id)
            .values(**update_data)
            .returning(accounts)
        )

        try:
            result = await db.execute(query)
            await db.commit()
        except IntegrityError:
            # Lost a race against a concurrent write
            await db.rollback()
            raise ConflictException(
                "medical_id_taken" if "medical_id" in update_data else "email_taken"
            )
        account = result.mappings().first()

        if not account:
            return None

        self._invalidate(account_id)
        return strip_credentials(dict(account))

    async def update_last_login(
        self, db: AsyncSession, account_id: UUID, logged_in_at: datetime | None = None
    ) -> None:
        """Update an account's last login timestamp."""
        query = (
            update(accounts)
            .where(accounts.c.id == account_id)
            .values(last_login_at=logged_in_at or datetime.now(UTC))
        )
        await db.execute(query)
        await db.commit()

        self._invalidate(account_id)

    async def delete_account(self, db: AsyncSession, account_id: UUID) -> bool:
        """Delete an account (hard delete)."""
        query = delete(accounts).where(accounts.c.id == account_id)
        result = await db.execute(query)
        await db.commit()

        self._invalidate(account_id)

        return result.rowcount > 0  # type: ignore[attr-defined]

    async def list_accounts(
        self,
        db: AsyncSession,
        page: int = 1,
        page_size: int = 20,
        is_admin: bool | None = None,
        search: str | None = None,
    ) -> tuple[list[dict], int]:
        """List accounts with optional role filter and name/email/medical-ID search."""
        conditions = []
        if is_admin is not None:
            conditions.append(accounts.c.is_admin == is_admin)
        if search:
            pattern = f"%{search.strip().lower()}%"
            conditions.append(
                or_(
                    func.lower(accounts.c.name).like(pattern),
                    accounts.c.email.like(pattern),
                    accounts.c.medical_id.like(pattern),
                )
            )

        count_query = select(func.count()).select_from(accounts)
        list_query = select(accounts).order_by(accounts.c.created_at.desc(), accounts.c.email)
        if conditions:
            count_query = count_query.where(*conditions)
            list_query = list_query.where(*conditions)

        total = (await db.execute(count_query)).scalar_one()
        result = await db.execute(list_query.offset((page - 1) * page_size).limit(page_size))

        return [strip_credentials(dict(row)) for row in result.mappings().all()], total
