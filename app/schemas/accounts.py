"""Account schemas for request/response validation."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from app.core.identifiers import normalize_email, normalize_medical_id


class AccountBase(BaseModel):
    """Base account schema with profile fields."""

    name: str = Field(..., min_length=1, max_length=200)
    city: str | None = None
    specialty: str | None = None


class AccountCreate(AccountBase):
    """Schema for registering a new account."""

    email: EmailStr
    medical_id: str | None = Field(None, max_length=64)
    is_admin: bool = False
    password: str | None = Field(None, min_length=8, max_length=72)
    terms_accepted: bool = False

    @field_validator("email", mode="after")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("medical_id")
    @classmethod
    def strip_medical_id(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return normalize_medical_id(value) or None

    @model_validator(mode="after")
    def check_role_requirements(self) -> "AccountCreate":
        if not self.is_admin and not self.medical_id:
            raise ValueError("medical_id is required for non-admin accounts")
        if self.is_admin and not self.password:
            raise ValueError("password is required for admin accounts")
        return self


class AccountUpdate(BaseModel):
    """Schema for updating an account. The admin flag cannot change."""

    email: EmailStr | None = None
    medical_id: str | None = Field(None, max_length=64)
    name: str | None = Field(None, min_length=1, max_length=200)
    city: str | None = None
    specialty: str | None = None
    password: str | None = Field(None, min_length=8, max_length=72)
    terms_accepted: bool | None = None

    @field_validator("email", mode="after")
    @classmethod
    def lowercase_email(cls, value: str | None) -> str | None:
        return normalize_email(value) if value is not None else None

    @field_validator("medical_id")
    @classmethod
    def strip_medical_id(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return normalize_medical_id(value) or None


class AccountProfile(AccountBase):
    """Sanitized account as returned to callers; never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    medical_id: str | None = None
    is_admin: bool = False
    terms_accepted: bool = False
    last_login_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AccountListResponse(BaseModel):
    """Paginated account list for the admin console."""

    accounts: list[AccountProfile]
    total: int
    page: int
    page_size: int
