"""Authentication schemas."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from app.schemas.accounts import AccountProfile


class LoginRequest(BaseModel):
    """Login form payload. Shape problems are reported by the authenticator, not here."""

    model_config = ConfigDict(populate_by_name=True)

    identifier: str = ""
    password: str | None = None
    is_admin: bool = Field(
        default=False,
        validation_alias=AliasChoices("is_admin", "isAdmin"),
    )


class LoginResponse(BaseModel):
    """Login outcome; `user` and `access_token` only on success."""

    success: bool
    user: AccountProfile | None = None
    error: str | None = None
    access_token: str | None = None
    token_type: str | None = None
