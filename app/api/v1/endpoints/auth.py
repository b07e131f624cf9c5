"""Authentication endpoints."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from app.core.messages import get_message
from app.dependencies import CacheManagerDep, DatabaseSession, Locale
from app.schemas.accounts import AccountProfile
from app.schemas.auth import LoginRequest, LoginResponse
from app.services.auth_service import AuthService

router = APIRouter()


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    tags=["Authentication"],
    summary="Log in through the user or admin form",
    responses={
        400: {"model": LoginResponse, "description": "Malformed identifier or missing password"},
        401: {"model": LoginResponse, "description": "Invalid admin credentials"},
        403: {"model": LoginResponse, "description": "Account used through the wrong form"},
        404: {"model": LoginResponse, "description": "No account for the identifier"},
        503: {"model": LoginResponse, "description": "Account store unavailable"},
    },
)
async def login(
    request: LoginRequest,
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
    locale: Locale,
) -> LoginResponse | JSONResponse:
    """
    Authenticate an attendee or an administrator.

    Attendees sign in with their email or medical registration number and no
    password. Administrators sign in with email and password.

    Args:
        request: Identifier, optional password and the admin-form flag
        db: Database session
        cache_manager: Profile cache
        locale: Language for the error message

    Returns:
        The sanitized profile and a bearer token, or an error message with
        the matching status code
    """
    auth_service = AuthService(cache_manager)
    result = await auth_service.authenticate(
        db,
        identifier=request.identifier,
        password=request.password,
        is_admin=request.is_admin,
    )

    if not result.success or result.profile is None:
        body = LoginResponse(
            success=False,
            error=get_message(result.message_key or "invalid_credentials", locale),
        )
        return JSONResponse(status_code=result.status_code, content=body.model_dump())

    return LoginResponse(
        success=True,
        user=AccountProfile.model_validate(result.profile),
        access_token=auth_service.issue_access_token(result.profile),
        token_type="bearer",
    )
