"""Authentication API routes."""

from fastapi import APIRouter, Depends, Request, Response, status

from api.v1.dependencies import get_app_settings, get_auth_service
from api.v1.schemas.auth import (
    AuthResponse,
    FederatedSignInRequest,
    SignInRequest,
    SignUpRequest,
)
from api.v1.schemas.common import ErrorResponse, SuccessResponse
from core.config import Settings
from core.rate_limit import limiter
from domain.services.auth_service import AuthResult, AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_session_cookie(response: Response, result: AuthResult, app_settings: Settings) -> None:
    """Hand the access token to the browser so the session guard lets pages through."""
    if not result.session.access_token:
        return
    response.set_cookie(
        key=app_settings.session_cookie_name,
        value=result.session.access_token,
        max_age=app_settings.jwt_expire_minutes * 60,
        httponly=True,
        secure=app_settings.is_production,
        samesite="lax",
    )


def _to_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        uid=result.session.uid,
        email=result.profile.email or result.session.email,
        name=result.profile.name,
        role=result.role,
        access_token=result.session.access_token,
    )


@router.post(
    "/sign-up",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
    responses={
        409: {"model": ErrorResponse, "description": "Email already registered"},
        503: {"model": ErrorResponse, "description": "Backend unavailable"},
    },
)
@limiter.limit("5/minute")  # type: ignore[untyped-decorator]
async def sign_up(
    request: Request,
    response: Response,
    body: SignUpRequest,
    service: AuthService = Depends(get_auth_service),
    app_settings: Settings = Depends(get_app_settings),
) -> AuthResponse:
    """Register an identity and provision its profile."""
    result = await service.sign_up(body.email, body.password, body.name)
    _set_session_cookie(response, result, app_settings)
    return _to_response(result)


@router.post(
    "/sign-in",
    response_model=AuthResponse,
    summary="Sign in with email and password",
    responses={
        401: {"model": ErrorResponse, "description": "Bad credentials"},
        503: {"model": ErrorResponse, "description": "Backend unavailable"},
    },
)
@limiter.limit("5/minute")  # type: ignore[untyped-decorator]
async def sign_in(
    request: Request,
    response: Response,
    body: SignInRequest,
    service: AuthService = Depends(get_auth_service),
    app_settings: Settings = Depends(get_app_settings),
) -> AuthResponse:
    """Verify credentials and record the sign-in."""
    result = await service.sign_in(body.email, body.password)
    _set_session_cookie(response, result, app_settings)
    return _to_response(result)


@router.post(
    "/federated",
    response_model=AuthResponse,
    summary="Sign in with a federated provider",
    responses={
        401: {"model": ErrorResponse, "description": "Provider token rejected"},
        503: {"model": ErrorResponse, "description": "Backend unavailable"},
    },
)
@limiter.limit("5/minute")  # type: ignore[untyped-decorator]
async def federated_sign_in(
    request: Request,
    response: Response,
    body: FederatedSignInRequest,
    service: AuthService = Depends(get_auth_service),
    app_settings: Settings = Depends(get_app_settings),
) -> AuthResponse:
    """Exchange a provider ID token, provisioning the profile on first use."""
    result = await service.federated_sign_in(body.provider, body.id_token)
    _set_session_cookie(response, result, app_settings)
    return _to_response(result)


@router.post("/sign-out", response_model=SuccessResponse, summary="Sign out")
async def sign_out(
    response: Response,
    app_settings: Settings = Depends(get_app_settings),
) -> SuccessResponse:
    """Clear the session cookie."""
    response.delete_cookie(app_settings.session_cookie_name)
    return SuccessResponse(message="Signed out")
