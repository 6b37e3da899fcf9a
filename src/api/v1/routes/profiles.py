"""Profile API routes."""

from fastapi import APIRouter, Depends, Query, Request

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_profile_service
from api.v1.schemas.common import ErrorResponse
from api.v1.schemas.profile import (
    ProfileDetailResponse,
    ProfileListResponse,
    ProfileResponse,
    ProfileWrite,
    ProfileWriteResponse,
)
from core.exceptions import ProfileNotFoundError
from core.rate_limit import limiter
from domain.services.profile_service import ProfileService

router = APIRouter(tags=["profiles"])


@router.get(
    "/profile",
    response_model=ProfileDetailResponse,
    summary="Read a profile",
    responses={
        400: {"model": ErrorResponse, "description": "Missing uid"},
        404: {"model": ErrorResponse, "description": "No profile for this uid"},
        503: {"model": ErrorResponse, "description": "Profile store unavailable"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def read_profile(
    request: Request,
    user: CurrentUser,
    uid: str | None = Query(None, description="Identity provider uid"),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    """Get a profile by uid. A missing profile answers 404 with ``data: null``."""
    profile = await service.read(uid)
    if profile is None:
        raise ProfileNotFoundError(uid or "")
    return ProfileDetailResponse(data=ProfileResponse.from_entity(profile))


@router.post(
    "/profile",
    response_model=ProfileWriteResponse,
    summary="Update a profile",
    responses={
        400: {"model": ErrorResponse, "description": "Missing uid/name or invalid role"},
        403: {"model": ErrorResponse, "description": "Not the owner or an admin"},
        404: {"model": ErrorResponse, "description": "No profile for this uid"},
        503: {"model": ErrorResponse, "description": "Profile store unavailable"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def write_profile(
    request: Request,
    body: ProfileWrite,
    user: CurrentUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileWriteResponse:
    """Merge the supplied fields into a profile.

    Omitted fields keep their stored values. The response carries the
    merged record as stored, which clients should adopt as their baseline.
    """
    await service.ensure_can_modify(user.id, body.uid, role=body.role)
    profile = await service.write(
        uid=body.uid,
        name=body.name,
        role=body.role,
        bio=body.bio,
        avatar_url=body.avatar_url,
        theme=body.preferences.theme if body.preferences else None,
    )
    return ProfileWriteResponse(data=ProfileResponse.from_entity(profile))


@router.post(
    "/profile/provision",
    response_model=ProfileDetailResponse,
    summary="Provision the caller's profile",
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def provision_profile(
    request: Request,
    user: CurrentUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    """Create the caller's profile if missing. Safe to repeat."""
    profile = await service.provision(
        user.id,
        user.display_name or user.email.split("@")[0],
        user.email,
    )
    return ProfileDetailResponse(data=ProfileResponse.from_entity(profile))


@router.get(
    "/profiles",
    response_model=ProfileListResponse,
    summary="List all profiles",
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_profiles(
    request: Request,
    user: CurrentUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileListResponse:
    """Get every profile, ordered by name."""
    profiles = await service.list_all()
    return ProfileListResponse(data=[ProfileResponse.from_entity(p) for p in profiles])
