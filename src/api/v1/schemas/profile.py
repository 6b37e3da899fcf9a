"""Pydantic schemas for Profile API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.profile import Profile


class PreferencesSchema(BaseModel):
    """User preferences."""

    theme: str | None = None


class ProfileWrite(BaseModel):
    """Schema for merging fields into a profile.

    ``role`` and ``theme`` are plain strings here so that values outside
    the allow-list reach the service and are rejected with INVALID_ROLE.
    """

    model_config = ConfigDict(extra="forbid")

    uid: str | None = None
    name: str | None = Field(None, max_length=100)
    role: str | None = None
    bio: str | None = Field(None, max_length=2000)
    avatar_url: str | None = Field(None, max_length=500)
    preferences: PreferencesSchema | None = None


class ProfileResponse(BaseModel):
    """Schema for Profile response."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "uid": "0b6f4c7e-3a52-4a8e-9a39-5f7d2f0e6c11",
                "name": "Alice",
                "email": "alice@example.com",
                "role": "editor",
                "bio": "",
                "avatar_url": "",
                "preferences": {"theme": "light"},
                "created_at": "2026-01-28T10:00:00Z",
                "updated_at": "2026-01-29T08:30:00Z",
                "last_login_at": None,
            }
        },
    )

    uid: str
    name: str
    email: str
    role: str
    bio: str
    avatar_url: str
    preferences: dict[str, str]
    created_at: datetime
    updated_at: datetime
    last_login_at: datetime | None = None

    @classmethod
    def from_entity(cls, profile: Profile) -> "ProfileResponse":
        return cls(
            uid=profile.uid,
            name=profile.name,
            email=profile.email,
            role=profile.role.value,
            bio=profile.bio,
            avatar_url=profile.avatar_url,
            preferences=profile.preferences,
            created_at=profile.created_at,
            updated_at=profile.updated_at,
            last_login_at=profile.last_login_at,
        )


class ProfileDetailResponse(BaseModel):
    """Schema for a single Profile."""

    data: ProfileResponse


class ProfileListResponse(BaseModel):
    """Schema for list of Profiles."""

    data: list[ProfileResponse]


class ProfileWriteResponse(BaseModel):
    """Schema for a successful write; ``data`` is the merged record as stored."""

    success: bool = True
    message: str = "Profile updated successfully"
    data: ProfileResponse
