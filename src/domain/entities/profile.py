"""Profile domain entity."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class Role(StrEnum):
    """Fixed allow-list of profile roles."""

    ADMIN = "admin"
    USER = "user"
    EDITOR = "editor"
    MANAGER = "manager"
    VIEWER = "viewer"


class Theme(StrEnum):
    """UI theme preference."""

    LIGHT = "light"
    DARK = "dark"


ALLOWED_ROLES: frozenset[str] = frozenset(role.value for role in Role)


def is_allowed_role(value: str) -> bool:
    """Check a raw role string against the allow-list (exact, case-sensitive)."""
    return value in ALLOWED_ROLES


@dataclass
class Profile:
    """Domain entity for a user profile, keyed by the identity provider's uid."""

    uid: str
    name: str
    email: str = ""
    role: Role = Role.USER
    bio: str = ""
    avatar_url: str = ""
    theme: Theme = Theme.LIGHT
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    last_login_at: datetime | None = None

    def __post_init__(self) -> None:
        """Ensure updated_at is always at least as recent as created_at."""
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at

    @property
    def preferences(self) -> dict[str, str]:
        return {"theme": self.theme.value}
