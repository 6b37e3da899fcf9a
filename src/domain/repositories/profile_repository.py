"""Profile repository protocol."""

from typing import Any, Protocol

from domain.entities.profile import Profile


class ProfileConflictError(Exception):
    """A profile with the same uid was inserted concurrently."""

    def __init__(self, uid: str) -> None:
        self.uid = uid
        super().__init__(f"Profile already exists: {uid}")


class IProfileRepository(Protocol):
    """Repository interface for Profile entities."""

    async def get(self, uid: str) -> Profile | None:
        """Get a profile by uid."""
        ...

    async def list_all(self) -> list[Profile]:
        """Get all profiles ordered by name."""
        ...

    async def create(self, profile: Profile) -> Profile:
        """Insert a new profile.

        Raises:
            ProfileConflictError: If a profile with the uid already exists
        """
        ...

    async def merge(self, uid: str, changes: dict[str, Any]) -> Profile | None:
        """Update only the given columns and return the stored result.

        Returns None if no profile exists for the uid.
        """
        ...
