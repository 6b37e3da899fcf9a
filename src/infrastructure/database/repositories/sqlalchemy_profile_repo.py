"""SQLAlchemy implementation of Profile repository."""

from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.profile import Profile, Role, Theme
from domain.repositories.profile_repository import ProfileConflictError
from infrastructure.database.models import ProfileModel

_MERGEABLE_COLUMNS = frozenset(
    {"name", "role", "bio", "avatar_url", "theme", "updated_at", "last_login_at"}
)


class SQLAlchemyProfileRepository:
    """SQLAlchemy implementation of IProfileRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, uid: str) -> Profile | None:
        """Get a profile by uid."""
        stmt = (
            select(ProfileModel)
            .where(ProfileModel.uid == uid)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def list_all(self) -> list[Profile]:
        """Get all profiles ordered by name."""
        stmt = select(ProfileModel).order_by(ProfileModel.name, ProfileModel.uid)
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def create(self, profile: Profile) -> Profile:
        """Insert a new profile."""
        model = self._to_model(profile)
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as e:
            raise ProfileConflictError(profile.uid) from e
        await self._session.refresh(model)
        return self._to_entity(model)

    async def merge(self, uid: str, changes: dict[str, Any]) -> Profile | None:
        """Issue a single UPDATE touching only the given columns."""
        unknown = set(changes) - _MERGEABLE_COLUMNS
        if unknown:
            raise ValueError(f"Columns cannot be merged: {sorted(unknown)}")

        values = {
            key: value.value if isinstance(value, (Role, Theme)) else value
            for key, value in changes.items()
        }
        stmt = (
            update(ProfileModel)
            .where(ProfileModel.uid == uid)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            return None

        return await self.get(uid)

    @staticmethod
    def _to_entity(model: ProfileModel) -> Profile:
        return Profile(
            uid=model.uid,
            name=model.name,
            email=model.email,
            role=Role(model.role),
            bio=model.bio,
            avatar_url=model.avatar_url,
            theme=Theme(model.theme),
            created_at=model.created_at,
            updated_at=model.updated_at,
            last_login_at=model.last_login_at,
        )

    @staticmethod
    def _to_model(profile: Profile) -> ProfileModel:
        return ProfileModel(
            uid=profile.uid,
            name=profile.name,
            email=profile.email,
            role=profile.role.value,
            bio=profile.bio,
            avatar_url=profile.avatar_url,
            theme=profile.theme.value,
            created_at=profile.created_at,
            updated_at=profile.updated_at,
            last_login_at=profile.last_login_at,
        )
