"""Profile service layer with business logic."""

from datetime import datetime
from typing import Any, Callable, List, Optional

import structlog

from core.exceptions import (
    AuthorizationError,
    InvalidRequestError,
    InvalidRoleError,
    ProfileNotFoundError,
)
from domain.entities.profile import (
    ALLOWED_ROLES,
    Profile,
    Role,
    Theme,
    is_allowed_role,
    utcnow,
)
from domain.repositories.profile_repository import ProfileConflictError
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


def _require_uid(uid: Optional[str]) -> str:
    if uid is None or not uid.strip():
        raise InvalidRequestError("UID is required", field="uid")
    return uid


class ProfileService:
    """Service layer for Profile business logic."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    async def read(self, uid: Optional[str]) -> Optional[Profile]:
        """Get a profile by uid.

        A missing profile is a normal outcome and returns None.

        Raises:
            InvalidRequestError: If uid is empty
            StoreUnavailableError: If the store fails
        """
        uid = _require_uid(uid)
        async with self._uow_factory() as uow:
            return await uow.profiles.get(uid)

    async def list_all(self) -> List[Profile]:
        """Get every profile, ordered by name."""
        async with self._uow_factory() as uow:
            return await uow.profiles.list_all()

    async def write(
        self,
        uid: Optional[str],
        name: Optional[str] = None,
        role: Optional[str] = None,
        bio: Optional[str] = None,
        avatar_url: Optional[str] = None,
        theme: Optional[str] = None,
    ) -> Profile:
        """Merge the supplied fields into an existing profile.

        Fields passed as None are left untouched in the store. Only the
        supplied columns are written, so concurrent writers touching
        disjoint fields both keep their changes. The stored record always
        has a name, so ``name`` may be omitted but never blanked.

        Returns:
            The profile as stored after the merge

        Raises:
            InvalidRequestError: Missing uid, blank name, or nothing to write
            InvalidRoleError: Role outside the allow-list
            ProfileNotFoundError: No profile stored for uid
        """
        uid = _require_uid(uid)
        if name is not None and not name.strip():
            raise InvalidRequestError("UID and name are required", field="name")
        if role is not None and not is_allowed_role(role):
            raise InvalidRoleError(role, sorted(ALLOWED_ROLES))
        if theme is not None and theme not in {t.value for t in Theme}:
            raise InvalidRequestError(f"Invalid theme value: {theme}", field="theme")

        changes: dict[str, Any] = {}
        if name is not None:
            changes["name"] = name.strip()
        if role is not None:
            changes["role"] = Role(role)
        if bio is not None:
            changes["bio"] = bio
        if avatar_url is not None:
            changes["avatar_url"] = avatar_url
        if theme is not None:
            changes["theme"] = Theme(theme)
        if not changes:
            raise InvalidRequestError("At least one field must be supplied")
        changes["updated_at"] = self._clock()

        async with self._uow_factory() as uow:
            merged = await uow.profiles.merge(uid, changes)
            if merged is None:
                raise ProfileNotFoundError(uid)
            await uow.commit()

        logger.info(
            "profile_updated",
            uid=uid,
            fields=sorted(key for key in changes if key != "updated_at"),
        )
        return merged

    async def ensure_can_modify(
        self,
        actor_uid: str,
        target_uid: Optional[str],
        role: Optional[str] = None,
    ) -> None:
        """Allow owners to modify their own profile and admins any profile.

        Only admins may change a role. A non-admin owner may resubmit their
        current role unchanged; a role outside the allow-list is left for
        ``write`` to reject as invalid.

        Raises:
            InvalidRequestError: If target_uid is empty
            AuthorizationError: Not the owner, or a non-admin changing a role
        """
        target_uid = _require_uid(target_uid)
        if actor_uid == target_uid and role is None:
            return

        async with self._uow_factory() as uow:
            actor = await uow.profiles.get(actor_uid)

        if actor is not None and actor.role == Role.ADMIN:
            return
        if actor is None or actor_uid != target_uid:
            raise AuthorizationError("You can only modify your own profile")
        if role is not None and is_allowed_role(role) and role != actor.role:
            logger.warning("role_change_denied", uid=actor_uid, requested_role=role)
            raise AuthorizationError("Only administrators can change roles")

    async def provision(self, uid: Optional[str], name: str, email: str) -> Profile:
        """Create the profile for an identity if it does not exist yet.

        Idempotent: an existing profile is returned untouched, so this can be
        re-run after a failure between identity creation and profile creation.
        """
        uid = _require_uid(uid)
        async with self._uow_factory() as uow:
            existing = await uow.profiles.get(uid)
            if existing:
                return existing

            now = self._clock()
            profile = Profile(
                uid=uid,
                name=name.strip() or email.split("@")[0].strip() or uid,
                email=email,
                created_at=now,
                updated_at=now,
            )
            try:
                created = await uow.profiles.create(profile)
                await uow.commit()
            except ProfileConflictError:
                await uow.rollback()
                created = None

        if created is None:
            # Lost a race with a concurrent provision; the winner's record stands.
            async with self._uow_factory() as uow:
                winner = await uow.profiles.get(uid)
            if winner is None:
                raise ProfileNotFoundError(uid)
            return winner

        logger.info("profile_provisioned", uid=uid)
        return created

    async def record_sign_in(self, uid: str) -> Optional[Profile]:
        """Stamp last_login_at. Returns None if the profile is missing."""
        uid = _require_uid(uid)
        async with self._uow_factory() as uow:
            profile = await uow.profiles.merge(uid, {"last_login_at": self._clock()})
            if profile is None:
                return None
            await uow.commit()
            return profile
