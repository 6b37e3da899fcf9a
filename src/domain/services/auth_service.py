"""Sign-up and sign-in flows across the identity provider and profile store."""

from dataclasses import dataclass

import structlog

from core.exceptions import ProfileNotFoundError
from domain.entities.profile import Profile
from domain.services.profile_service import ProfileService
from infrastructure.auth.provider import IdentitySession, IIdentityProvider

logger = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class AuthResult:
    """An authenticated identity together with its profile."""

    session: IdentitySession
    profile: Profile

    @property
    def role(self) -> str:
        return self.profile.role.value


def _fallback_name(session: IdentitySession) -> str:
    return session.display_name or session.email.split("@")[0]


class AuthService:
    """Service layer for account registration and authentication."""

    def __init__(
        self,
        identity_provider: IIdentityProvider,
        profile_service: ProfileService,
    ) -> None:
        self._identity = identity_provider
        self._profiles = profile_service

    async def sign_up(self, email: str, password: str, name: str) -> AuthResult:
        """Create the identity, then provision its profile.

        The two steps are not atomic. If provisioning fails the identity
        remains, and the next sign-in provisions the missing profile.
        """
        session = await self._identity.create_identity(email, password, display_name=name)
        logger.info("identity_created", uid=session.uid)

        profile = await self._profiles.provision(session.uid, name, session.email or email)
        return AuthResult(session=session, profile=profile)

    async def sign_in(self, email: str, password: str) -> AuthResult:
        """Verify credentials and stamp the profile's last sign-in."""
        session = await self._identity.verify_identity(email, password)
        return await self._complete_sign_in(session)

    async def federated_sign_in(self, provider: str, id_token: str) -> AuthResult:
        """Sign in with a federated provider token, provisioning on first use."""
        session = await self._identity.federated_sign_in(provider, id_token)
        await self._profiles.provision(session.uid, _fallback_name(session), session.email)
        return await self._complete_sign_in(session)

    async def _complete_sign_in(self, session: IdentitySession) -> AuthResult:
        profile = await self._profiles.record_sign_in(session.uid)
        if profile is None:
            logger.warning("profile_missing_on_sign_in", uid=session.uid)
            await self._profiles.provision(session.uid, _fallback_name(session), session.email)
            profile = await self._profiles.record_sign_in(session.uid)
            if profile is None:
                raise ProfileNotFoundError(session.uid)

        logger.info("user_signed_in", uid=session.uid, role=profile.role.value)
        return AuthResult(session=session, profile=profile)
