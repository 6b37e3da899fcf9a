"""Authentication and identity provider protocols."""

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass
class TokenUser:
    """Represents a user extracted from an auth token."""

    id: str
    email: str
    display_name: Optional[str] = None
    role: Optional[str] = None


@dataclass(frozen=True, slots=True)
class IdentitySession:
    """Result of a successful identity provider call."""

    uid: str
    email: str
    display_name: Optional[str] = None
    access_token: Optional[str] = None


class IAuthProvider(Protocol):
    """Protocol for bearer token verification."""

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """
        Validate an authentication token.

        Args:
            token: The bearer token to validate

        Returns:
            TokenUser if valid, None if invalid
        """
        ...

    def create_token(self, user: TokenUser) -> str:
        """
        Create an authentication token for a user.

        Args:
            user: The user to create a token for

        Returns:
            The generated token string
        """
        ...


class IIdentityProvider(Protocol):
    """Protocol for the external identity provider.

    Implementations raise IdentityAlreadyExistsError, IdentityNotFoundError,
    BadCredentialError or IdentityUnavailableError.
    """

    async def create_identity(
        self, email: str, password: str, display_name: Optional[str] = None
    ) -> IdentitySession:
        """Register a new email/password identity."""
        ...

    async def verify_identity(self, email: str, password: str) -> IdentitySession:
        """Verify an email/password pair."""
        ...

    async def federated_sign_in(self, provider: str, id_token: str) -> IdentitySession:
        """Exchange a federated provider's ID token for an identity."""
        ...
