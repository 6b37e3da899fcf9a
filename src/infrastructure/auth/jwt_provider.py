"""JWT authentication provider implementation.

Supports both Supabase-issued JWTs (ES256 via JWKS) and
locally-created tokens (HS256 for tests).

Supabase JWT payload structure:
    {
        "sub": "user-uid",
        "email": "user@example.com",
        "role": "authenticated",
        "aud": "authenticated",
        "user_metadata": { "display_name": "John" },
        "exp": 1234567890
    }

This is the real authorization boundary: every privileged API call
verifies the bearer token here, regardless of what the session guard let
through.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import httpx
import structlog
from jose import JWTError, jwt
from jose.backends import ECKey

from infrastructure.auth.provider import TokenUser

logger = structlog.get_logger()


class JWTAuthProvider:
    """JWT-based authentication provider.

    Handles validation of both Supabase-issued (ES256) and
    locally-created (HS256) JWTs. JWKS keys are cached per instance.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expire_minutes: int = 30,
        jwks_url: str = "",
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes
        self._jwks_url = jwks_url
        self._http_client = http_client
        self._jwks_cache: Optional[dict[str, Any]] = None

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """
        Validate a JWT token and extract user info.

        Detects the signing algorithm from the token header:
        - ES256 (Supabase): validates via JWKS public key
        - HS256 (local/test): validates via shared secret

        Args:
            token: The JWT to validate

        Returns:
            TokenUser if valid, None if invalid or expired
        """
        try:
            header = jwt.get_unverified_header(token)
            alg = header.get("alg", self._algorithm)

            if alg == "ES256":
                payload = await self._validate_es256(token, header)
            else:
                payload = jwt.decode(
                    token,
                    self._secret_key,
                    algorithms=[self._algorithm],
                    options={"verify_aud": False},
                )

            if payload is None:
                return None

            user_id = payload.get("sub")
            email = payload.get("email")

            if not user_id or not email:
                return None

            # Supabase stores display name in user_metadata
            user_metadata = payload.get("user_metadata") or {}
            display_name = (
                user_metadata.get("display_name")
                or user_metadata.get("name")
                or user_metadata.get("full_name")
                or payload.get("name")
            )

            return TokenUser(
                id=str(user_id),
                email=email,
                display_name=display_name,
                role=payload.get("role"),
            )

        except JWTError:
            return None

    async def _get_jwks_keys(self, refresh: bool = False) -> dict[str, Any]:
        """Fetch and cache JWKS keys as a kid -> key mapping."""
        if self._jwks_cache is not None and not refresh:
            return self._jwks_cache

        if not self._jwks_url or self._http_client is None:
            return {}

        try:
            response = await self._http_client.get(self._jwks_url, timeout=10.0)
            response.raise_for_status()
            jwks_data = response.json()
        except (httpx.HTTPError, ValueError):
            logger.exception("jwks_fetch_failed", jwks_url=self._jwks_url)
            return {}

        self._jwks_cache = {
            key_data["kid"]: key_data
            for key_data in jwks_data.get("keys", [])
            if key_data.get("kid")
        }
        logger.info("jwks_fetched", key_count=len(self._jwks_cache))
        return self._jwks_cache

    async def _validate_es256(self, token: str, header: dict) -> Optional[dict]:
        """Validate an ES256-signed JWT using JWKS public keys."""
        kid = header.get("kid")
        if not kid:
            return None

        key_data = (await self._get_jwks_keys()).get(kid)
        if not key_data:
            # Key not found, refetch once in case of key rotation
            key_data = (await self._get_jwks_keys(refresh=True)).get(kid)
            if not key_data:
                logger.warning("jwks_key_not_found", kid=kid)
                return None

        ec_key = ECKey(key_data, algorithm="ES256")
        return jwt.decode(
            token,
            ec_key,
            algorithms=["ES256"],
            options={"verify_aud": False},
        )

    def create_token(self, user: TokenUser) -> str:
        """
        Create a JWT token for a user (HS256, used for tests).

        Args:
            user: The user to create a token for

        Returns:
            The generated JWT string
        """
        expire = datetime.now(timezone.utc) + timedelta(minutes=self._expire_minutes)

        payload: dict = {
            "sub": user.id,
            "email": user.email,
            "aud": "authenticated",
            "role": "authenticated",
            "exp": expire,
            "user_metadata": {
                "display_name": user.display_name,
            },
        }

        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
