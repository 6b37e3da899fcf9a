"""Supabase Auth (GoTrue) identity provider over its REST API."""

from typing import Any, Optional

import httpx
import structlog

from core.exceptions import (
    BadCredentialError,
    IdentityAlreadyExistsError,
    IdentityNotFoundError,
    IdentityUnavailableError,
    InvalidRequestError,
)
from infrastructure.auth.provider import IdentitySession

logger = structlog.get_logger()

_ALREADY_EXISTS_CODES = {"user_already_exists", "email_exists"}
_NOT_FOUND_CODES = {"user_not_found"}


def _error_code(body: dict[str, Any]) -> str:
    return str(body.get("error_code") or body.get("error") or "")


def _error_message(body: dict[str, Any]) -> str:
    return str(body.get("msg") or body.get("error_description") or body.get("message") or "")


class SupabaseIdentityProvider:
    """Identity provider backed by Supabase Auth.

    The HTTP client is owned by the application lifespan and injected here.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        anon_key: str,
        timeout: float = 10.0,
    ) -> None:
        self._client = http_client
        self._auth_url = f"{base_url.rstrip('/')}/auth/v1"
        self._anon_key = anon_key
        self._timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self._anon_key) and self._auth_url.startswith("http")

    async def create_identity(
        self, email: str, password: str, display_name: Optional[str] = None
    ) -> IdentitySession:
        """Register a new email/password identity."""
        payload: dict[str, Any] = {"email": email, "password": password}
        if display_name:
            payload["data"] = {"display_name": display_name}

        response = await self._post("/signup", payload)
        body = self._json(response)

        if response.status_code >= 400:
            code = _error_code(body)
            message = _error_message(body)
            if code in _ALREADY_EXISTS_CODES or "already registered" in message.lower():
                raise IdentityAlreadyExistsError(email)
            raise InvalidRequestError(message or "Sign-up rejected by identity provider")

        return self._to_session(body)

    async def verify_identity(self, email: str, password: str) -> IdentitySession:
        """Verify an email/password pair and return a fresh session."""
        response = await self._post(
            "/token",
            {"email": email, "password": password},
            params={"grant_type": "password"},
        )
        body = self._json(response)

        if response.status_code >= 400:
            code = _error_code(body)
            if code in _NOT_FOUND_CODES:
                raise IdentityNotFoundError()
            if code == "email_not_confirmed":
                raise BadCredentialError("Email address has not been confirmed.")
            raise BadCredentialError()

        return self._to_session(body)

    async def federated_sign_in(self, provider: str, id_token: str) -> IdentitySession:
        """Exchange a federated provider's ID token (e.g. Google) for a session."""
        response = await self._post(
            "/token",
            {"provider": provider, "id_token": id_token},
            params={"grant_type": "id_token"},
        )
        body = self._json(response)

        if response.status_code >= 400:
            raise BadCredentialError(_error_message(body) or "Federated sign-in failed.")

        return self._to_session(body)

    async def _post(
        self,
        path: str,
        payload: dict[str, Any],
        params: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        url = f"{self._auth_url}{path}"
        try:
            response = await self._client.post(
                url,
                json=payload,
                params=params,
                headers={"apikey": self._anon_key},
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            logger.error("identity_provider_unreachable", path=path, error=str(e))
            raise IdentityUnavailableError() from e

        if response.status_code >= 500:
            logger.error(
                "identity_provider_error",
                path=path,
                status_code=response.status_code,
            )
            raise IdentityUnavailableError()
        return response

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    @staticmethod
    def _to_session(body: dict[str, Any]) -> IdentitySession:
        # With email confirmation enabled, signup returns the bare user object.
        user = body.get("user") or body
        uid = user.get("id")
        if not uid:
            logger.error("identity_provider_malformed_response", keys=sorted(body))
            raise IdentityUnavailableError()

        metadata = user.get("user_metadata") or {}
        return IdentitySession(
            uid=str(uid),
            email=user.get("email") or "",
            display_name=(
                metadata.get("display_name")
                or metadata.get("full_name")
                or metadata.get("name")
            ),
            access_token=body.get("access_token"),
        )
