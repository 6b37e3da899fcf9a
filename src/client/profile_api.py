"""HTTP client for the profile read/write endpoints."""

from dataclasses import dataclass
from typing import Any, Optional

import httpx
import structlog

logger = structlog.get_logger()

DEFAULT_TIMEOUT = 10.0

WRITABLE_FIELDS = ("name", "role", "bio", "avatar_url", "theme")


class ProfileApiError(Exception):
    """A profile request failed; ``message`` is safe to show to the user."""

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        error_code: Optional[str] = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(message)


@dataclass
class ProfileFields:
    """Client-side copy of the editable and display fields of a profile."""

    uid: str
    name: str = ""
    email: str = ""
    role: str = "user"
    bio: str = ""
    avatar_url: str = ""
    theme: str = "light"

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ProfileFields":
        preferences = payload.get("preferences") or {}
        return cls(
            uid=payload["uid"],
            name=payload.get("name", ""),
            email=payload.get("email", ""),
            role=payload.get("role", "user"),
            bio=payload.get("bio", ""),
            avatar_url=payload.get("avatar_url", ""),
            theme=preferences.get("theme", "light"),
        )

    def changed_from(self, baseline: "ProfileFields") -> list[str]:
        """Names of the writable fields that differ from ``baseline``."""
        return [
            name
            for name in WRITABLE_FIELDS
            if getattr(self, name) != getattr(baseline, name)
        ]

    def to_write_payload(self, baseline: Optional["ProfileFields"] = None) -> dict[str, Any]:
        """Build the write body.

        With a baseline only the changed fields are sent, so the server
        merge keeps whatever other writers stored in the rest.
        """
        names = WRITABLE_FIELDS if baseline is None else self.changed_from(baseline)
        payload: dict[str, Any] = {"uid": self.uid}
        for name in names:
            if name == "theme":
                payload["preferences"] = {"theme": self.theme}
            else:
                payload[name] = getattr(self, name)
        return payload


class ProfileApiClient:
    """Thin async wrapper over ``GET``/``POST /api/v1/profile``.

    Every request carries a timeout; callers own the ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        access_token: Optional[str] = None,
        base_path: str = "/api/v1",
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._client = http_client
        self._access_token = access_token
        self._base_path = base_path.rstrip("/")
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        if not self._access_token:
            return {}
        return {"Authorization": f"Bearer {self._access_token}"}

    async def read(self, uid: str) -> Optional[ProfileFields]:
        """Fetch a profile. Returns None when the server reports no profile."""
        response = await self._request("GET", "/profile", params={"uid": uid})
        try:
            body = self._check(response)
        except ProfileApiError as e:
            if e.error_code == "PROFILE_NOT_FOUND":
                return None
            raise
        return ProfileFields.from_payload(body["data"])

    async def write(
        self,
        fields: ProfileFields,
        baseline: Optional[ProfileFields] = None,
    ) -> ProfileFields:
        """Submit fields and return the merged record the server stored.

        Pass the record the edits started from as ``baseline`` to send only
        what changed.
        """
        payload = fields.to_write_payload(baseline)
        response = await self._request("POST", "/profile", json=payload)
        body = self._check(response)
        return ProfileFields.from_payload(body["data"])

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(
                method,
                f"{self._base_path}{path}",
                headers=self._headers(),
                timeout=self._timeout,
                **kwargs,
            )
        except httpx.TimeoutException as e:
            logger.warning("profile_request_timeout", method=method, path=path)
            raise ProfileApiError("The request timed out. Please try again.") from e
        except httpx.HTTPError as e:
            logger.warning("profile_request_failed", method=method, path=path, error=str(e))
            raise ProfileApiError("Could not reach the server. Please try again.") from e

    @staticmethod
    def _check(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if response.is_success and isinstance(body, dict):
            return body
        raise ProfileApiError(
            (body.get("message") if isinstance(body, dict) else None)
            or f"Request failed with status {response.status_code}",
            status_code=response.status_code,
            error_code=body.get("error_code") if isinstance(body, dict) else None,
        )
