"""Session guard: redirect page requests without a session cookie.

This is a cheap routing pre-filter, not an authorization boundary. Any
non-empty cookie value passes; the token is only verified when an API call
needs it (see ``api.dependencies.auth``).
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, Optional

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.types import ASGIApp

logger = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class GuardDecision:
    """Outcome of the guard for one request."""

    allowed: bool
    redirect_to: Optional[str] = None


def path_matches(path: str, pattern: str) -> bool:
    """Match a path against ``/exact`` or ``/prefix/*`` patterns."""
    if pattern.endswith("/*"):
        prefix = pattern[:-2]
        return path == prefix or path.startswith(prefix + "/")
    return path == pattern or path == pattern.rstrip("/") + "/"


def decide_route(
    path: str,
    token: Optional[str],
    protected_patterns: Iterable[str],
    sign_in_path: str = "/sign-in",
) -> GuardDecision:
    """Redirect protected paths when no token is present, else continue."""
    if token:
        return GuardDecision(allowed=True)
    if any(path_matches(path, pattern) for pattern in protected_patterns):
        return GuardDecision(allowed=False, redirect_to=sign_in_path)
    return GuardDecision(allowed=True)


class SessionGuardMiddleware(BaseHTTPMiddleware):
    """Redirect unauthenticated requests away from protected pages."""

    def __init__(
        self,
        app: ASGIApp,
        protected_patterns: Iterable[str],
        cookie_name: str = "auth-token",
        sign_in_path: str = "/sign-in",
    ) -> None:
        super().__init__(app)
        self._patterns = tuple(protected_patterns)
        self._cookie_name = cookie_name
        self._sign_in_path = sign_in_path

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        decision = decide_route(
            request.url.path,
            request.cookies.get(self._cookie_name),
            self._patterns,
            self._sign_in_path,
        )
        if not decision.allowed:
            logger.info("session_guard_redirect", redirect_to=decision.redirect_to)
            return RedirectResponse(url=decision.redirect_to or self._sign_in_path)

        return await call_next(request)
