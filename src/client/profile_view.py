"""Profile view state machine.

    LOADING -> VIEWING | PROFILE_MISSING | LOAD_FAILED | SIGNED_OUT
    VIEWING -> EDITING -> (cancel) VIEWING
    EDITING -> SAVING -> VIEWING            on success
                      -> EDITING + error    on failure, edits kept

The profile is read once on mount and only re-synchronized by an explicit
save, whose response (the server's merged record) becomes the new baseline.
"""

import asyncio
import contextlib
from dataclasses import replace
from enum import StrEnum
from typing import Any, Awaitable, Optional, TypeVar

import structlog

from client.profile_api import (
    WRITABLE_FIELDS,
    ProfileApiClient,
    ProfileApiError,
    ProfileFields,
)

logger = structlog.get_logger()

T = TypeVar("T")

EDITABLE_FIELDS = frozenset(WRITABLE_FIELDS)


class ViewState(StrEnum):
    LOADING = "loading"
    VIEWING = "viewing"
    PROFILE_MISSING = "profile_missing"
    LOAD_FAILED = "load_failed"
    EDITING = "editing"
    SAVING = "saving"
    SIGNED_OUT = "signed_out"


class InvalidTransitionError(Exception):
    """An action was requested in a state that does not allow it."""

    def __init__(self, action: str, state: ViewState) -> None:
        self.action = action
        self.state = state
        super().__init__(f"Cannot {action} while {state.value}")


class ProfileView:
    """Client-side state for viewing and editing one user's profile.

    One request is in flight at most. ``unmount`` cancels it, and results
    arriving after teardown are dropped.
    """

    def __init__(
        self,
        api: ProfileApiClient,
        uid: Optional[str],
        sign_in_path: str = "/sign-in",
    ) -> None:
        self._api = api
        self._uid = uid
        self._sign_in_path = sign_in_path

        self.state = ViewState.LOADING
        self.profile: Optional[ProfileFields] = None
        self.draft: Optional[ProfileFields] = None
        self.error: Optional[str] = None
        self.redirect_to: Optional[str] = None

        self._snapshot: Optional[ProfileFields] = None
        self._inflight: Optional[asyncio.Task[Any]] = None
        self._torn_down = False

    @property
    def is_busy(self) -> bool:
        return self.state in (ViewState.LOADING, ViewState.SAVING)

    async def mount(self) -> None:
        """Load the profile once."""
        self._require(ViewState.LOADING, "mount")
        if not self._uid:
            self.state = ViewState.SIGNED_OUT
            self.redirect_to = self._sign_in_path
            return

        try:
            profile = await self._run(self._api.read(self._uid))
        except ProfileApiError as e:
            if self._torn_down:
                return
            logger.warning("profile_load_failed", uid=self._uid, error=e.message)
            self.state = ViewState.LOAD_FAILED
            self.error = e.message
            return

        if self._torn_down:
            return
        if profile is None:
            self.state = ViewState.PROFILE_MISSING
            return

        self._adopt(profile)

    def begin_edit(self) -> None:
        """Enter edit mode, remembering current values for cancel."""
        self._require(ViewState.VIEWING, "edit")
        self._snapshot = replace(self._loaded(self.draft, "edit"))
        self.error = None
        self.state = ViewState.EDITING

    def set_field(self, field_name: str, value: str) -> None:
        """Change one editable field of the draft."""
        self._require(ViewState.EDITING, "edit fields")
        if field_name not in EDITABLE_FIELDS:
            raise ValueError(f"Field is not editable: {field_name}")
        setattr(self._loaded(self.draft, "edit fields"), field_name, value)

    def cancel_edit(self) -> None:
        """Leave edit mode and restore the values from before editing."""
        self._require(ViewState.EDITING, "cancel")
        self.draft = replace(self._loaded(self._snapshot, "cancel"))
        self._snapshot = None
        self.error = None
        self.state = ViewState.VIEWING

    async def save(self) -> bool:
        """Submit the fields changed since editing began.

        Returns True on success. On failure the view stays in EDITING with
        ``error`` set and the draft unchanged, ready to resubmit. Saving
        with nothing changed returns to VIEWING without a request.
        """
        self._require(ViewState.EDITING, "save")
        draft = self._loaded(self.draft, "save")
        baseline = self._loaded(self._snapshot, "save")
        if not draft.changed_from(baseline):
            self.error = None
            self._snapshot = None
            self.state = ViewState.VIEWING
            return True

        self.state = ViewState.SAVING
        self.error = None

        try:
            merged = await self._run(self._api.write(replace(draft), baseline=baseline))
        except ProfileApiError as e:
            if self._torn_down:
                return False
            logger.warning("profile_save_failed", uid=self._uid, error=e.message)
            self.state = ViewState.EDITING
            self.error = e.message
            return False

        if self._torn_down:
            return False
        self._adopt(merged)
        return True

    async def unmount(self) -> None:
        """Tear down the view and abort any in-flight request."""
        self._torn_down = True
        task, self._inflight = self._inflight, None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    def _adopt(self, profile: ProfileFields) -> None:
        self.profile = profile
        self.draft = replace(profile)
        self._snapshot = None
        self.state = ViewState.VIEWING

    async def _run(self, awaitable: Awaitable[T]) -> T:
        task = asyncio.ensure_future(awaitable)
        self._inflight = task
        try:
            return await task
        except asyncio.CancelledError:
            if self._torn_down:
                raise ProfileApiError("Request aborted") from None
            raise
        finally:
            if self._inflight is task:
                self._inflight = None

    def _require(self, expected: ViewState, action: str) -> None:
        if self._torn_down or self.state != expected:
            raise InvalidTransitionError(action, self.state)

    def _loaded(self, value: Optional[T], action: str) -> T:
        if value is None:
            raise InvalidTransitionError(action, self.state)
        return value
