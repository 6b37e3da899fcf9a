"""Shared fixtures for unit tests."""

import asyncio
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

import pytest

from domain.entities.profile import Profile
from domain.repositories.profile_repository import ProfileConflictError


class FakeProfileRepository:
    """Dict-backed profile repository with column-level merge semantics.

    Every call yields to the event loop once, so concurrent callers
    interleave the way they would against a real store.
    """

    def __init__(self) -> None:
        self.rows: dict[str, Profile] = {}

    async def get(self, uid: str) -> Profile | None:
        await asyncio.sleep(0)
        row = self.rows.get(uid)
        return replace(row) if row else None

    async def list_all(self) -> list[Profile]:
        await asyncio.sleep(0)
        return sorted((replace(p) for p in self.rows.values()), key=lambda p: (p.name, p.uid))

    async def create(self, profile: Profile) -> Profile:
        await asyncio.sleep(0)
        if profile.uid in self.rows:
            raise ProfileConflictError(profile.uid)
        self.rows[profile.uid] = replace(profile)
        return replace(profile)

    async def merge(self, uid: str, changes: dict[str, Any]) -> Profile | None:
        await asyncio.sleep(0)
        row = self.rows.get(uid)
        if row is None:
            return None
        for key, value in changes.items():
            setattr(row, key, value)
        return replace(row)


class FakeUnitOfWork:
    """Fake Unit of Work backed by an in-memory profile repository."""

    def __init__(self) -> None:
        self.profiles = FakeProfileRepository()
        self.commits = 0
        self.rolled_back = False

    @property
    def committed(self) -> bool:
        return self.commits > 0

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


def make_profile(uid: str, **overrides: Any) -> Profile:
    """Build a stored-looking profile created an hour ago."""
    created = datetime(2026, 1, 1, 11, 0, tzinfo=timezone.utc)
    fields: dict[str, Any] = {
        "name": "Original Name",
        "email": f"{uid[:8]}@example.com",
        "bio": "original bio",
        "avatar_url": "https://cdn.example.com/a.png",
        "created_at": created,
        "updated_at": created + timedelta(minutes=5),
    }
    fields.update(overrides)
    return Profile(uid=uid, **fields)


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def user_id() -> str:
    """A random user ID."""
    return str(uuid4())


@pytest.fixture
def actor_id() -> str:
    """A random actor ID (distinct from user_id)."""
    return str(uuid4())


@pytest.fixture
def profile_factory() -> Any:
    """Return the make_profile builder."""
    return make_profile
