"""Tests for the SQLAlchemy unit of work and profile repository."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from core.exceptions import StoreUnavailableError
from domain.entities.profile import Profile, Role, Theme
from domain.repositories.profile_repository import ProfileConflictError
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork

CREATED = datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)


def _profile(uid: str = "uid-1", **overrides) -> Profile:
    fields = {
        "name": "Alice",
        "email": "alice@example.com",
        "bio": "hello",
        "created_at": CREATED,
        "updated_at": CREATED,
    }
    fields.update(overrides)
    return Profile(uid=uid, **fields)


async def _seed(session_factory, *profiles: Profile) -> None:
    async with SQLAlchemyUnitOfWork(session_factory) as uow:
        for profile in profiles:
            await uow.profiles.create(profile)
        await uow.commit()


class TestUnitOfWork:
    @pytest.mark.asyncio
    async def test_profiles_requires_context(self, session_factory):
        uow = SQLAlchemyUnitOfWork(session_factory)

        with pytest.raises(RuntimeError):
            uow.profiles

    @pytest.mark.asyncio
    async def test_uncommitted_changes_are_discarded(self, session_factory):
        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            await uow.profiles.create(_profile())

        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            assert await uow.profiles.get("uid-1") is None

    @pytest.mark.asyncio
    async def test_driver_error_becomes_store_unavailable(self):
        session = MagicMock()
        session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("server closed the connection"))
        )
        session.rollback = AsyncMock()
        session.close = AsyncMock()

        with pytest.raises(StoreUnavailableError) as exc_info:
            async with SQLAlchemyUnitOfWork(lambda: session) as uow:
                await uow.profiles.get("uid-1")

        assert isinstance(exc_info.value.__cause__, OperationalError)
        session.rollback.assert_awaited_once()
        session.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_domain_errors_pass_through(self, session_factory):
        with pytest.raises(ValueError):
            async with SQLAlchemyUnitOfWork(session_factory):
                raise ValueError("not a store failure")


class TestProfileRepository:
    @pytest.mark.asyncio
    async def test_create_and_get(self, session_factory):
        await _seed(session_factory, _profile(theme=Theme.DARK, role=Role.VIEWER))

        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            result = await uow.profiles.get("uid-1")

        assert result is not None
        assert result.name == "Alice"
        assert result.role == Role.VIEWER
        assert result.theme == Theme.DARK
        assert result.last_login_at is None

    @pytest.mark.asyncio
    async def test_duplicate_create_raises_conflict(self, session_factory):
        await _seed(session_factory, _profile())

        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            with pytest.raises(ProfileConflictError):
                await uow.profiles.create(_profile(name="Impostor"))
            await uow.rollback()

        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            assert (await uow.profiles.get("uid-1")).name == "Alice"

    @pytest.mark.asyncio
    async def test_merge_updates_only_supplied_columns(self, session_factory):
        await _seed(session_factory, _profile())
        later = CREATED + timedelta(minutes=1)

        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            merged = await uow.profiles.merge(
                "uid-1", {"role": Role.EDITOR, "updated_at": later}
            )
            await uow.commit()

        assert merged is not None
        assert merged.role == Role.EDITOR
        assert merged.name == "Alice"
        assert merged.bio == "hello"
        assert merged.updated_at.replace(tzinfo=None) == later.replace(tzinfo=None)

    @pytest.mark.asyncio
    async def test_merge_missing_profile_returns_none(self, session_factory):
        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            assert await uow.profiles.merge("ghost", {"name": "A"}) is None

    @pytest.mark.asyncio
    async def test_merge_rejects_immutable_columns(self, session_factory):
        await _seed(session_factory, _profile())

        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            with pytest.raises(ValueError):
                await uow.profiles.merge("uid-1", {"email": "new@example.com"})

    @pytest.mark.asyncio
    async def test_list_all_orders_by_name(self, session_factory):
        await _seed(
            session_factory,
            _profile("uid-z", name="Zed"),
            _profile("uid-a", name="Amy"),
            _profile("uid-m", name="Mo"),
        )

        async with SQLAlchemyUnitOfWork(session_factory) as uow:
            result = await uow.profiles.list_all()

        assert [p.name for p in result] == ["Amy", "Mo", "Zed"]
