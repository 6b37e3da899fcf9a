"""Unit tests for ProfileApiClient."""

import json

import httpx
import pytest

from client.profile_api import ProfileApiClient, ProfileApiError, ProfileFields

PAYLOAD = {
    "uid": "uid-123",
    "name": "Alice",
    "email": "alice@example.com",
    "role": "editor",
    "bio": "hello",
    "avatar_url": "",
    "preferences": {"theme": "dark"},
    "created_at": "2026-01-01T12:00:00Z",
    "updated_at": "2026-01-02T12:00:00Z",
    "last_login_at": None,
}


def _client(handler, token: str | None = "token-abc") -> tuple[ProfileApiClient, httpx.AsyncClient]:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test")
    return ProfileApiClient(http, access_token=token, timeout=2.5), http


class TestRead:
    @pytest.mark.asyncio
    async def test_returns_fields(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": PAYLOAD})

        api, http = _client(handler)
        async with http:
            result = await api.read("uid-123")

        assert result == ProfileFields(
            uid="uid-123",
            name="Alice",
            email="alice@example.com",
            role="editor",
            bio="hello",
            avatar_url="",
            theme="dark",
        )
        assert seen[0].url.path == "/api/v1/profile"
        assert seen[0].url.params["uid"] == "uid-123"
        assert seen[0].headers["authorization"] == "Bearer token-abc"

    @pytest.mark.asyncio
    async def test_profile_not_found_returns_none(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                404,
                json={
                    "error_code": "PROFILE_NOT_FOUND",
                    "message": "Profile not found: uid-123",
                    "details": {"uid": "uid-123"},
                    "data": None,
                },
            )

        api, http = _client(handler)
        async with http:
            assert await api.read("uid-123") is None

    @pytest.mark.asyncio
    async def test_other_404_is_an_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"error_code": "HTTP_ERROR", "message": "Not Found"})

        api, http = _client(handler)
        async with http:
            with pytest.raises(ProfileApiError) as exc_info:
                await api.read("uid-123")

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_server_error_surfaces_message(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                503,
                json={
                    "error_code": "STORE_UNAVAILABLE",
                    "message": "Profile store is temporarily unavailable",
                },
            )

        api, http = _client(handler)
        async with http:
            with pytest.raises(ProfileApiError) as exc_info:
                await api.read("uid-123")

        assert exc_info.value.message == "Profile store is temporarily unavailable"
        assert exc_info.value.error_code == "STORE_UNAVAILABLE"

    @pytest.mark.asyncio
    async def test_non_json_error_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad Gateway")

        api, http = _client(handler)
        async with http:
            with pytest.raises(ProfileApiError) as exc_info:
                await api.read("uid-123")

        assert "502" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_timeout_becomes_api_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        api, http = _client(handler)
        async with http:
            with pytest.raises(ProfileApiError) as exc_info:
                await api.read("uid-123")

        assert "timed out" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_connection_error_becomes_api_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        api, http = _client(handler)
        async with http:
            with pytest.raises(ProfileApiError) as exc_info:
                await api.read("uid-123")

        assert exc_info.value.status_code == 0

    @pytest.mark.asyncio
    async def test_no_token_sends_no_auth_header(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": PAYLOAD})

        api, http = _client(handler, token=None)
        async with http:
            await api.read("uid-123")

        assert "authorization" not in seen[0].headers


class TestWrite:
    @pytest.mark.asyncio
    async def test_posts_fields_and_returns_merged_record(self):
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "message": "Profile updated successfully",
                    "data": {**PAYLOAD, "bio": "merged by server"},
                },
            )

        api, http = _client(handler)
        fields = ProfileFields(uid="uid-123", name="Alice", role="editor", theme="dark")
        async with http:
            result = await api.write(fields)

        assert seen[0] == {
            "uid": "uid-123",
            "name": "Alice",
            "role": "editor",
            "bio": "",
            "avatar_url": "",
            "preferences": {"theme": "dark"},
        }
        assert result.bio == "merged by server"

    @pytest.mark.asyncio
    async def test_baseline_limits_payload_to_changed_fields(self):
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"success": True, "data": PAYLOAD})

        api, http = _client(handler)
        baseline = ProfileFields(uid="uid-123", name="Alice", role="user", bio="old")
        edited = ProfileFields(uid="uid-123", name="Alice", role="user", bio="new", theme="dark")
        async with http:
            await api.write(edited, baseline=baseline)

        assert seen[0] == {"uid": "uid-123", "bio": "new", "preferences": {"theme": "dark"}}

    @pytest.mark.asyncio
    async def test_rejected_role_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                400,
                json={"error_code": "INVALID_ROLE", "message": "Invalid role value: superuser"},
            )

        api, http = _client(handler)
        async with http:
            with pytest.raises(ProfileApiError) as exc_info:
                await api.write(ProfileFields(uid="uid-123", name="A", role="superuser"))

        assert exc_info.value.error_code == "INVALID_ROLE"
        assert exc_info.value.message == "Invalid role value: superuser"
