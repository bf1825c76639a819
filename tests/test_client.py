from __future__ import annotations

import asyncio

import httpx
import pytest

from usermgmt.client import RemoteUserDirectory
from usermgmt.directory import UserDirectory
from usermgmt.errors import InvalidAccessLevel, RemoteDirectoryError, UserAlreadyExists, UserNotFound
from usermgmt.models import AccessLevel, UserRecord, UserState
from usermgmt.service import create_app


def _run(directory: UserDirectory, scenario):
    app = create_app(directory=directory, include_test_routes=True)

    async def runner():
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport) as http_client:
            remote = RemoteUserDirectory("http://testserver/", client=http_client)
            return await scenario(remote)

    return asyncio.run(runner())


def test_remote_listing_matches_local_directory() -> None:
    directory = UserDirectory()

    async def scenario(remote: RemoteUserDirectory):
        return await remote.list_users(), await directory.list_users()

    remote_result, local_result = _run(directory, scenario)

    assert remote_result["status"] == "success"
    assert remote_result["users"] == local_result["users"]


def test_remote_mutations_reach_directory() -> None:
    directory = UserDirectory()

    async def scenario(remote: RemoteUserDirectory):
        results = [
            await remote.invite_users(["new@x.com"], AccessLevel.READ_ONLY),
            await remote.resend_invite("new@x.com"),
            await remote.mark_as_active("new@x.com"),
            await remote.revoke_access("czerwin@scalyr.com"),
        ]
        listing = await remote.list_users()
        return results, listing["users"]

    results, users = _run(directory, scenario)

    assert results == [{"status": "success"}] * 4
    assert len(users) == 5
    assert UserRecord("new@x.com", AccessLevel.READ_ONLY, UserState.ACTIVE) in users
    assert all(user.email != "czerwin@scalyr.com" for user in users)


@pytest.mark.parametrize(
    ("operation", "expected"),
    [
        (lambda remote: remote.invite_users(["jeff@scalyr.com"], "full"), UserAlreadyExists),
        (lambda remote: remote.invite_users(["new@x.com"], "root"), InvalidAccessLevel),
        (lambda remote: remote.resend_invite("ghost@x.com"), UserNotFound),
        (lambda remote: remote.revoke_access("ghost@x.com"), UserNotFound),
        (lambda remote: remote.mark_as_active("ghost@x.com"), UserNotFound),
    ],
)
def test_remote_failures_raise_directory_errors(operation, expected) -> None:
    async def scenario(remote: RemoteUserDirectory):
        await operation(remote)

    with pytest.raises(expected):
        _run(UserDirectory(), scenario)


def test_remote_failure_keeps_server_message() -> None:
    async def scenario(remote: RemoteUserDirectory):
        await remote.revoke_access("ghost@x.com")

    with pytest.raises(UserNotFound) as excinfo:
        _run(UserDirectory(), scenario)

    assert excinfo.value.message == 'The specified user "ghost@x.com" does not exists.'


def test_unexpected_payload_raises_remote_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="Bad Gateway")

    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            remote = RemoteUserDirectory("http://backend", client=http_client)
            await remote.list_users()

    with pytest.raises(RemoteDirectoryError):
        asyncio.run(scenario())


def test_owned_client_is_closed() -> None:
    async def scenario():
        remote = RemoteUserDirectory("http://backend")
        client = remote._http_client()
        await remote.aclose()
        return client

    client = asyncio.run(scenario())
    assert client.is_closed


def test_remote_null_access_level_matches_local_directory() -> None:
    async def scenario(remote: RemoteUserDirectory):
        await remote.invite_users(["n@x.com"], None)  # type: ignore[arg-type]

    with pytest.raises(InvalidAccessLevel) as remote_error:
        _run(UserDirectory(), scenario)
    with pytest.raises(InvalidAccessLevel) as local_error:
        asyncio.run(UserDirectory().invite_users(["n@x.com"], None))  # type: ignore[arg-type]

    assert remote_error.value.message == local_error.value.message


@pytest.mark.parametrize(
    "user",
    [
        {"email": "a@x.com", "accessLevel": "root", "state": "active"},
        {"email": "a@x.com", "accessLevel": "full", "state": "pending"},
        {"accessLevel": "full", "state": "active"},
        "a@x.com",
    ],
)
def test_malformed_listing_raises_remote_error(user) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": "success", "users": [user]})

    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            remote = RemoteUserDirectory("http://backend", client=http_client)
            await remote.list_users()

    with pytest.raises(RemoteDirectoryError):
        asyncio.run(scenario())


def test_remote_invite_rejects_bare_string() -> None:
    remote = RemoteUserDirectory("http://backend")

    with pytest.raises(TypeError):
        asyncio.run(remote.invite_users("a@x.com", "full"))
