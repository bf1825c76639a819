"""HTTP client that mirrors the :class:`~usermgmt.directory.UserDirectory` API."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

import httpx

from .directory import SUCCESS_STATUS
from .errors import DirectoryError, RemoteDirectoryError, error_from_response
from .models import AccessLevel, UserRecord

logger = logging.getLogger("usermgmt.client")


class RemoteUserDirectory:
    """Talk to a running user management service over HTTP.

    The coroutines return the same success envelopes and raise the same
    exceptions as the in-memory directory, so callers can switch between the
    two without changes. Transport failures surface as :class:`httpx.HTTPError`.
    """

    def __init__(
        self,
        base_url: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self) -> "RemoteUserDirectory":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def list_users(self) -> Dict[str, object]:
        payload = await self._request("GET", "/v1/users")
        users_raw = payload.get("users")
        if not isinstance(users_raw, list):
            raise RemoteDirectoryError("Service returned a user listing without users")
        try:
            users = [UserRecord.from_dict(item) for item in users_raw]
        except (ValueError, AttributeError, DirectoryError) as exc:
            raise RemoteDirectoryError(f"Service returned a malformed user record: {exc}") from exc
        return {**payload, "users": users}

    async def invite_users(
        self,
        emails: Sequence[str],
        access_level: AccessLevel | str,
    ) -> Dict[str, object]:
        if isinstance(emails, str):
            raise TypeError("emails must be a sequence of addresses, not a single string")
        level = access_level.value if isinstance(access_level, AccessLevel) else access_level
        return await self._request(
            "POST",
            "/v1/users/invite",
            json={"emails": list(emails), "accessLevel": level},
        )

    async def resend_invite(self, email: str) -> Dict[str, object]:
        return await self._request("POST", "/v1/users/resend-invite", json={"email": email})

    async def revoke_access(self, email: str) -> Dict[str, object]:
        return await self._request("POST", "/v1/users/revoke", json={"email": email})

    async def mark_as_active(self, email: str) -> Dict[str, object]:
        return await self._request("POST", "/v1/users/mark-active", json={"email": email})

    def _http_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, object]:
        url = self._base_url + path
        response = await self._http_client().request(method, url, **kwargs)

        try:
            payload = response.json()
        except ValueError as exc:
            raise RemoteDirectoryError(
                f"Service responded with {response.status_code}: {response.text.strip()}"
            ) from exc

        if not isinstance(payload, dict) or "status" not in payload:
            raise RemoteDirectoryError(f"Service responded with {response.status_code} and no status")

        if payload["status"] == SUCCESS_STATUS:
            return payload

        error = error_from_response(payload)
        logger.debug("%s %s failed with %s", method, url, error.code)
        raise error


__all__ = ["RemoteUserDirectory"]
