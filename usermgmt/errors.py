"""Error taxonomy shared by the directory, the HTTP service and the client."""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Type


class DirectoryError(Exception):
    """Base class for failures reported by a user directory."""

    code = "error"
    http_status = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_response(self) -> Dict[str, str]:
        return {"status": self.code, "message": self.message}


class InvalidAccessLevel(DirectoryError):
    """Raised when an access level outside the known tiers is requested."""

    code = "invalidAccess"
    http_status = 400

    def __init__(self, access_level: object, message: Optional[str] = None) -> None:
        self.access_level = access_level
        super().__init__(message or f'The specified accessLevel "{access_level}" is not valid.')


class UserAlreadyExists(DirectoryError):
    """Raised when an invite names an email that is already registered."""

    code = "userExists"
    http_status = 409

    def __init__(self, email: str, message: Optional[str] = None) -> None:
        self.email = email
        super().__init__(message or f'The specified user "{email}" already exists.')


class UserNotFound(DirectoryError):
    """Raised when an operation targets an email that is not registered."""

    code = "userNotExists"
    http_status = 404

    def __init__(self, email: str, message: Optional[str] = None) -> None:
        self.email = email
        super().__init__(message or f'The specified user "{email}" does not exists.')


class RemoteDirectoryError(DirectoryError):
    """Raised when a remote backend answers with an unrecognised payload."""

    code = "remoteError"
    http_status = 502


_ERRORS_BY_CODE: Dict[str, Type[DirectoryError]] = {
    InvalidAccessLevel.code: InvalidAccessLevel,
    UserAlreadyExists.code: UserAlreadyExists,
    UserNotFound.code: UserNotFound,
}


def error_from_response(payload: Mapping[str, object]) -> DirectoryError:
    """Rebuild the exception described by a failure envelope."""

    code = str(payload.get("status", ""))
    message = str(payload.get("message", ""))
    error_cls = _ERRORS_BY_CODE.get(code)
    if error_cls is None:
        return RemoteDirectoryError(message or f"Unexpected response status {code!r}")
    # The subject of the error is not part of the envelope.
    return error_cls(None, message)  # type: ignore[arg-type]


__all__ = [
    "DirectoryError",
    "InvalidAccessLevel",
    "UserAlreadyExists",
    "UserNotFound",
    "RemoteDirectoryError",
    "error_from_response",
]
