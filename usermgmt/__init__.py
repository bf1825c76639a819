"""Mock backend for the user management front-end exercise."""

from __future__ import annotations

from typing import Any

from .directory import UserDirectory
from .errors import (
    DirectoryError,
    InvalidAccessLevel,
    UserAlreadyExists,
    UserNotFound,
)
from .models import AccessLevel, UserRecord, UserState


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the HTTP application."""

    from .service import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "AccessLevel",
    "UserState",
    "UserRecord",
    "UserDirectory",
    "DirectoryError",
    "InvalidAccessLevel",
    "UserAlreadyExists",
    "UserNotFound",
    "create_app",
]
