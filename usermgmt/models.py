"""Domain models for the user management backend."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Mapping

from .errors import InvalidAccessLevel


class AccessLevel(str, Enum):
    """Permission tier granted to a user account."""

    READ_ONLY = "read-only"
    FULL = "full"
    LIMITED = "limited"

    @classmethod
    def parse(cls, value: object) -> "AccessLevel":
        """Return the matching member or raise :class:`InvalidAccessLevel`."""

        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value == value:
                return member
        raise InvalidAccessLevel(value)


class UserState(str, Enum):
    """Whether the user has accepted their invitation."""

    ACTIVE = "active"
    INVITED = "invited"


@dataclass
class UserRecord:
    """A single user account held by the directory."""

    email: str
    access_level: AccessLevel
    state: UserState = UserState.INVITED

    def copy(self) -> "UserRecord":
        return replace(self)

    def to_dict(self) -> Dict[str, str]:
        return {
            "email": self.email,
            "accessLevel": self.access_level.value,
            "state": self.state.value,
        }

    @staticmethod
    def from_dict(data: Mapping[str, object]) -> "UserRecord":
        """Create a :class:`UserRecord` from its wire representation."""

        email = data.get("email")
        if not isinstance(email, str) or not email:
            raise ValueError("User records require a non-empty email")
        access_level = AccessLevel.parse(data.get("accessLevel"))
        raw_state = data.get("state", UserState.INVITED.value)
        try:
            state = UserState(raw_state)
        except ValueError as exc:
            raise ValueError(f"Unknown user state {raw_state!r} for {email}") from exc
        return UserRecord(email=email, access_level=access_level, state=state)


def default_seed() -> List[UserRecord]:
    """Return the fixture users a fresh directory starts with."""

    return [
        UserRecord("czerwin@scalyr.com", AccessLevel.FULL, UserState.ACTIVE),
        UserRecord("asma@scalyr.com", AccessLevel.FULL, UserState.ACTIVE),
        UserRecord("jeff@scalyr.com", AccessLevel.FULL, UserState.INVITED),
        UserRecord("claudia@scalyr.com", AccessLevel.READ_ONLY, UserState.ACTIVE),
        UserRecord("steve@scalyr.com", AccessLevel.LIMITED, UserState.INVITED),
    ]


__all__ = ["AccessLevel", "UserState", "UserRecord", "default_seed"]
