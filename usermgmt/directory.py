"""In-memory user directory backing the management API."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Set

from .errors import UserAlreadyExists, UserNotFound
from .models import AccessLevel, UserRecord, UserState, default_seed

logger = logging.getLogger("usermgmt.directory")

SUCCESS_STATUS = "success"


def _success(**payload: object) -> Dict[str, object]:
    return {"status": SUCCESS_STATUS, **payload}


class UserDirectory:
    """Authoritative registry of user records and the sole mutation point.

    Every public operation is a coroutine so the directory can stand in for a
    remote API. Validation and mutation happen without awaiting in between,
    which keeps each operation atomic on a single event loop. Failures are
    raised as :class:`~usermgmt.errors.DirectoryError` subclasses.
    """

    def __init__(self, users: Optional[Iterable[UserRecord]] = None) -> None:
        self._users: List[UserRecord] = []
        for user in default_seed() if users is None else users:
            if self._find_user(user.email) is not None:
                raise UserAlreadyExists(user.email)
            self._users.append(user.copy())

    def __len__(self) -> int:
        return len(self._users)

    async def list_users(self) -> Dict[str, object]:
        """Return copies of all records in insertion order."""

        return _success(users=[user.copy() for user in self._users])

    async def invite_users(
        self,
        emails: Sequence[str],
        access_level: AccessLevel | str,
    ) -> Dict[str, object]:
        """Add each email as an invited user, or none of them on failure."""

        if isinstance(emails, str):
            raise TypeError("emails must be a sequence of addresses, not a single string")
        level = AccessLevel.parse(access_level)
        batch = list(emails)

        seen: Set[str] = set()
        for email in batch:
            if email in seen or self._find_user(email) is not None:
                raise UserAlreadyExists(email)
            seen.add(email)

        for email in batch:
            self._users.append(UserRecord(email=email, access_level=level, state=UserState.INVITED))

        logger.info("Invited %d user(s) with %s access", len(batch), level.value)
        return _success()

    async def resend_invite(self, email: str) -> Dict[str, object]:
        """Acknowledge a request to resend the invitation email."""

        self._require_user(email)
        logger.info("Resent invitation to %s", email)
        return _success()

    async def revoke_access(self, email: str) -> Dict[str, object]:
        """Remove the user regardless of whether they are active or invited."""

        user = self._require_user(email)
        self._users.remove(user)
        logger.info("Revoked access for %s", email)
        return _success()

    async def mark_as_active(self, email: str) -> Dict[str, object]:
        """Flag an invited user as having accepted the invitation.

        Intended for tests and seeding; administrators never call this.
        """

        user = self._require_user(email)
        user.state = UserState.ACTIVE
        logger.info("Marked %s as active", email)
        return _success()

    def _find_user(self, email: str) -> Optional[UserRecord]:
        for user in self._users:
            if user.email == email:
                return user
        return None

    def _require_user(self, email: str) -> UserRecord:
        user = self._find_user(email)
        if user is None:
            raise UserNotFound(email)
        return user


__all__ = ["UserDirectory", "SUCCESS_STATUS"]
