"""In-process map of online users to their live Socket.IO connection."""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from django.utils import timezone

logger = logging.getLogger(__name__)


class RegisterPolicy(enum.Enum):
    """What happens when a user authenticates while already registered.

    Only ``REPLACE`` exists: the newest connection wins and the older one is
    forgotten. Multi-tab / multi-device presence is not tracked.
    """

    REPLACE = "replace"


@dataclass(frozen=True)
class ConnectionEntry:
    user_id: str
    sid: str
    connected_at: datetime
    is_online: bool = True


def normalize_user_id(value: Any) -> str:
    return str(value).strip()


class ConnectionRegistry:
    """Maps a durable user id to exactly one connection handle (``sid``).

    An entry exists iff the user is considered online. Access happens on the
    event loop thread only, so no locking is done here.
    """

    def __init__(
        self,
        policy: RegisterPolicy = RegisterPolicy.REPLACE,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self.policy = policy
        self._clock = clock
        self._entries: dict[str, ConnectionEntry] = {}

    def register(self, user_id: Any, sid: str) -> ConnectionEntry | None:
        """Insert or overwrite the entry for ``user_id``.

        Returns the entry that was displaced, if any.
        """

        key = normalize_user_id(user_id)
        previous = self._entries.get(key)
        self._entries[key] = ConnectionEntry(
            user_id=key,
            sid=sid,
            connected_at=self._clock(),
        )
        if previous is not None and previous.sid != sid:
            logger.debug(
                "Registry %s policy: %s moved from %s to %s",
                self.policy.value,
                key,
                previous.sid,
                sid,
            )
        return previous

    def unregister_by_handle(self, sid: str) -> str | None:
        for user_id, entry in self._entries.items():
            if entry.sid == sid:
                del self._entries[user_id]
                return user_id
        return None

    def user_for_handle(self, sid: str) -> str | None:
        for user_id, entry in self._entries.items():
            if entry.sid == sid:
                return user_id
        return None

    def lookup(self, user_id: Any) -> str | None:
        entry = self._entries.get(normalize_user_id(user_id))
        return entry.sid if entry is not None else None

    def size(self) -> int:
        return len(self._entries)

    def entries(self) -> tuple[ConnectionEntry, ...]:
        """Read-only snapshot of the current entries."""

        return tuple(self._entries.values())
