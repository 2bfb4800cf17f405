"""Presence coordinator.

Per connection: ``Connected(anonymous) -> Authenticated(user) -> Disconnected``.
The registry is authoritative for routing; the durable ``is_online`` flag is
advisory and written best-effort.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING
from typing import Any

from django.utils import timezone

from .events.presence import publish_auth_error
from .events.presence import publish_user_offline
from .events.presence import publish_user_online
from .exceptions import PayloadValidationError
from .exceptions import PersistenceError
from .exceptions import TokenVerificationError
from .registry import normalize_user_id
from .serializers import AuthenticateSerializer
from .serializers import validate_payload

if TYPE_CHECKING:  # import for type checking only
    from .auth import TokenVerifier
    from .emitters import EventSink
    from .registry import ConnectionRegistry
    from .stores import UserPresenceStore

logger = logging.getLogger(__name__)


class PresenceCoordinator:
    def __init__(
        self,
        registry: ConnectionRegistry,
        users: UserPresenceStore,
        sink: EventSink,
        *,
        token_verifier: TokenVerifier | None = None,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self.registry = registry
        self.users = users
        self.sink = sink
        self.token_verifier = token_verifier
        self._clock = clock

    async def connect(self, sid: str) -> None:
        logger.debug("Connection %s opened (anonymous)", sid)

    async def authenticate(self, sid: str, payload: Any) -> str | None:
        """Register ``sid`` for the user named in ``payload``.

        Returns the registered user id, or ``None`` when the payload or token
        was rejected (an ``auth_error`` is sent back in that case).
        """

        try:
            data = validate_payload(AuthenticateSerializer, payload)
        except PayloadValidationError as exc:
            logger.info("Rejected authenticate from %s: %s", sid, exc.errors)
            await publish_auth_error(self.sink, sid, "invalid_payload")
            return None

        user_id = normalize_user_id(data["userId"])
        if self.token_verifier is not None:
            try:
                self.token_verifier.verify(data["token"], user_id)
            except TokenVerificationError as exc:
                logger.warning(
                    "Token rejected for user %s on %s: %s",
                    user_id,
                    sid,
                    exc.message,
                )
                await publish_auth_error(self.sink, sid, exc.message)
                return None

        # One connection maps to at most one user.
        previous_user = self.registry.unregister_by_handle(sid)
        if previous_user is not None and previous_user != user_id:
            logger.info("Connection %s switched from %s to %s", sid, previous_user, user_id)
            await self._go_offline(sid, previous_user)

        displaced = self.registry.register(user_id, sid)
        if displaced is not None and displaced.sid != sid:
            logger.info(
                "User %s connected again; %s replaces %s",
                user_id,
                sid,
                displaced.sid,
            )

        await self._persist(user_id, is_online=True)
        await publish_user_online(self.sink, user_id, skip_sid=sid)
        logger.info("User %s is now online", user_id)
        return user_id

    async def disconnect(self, sid: str) -> str | None:
        user_id = self.registry.unregister_by_handle(sid)
        if user_id is None:
            logger.debug("Connection %s closed before authenticating", sid)
            return None
        await self._go_offline(sid, user_id)
        return user_id

    async def reconcile(self) -> int:
        """Clear durable online flags for users without a live connection.

        Run at startup: the registry starts empty after a restart, so every
        stored ``is_online=True`` is stale.
        """

        keep_online = [entry.user_id for entry in self.registry.entries()]
        try:
            count = await self.users.mark_all_offline(keep_online)
        except PersistenceError:
            logger.exception("Presence reconciliation failed")
            return 0
        logger.info("Presence reconciliation marked %s user(s) offline", count)
        return count

    async def shutdown(self) -> None:
        for entry in self.registry.entries():
            self.registry.unregister_by_handle(entry.sid)
            await self._persist(entry.user_id, is_online=False)
        logger.info("Presence coordinator stopped")

    async def _go_offline(self, sid: str, user_id: str) -> None:
        await self._persist(user_id, is_online=False)
        await publish_user_offline(self.sink, user_id, skip_sid=sid)
        logger.info("User %s is now offline", user_id)

    async def _persist(self, user_id: str, *, is_online: bool) -> None:
        try:
            updated = await self.users.update_presence(
                user_id,
                is_online=is_online,
                last_active=self._clock(),
            )
        except PersistenceError:
            logger.exception("Could not store presence for user %s", user_id)
            return
        if not updated:
            logger.warning("Presence update matched no user row for %s", user_id)
