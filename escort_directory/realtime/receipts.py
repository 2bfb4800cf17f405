from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING
from typing import Any

from django.utils import timezone

from .events.messages import publish_message_read
from .exceptions import PayloadValidationError
from .exceptions import PersistenceError
from .registry import normalize_user_id
from .serializers import MarkReadSerializer
from .serializers import validate_payload

if TYPE_CHECKING:  # import for type checking only
    from .emitters import EventSink
    from .registry import ConnectionRegistry
    from .stores import MessageStore

logger = logging.getLogger(__name__)


class ReadReceiptPropagator:
    """Marks a message read and tells the original sender.

    ``read_at`` keeps the time of the first read: the store only flips an
    unread row, so concurrent readers cannot overwrite it. Repeated calls
    still notify the sender.

    With ``require_identity`` the ``readerId`` must be the user the calling
    connection authenticated as.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        messages: MessageStore,
        sink: EventSink,
        *,
        clock: Callable[[], datetime] = timezone.now,
        require_identity: bool = False,
    ) -> None:
        self.registry = registry
        self.messages = messages
        self.sink = sink
        self.require_identity = require_identity
        self._clock = clock

    async def mark_read(self, payload: Any, *, sid: str | None = None) -> None:
        try:
            data = validate_payload(MarkReadSerializer, payload)
        except PayloadValidationError as exc:
            logger.debug("Dropped mark_read: %s", exc.errors)
            return

        message_id = data["messageId"]
        reader_id = normalize_user_id(data["readerId"])
        if self.require_identity and self.registry.user_for_handle(sid) != reader_id:
            logger.warning(
                "Dropped mark_read from %s: reader %s is not the authenticated user",
                sid,
                reader_id,
            )
            return

        try:
            message = await self.messages.find_by_id(message_id)
            if message is None:
                logger.info("mark_read for unknown message %s ignored", message_id)
                return
            if not message.is_read:
                await self.messages.mark_read(message.id, self._clock())
        except PersistenceError:
            logger.exception("Failed to mark message %s read", message_id)
            return

        if message.sender_id == reader_id:
            return
        sender_sid = self.registry.lookup(message.sender_id)
        if sender_sid is not None:
            await publish_message_read(self.sink, sender_sid, message.id)
