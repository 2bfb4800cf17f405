from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any

from .events.messages import publish_message_error
from .events.messages import publish_message_sent
from .events.messages import publish_new_message
from .exceptions import PayloadValidationError
from .exceptions import PersistenceError
from .registry import normalize_user_id
from .serializers import SendMessageSerializer
from .serializers import validate_payload

if TYPE_CHECKING:  # import for type checking only
    from .emitters import EventSink
    from .registry import ConnectionRegistry
    from .stores import MessageStore
    from .stores import StoredMessage

logger = logging.getLogger(__name__)

SEND_FAILED = "Failed to send message"
INVALID_MESSAGE = "Invalid message payload"
SENDER_MISMATCH = "Sender does not match authenticated user"


class MessageRelay:
    """Persists a chat message, then forwards it to the recipient if online.

    The store write is awaited before anything is emitted, so a client that
    sees ``new_message`` or ``message_sent`` can always fetch the message
    again through the REST history endpoints.

    With ``require_identity`` the ``senderId`` must be the user the sending
    connection authenticated as.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        messages: MessageStore,
        sink: EventSink,
        *,
        max_content_length: int | None = None,
        require_identity: bool = False,
    ) -> None:
        self.registry = registry
        self.messages = messages
        self.sink = sink
        self.max_content_length = max_content_length
        self.require_identity = require_identity

    async def send(self, sid: str, payload: Any) -> StoredMessage | None:
        try:
            data = validate_payload(
                SendMessageSerializer,
                payload,
                max_content_length=self.max_content_length,
            )
        except PayloadValidationError as exc:
            logger.info("Rejected send_message from %s: %s", sid, exc.errors)
            await publish_message_error(self.sink, sid, INVALID_MESSAGE, exc.errors)
            return None

        sender_id = normalize_user_id(data["senderId"])
        recipient_id = normalize_user_id(data["recipientId"])
        if self.require_identity and self.registry.user_for_handle(sid) != sender_id:
            logger.warning(
                "Rejected send_message from %s: sender %s is not the authenticated user",
                sid,
                sender_id,
            )
            await publish_message_error(self.sink, sid, SENDER_MISMATCH)
            return None

        try:
            message = await self.messages.create(
                sender_id=sender_id,
                recipient_id=recipient_id,
                content=data["content"],
                message_type=data["type"],
                media_url=data.get("mediaUrl") or "",
                client_id=data.get("messageId") or "",
            )
        except PersistenceError:
            logger.exception("Failed to store message from %s to %s", sender_id, recipient_id)
            await publish_message_error(self.sink, sid, SEND_FAILED)
            return None

        recipient_sid = self.registry.lookup(recipient_id)
        if recipient_sid is not None:
            await publish_new_message(self.sink, recipient_sid, message)
        else:
            logger.debug(
                "Recipient %s offline; message %s left for history fetch",
                recipient_id,
                message.id,
            )

        await publish_message_sent(self.sink, sid, message)
        return message
