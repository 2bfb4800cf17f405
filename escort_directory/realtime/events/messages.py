from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any

if TYPE_CHECKING:  # import for type checking only
    from escort_directory.realtime.emitters import EventSink
    from escort_directory.realtime.stores import StoredMessage

NEW_MESSAGE = "new_message"
MESSAGE_SENT = "message_sent"
MESSAGE_ERROR = "message_error"
MESSAGE_READ = "message_read"
USER_TYPING = "user_typing"
USER_STOPPED_TYPING = "user_stopped_typing"


def build_message_payload(message: StoredMessage) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "_id": message.id,
        "sender": message.sender_id,
        "recipient": message.recipient_id,
        "content": message.content,
        "type": message.message_type,
        "createdAt": message.created_at.isoformat(),
        "isRead": message.is_read,
    }
    if message.media_url:
        payload["mediaUrl"] = message.media_url
    if message.client_id:
        payload["clientMessageId"] = message.client_id
    return payload


async def publish_new_message(sink: EventSink, sid: str, message: StoredMessage) -> None:
    """Deliver a persisted message to the recipient's connection."""

    await sink.send_to(sid, NEW_MESSAGE, {"message": build_message_payload(message)})


async def publish_message_sent(sink: EventSink, sid: str, message: StoredMessage) -> None:
    payload: dict[str, Any] = {"messageId": message.id, "success": True}
    if message.client_id:
        payload["clientMessageId"] = message.client_id
    await sink.send_to(sid, MESSAGE_SENT, payload)


async def publish_message_error(
    sink: EventSink,
    sid: str,
    error: str,
    details: dict[str, list[str]] | None = None,
) -> None:
    payload: dict[str, Any] = {"error": error}
    if details:
        payload["details"] = details
    await sink.send_to(sid, MESSAGE_ERROR, payload)


async def publish_message_read(sink: EventSink, sid: str, message_id: str) -> None:
    await sink.send_to(sid, MESSAGE_READ, {"messageId": message_id})


async def publish_typing(
    sink: EventSink,
    sid: str,
    sender_id: str,
    *,
    typing: bool,
) -> None:
    event = USER_TYPING if typing else USER_STOPPED_TYPING
    await sink.send_to(sid, event, {"senderId": sender_id})
