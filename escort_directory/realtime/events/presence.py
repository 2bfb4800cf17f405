from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # import for type checking only
    from escort_directory.realtime.emitters import EventSink

USER_ONLINE = "user_online"
USER_OFFLINE = "user_offline"
AUTH_ERROR = "auth_error"


async def publish_user_online(sink: EventSink, user_id: str, *, skip_sid: str) -> None:
    """Tell every other connection that ``user_id`` came online."""

    await sink.broadcast(USER_ONLINE, {"userId": user_id}, skip_sid=skip_sid)


async def publish_user_offline(sink: EventSink, user_id: str, *, skip_sid: str) -> None:
    await sink.broadcast(USER_OFFLINE, {"userId": user_id}, skip_sid=skip_sid)


async def publish_auth_error(sink: EventSink, sid: str, error: str) -> None:
    await sink.send_to(sid, AUTH_ERROR, {"error": error})
