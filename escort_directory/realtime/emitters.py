from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any
from typing import Protocol

if TYPE_CHECKING:  # import for type checking only
    import socketio

logger = logging.getLogger(__name__)


class EventSink(Protocol):
    """Outbound side of the transport as seen by the realtime core."""

    async def send_to(self, sid: str, event: str, payload: dict[str, Any]) -> None: ...

    async def broadcast(
        self,
        event: str,
        payload: dict[str, Any],
        *,
        skip_sid: str | None = None,
    ) -> None: ...


class SocketIOEventSink:
    """Emits through a python-socketio ``AsyncServer``.

    Delivery is best-effort: transport failures are logged and never retried.
    """

    def __init__(self, sio: socketio.AsyncServer) -> None:
        self.sio = sio

    async def send_to(self, sid: str, event: str, payload: dict[str, Any]) -> None:
        try:
            await self.sio.emit(event, payload, to=sid)
        except Exception:  # noqa: BLE001 - delivery must not break the handler
            logger.warning("Socket.IO emit %s to %s failed", event, sid, exc_info=True)

    async def broadcast(
        self,
        event: str,
        payload: dict[str, Any],
        *,
        skip_sid: str | None = None,
    ) -> None:
        try:
            await self.sio.emit(event, payload, skip_sid=skip_sid)
        except Exception:  # noqa: BLE001 - delivery must not break the handler
            logger.warning("Socket.IO broadcast %s failed", event, exc_info=True)
