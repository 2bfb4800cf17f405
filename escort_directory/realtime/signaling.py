from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any

from .events.messages import publish_typing
from .exceptions import PayloadValidationError
from .serializers import TypingSerializer
from .serializers import validate_payload

if TYPE_CHECKING:  # import for type checking only
    from .emitters import EventSink
    from .registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class TypingSignaler:
    """Forwards typing indicators. Nothing is stored, queued, or acknowledged."""

    def __init__(self, registry: ConnectionRegistry, sink: EventSink) -> None:
        self.registry = registry
        self.sink = sink

    async def typing_start(self, payload: Any) -> bool:
        return await self._forward(payload, typing=True)

    async def typing_stop(self, payload: Any) -> bool:
        return await self._forward(payload, typing=False)

    async def _forward(self, payload: Any, *, typing: bool) -> bool:
        try:
            data = validate_payload(TypingSerializer, payload)
        except PayloadValidationError as exc:
            logger.debug("Dropped typing signal: %s", exc.errors)
            return False

        recipient_sid = self.registry.lookup(data["recipientId"])
        if recipient_sid is None:
            return False
        await publish_typing(self.sink, recipient_sid, data["senderId"], typing=typing)
        return True
