"""Per-connection token bucket in front of the message relay."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING
from typing import Any

from .events.messages import publish_message_error
from .exceptions import RateLimitExceeded

if TYPE_CHECKING:  # import for type checking only
    from .emitters import EventSink
    from .relay import MessageRelay
    from .stores import StoredMessage

logger = logging.getLogger(__name__)


class TokenBucket:
    def __init__(
        self,
        rate: float,
        capacity: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.rate = rate
        self.capacity = capacity
        self._clock = clock
        self.tokens = capacity
        self.updated_at = clock()

    def consume(self, amount: float = 1.0) -> bool:
        now = self._clock()
        elapsed = max(0.0, now - self.updated_at)
        self.tokens = min(self.capacity, self.tokens + elapsed * self.rate)
        self.updated_at = now
        if self.tokens < amount:
            return False
        self.tokens -= amount
        return True


class ThrottledRelay:
    """Wraps :class:`MessageRelay` with one bucket per sending connection.

    A ``rate`` of 0 (or less) disables throttling.
    """

    def __init__(
        self,
        relay: MessageRelay,
        sink: EventSink,
        *,
        rate: float,
        burst: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.relay = relay
        self.sink = sink
        self.rate = rate
        self.burst = max(1, burst)
        self._clock = clock
        self._buckets: dict[str, TokenBucket] = {}

    @property
    def enabled(self) -> bool:
        return self.rate > 0

    async def send(self, sid: str, payload: Any) -> StoredMessage | None:
        if self.enabled:
            bucket = self._buckets.get(sid)
            if bucket is None:
                bucket = TokenBucket(self.rate, self.burst, clock=self._clock)
                self._buckets[sid] = bucket
            if not bucket.consume():
                logger.warning("send_message rate limit hit on %s", sid)
                await publish_message_error(
                    self.sink,
                    sid,
                    RateLimitExceeded.default_message,
                )
                return None
        return await self.relay.send(sid, payload)

    def forget(self, sid: str) -> None:
        self._buckets.pop(sid, None)
