"""Wires the realtime components to Socket.IO events."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING
from typing import Any

from .presence import PresenceCoordinator
from .receipts import ReadReceiptPropagator
from .registry import ConnectionRegistry
from .relay import MessageRelay
from .signaling import TypingSignaler
from .throttling import ThrottledRelay

if TYPE_CHECKING:  # import for type checking only
    import socketio

    from .auth import TokenVerifier
    from .emitters import EventSink
    from .stores import MessageStore
    from .stores import UserPresenceStore

logger = logging.getLogger(__name__)


class ConnectionSequencer:
    """Runs the events of one connection one at a time, in arrival order.

    python-socketio dispatches every event as its own task; holding a
    per-connection ``asyncio.Lock`` (FIFO for waiters) restores ordering.
    Different connections still interleave at store round trips.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    @contextlib.asynccontextmanager
    async def hold(self, sid: str) -> AsyncIterator[None]:
        lock = self._locks.get(sid)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[sid] = lock
        async with lock:
            yield

    def discard(self, sid: str) -> None:
        self._locks.pop(sid, None)

    def __len__(self) -> int:
        return len(self._locks)


class ChatHub:
    def __init__(
        self,
        *,
        registry: ConnectionRegistry,
        presence: PresenceCoordinator,
        relay: ThrottledRelay,
        signaler: TypingSignaler,
        receipts: ReadReceiptPropagator,
        reconcile_on_startup: bool = True,
    ) -> None:
        self.registry = registry
        self.presence = presence
        self.relay = relay
        self.signaler = signaler
        self.receipts = receipts
        self.reconcile_on_startup = reconcile_on_startup
        self.sequencer = ConnectionSequencer()

    @classmethod
    def build(
        cls,
        sink: EventSink,
        *,
        messages: MessageStore,
        users: UserPresenceStore,
        token_verifier: TokenVerifier | None = None,
        send_rate: float = 0,
        send_burst: int = 1,
        max_content_length: int | None = None,
        reconcile_on_startup: bool = True,
        registry: ConnectionRegistry | None = None,
    ) -> ChatHub:
        registry = registry or ConnectionRegistry()
        # A verified connection may only act as the user it authenticated as.
        require_identity = token_verifier is not None
        relay = MessageRelay(
            registry,
            messages,
            sink,
            max_content_length=max_content_length,
            require_identity=require_identity,
        )
        return cls(
            registry=registry,
            presence=PresenceCoordinator(
                registry,
                users,
                sink,
                token_verifier=token_verifier,
            ),
            relay=ThrottledRelay(relay, sink, rate=send_rate, burst=send_burst),
            signaler=TypingSignaler(registry, sink),
            receipts=ReadReceiptPropagator(
                registry,
                messages,
                sink,
                require_identity=require_identity,
            ),
            reconcile_on_startup=reconcile_on_startup,
        )

    def attach(self, sio: socketio.AsyncServer) -> None:
        sio.on("connect", self.on_connect)
        sio.on("disconnect", self.on_disconnect)
        sio.on("authenticate", self.on_authenticate)
        sio.on("send_message", self.on_send_message)
        sio.on("typing_start", self.on_typing_start)
        sio.on("typing_stop", self.on_typing_stop)
        sio.on("mark_read", self.on_mark_read)

    async def startup(self) -> None:
        if self.reconcile_on_startup:
            await self.presence.reconcile()

    async def shutdown(self) -> None:
        await self.presence.shutdown()

    async def on_connect(self, sid: str, environ: dict[str, Any], auth: Any = None) -> None:
        async with self.sequencer.hold(sid):
            await self.presence.connect(sid)

    async def on_disconnect(self, sid: str, reason: Any = None) -> None:
        try:
            async with self.sequencer.hold(sid):
                logger.debug("Connection %s closed (%s)", sid, reason)
                await self.presence.disconnect(sid)
        finally:
            self.relay.forget(sid)
            self.sequencer.discard(sid)

    async def on_authenticate(self, sid: str, data: Any = None) -> None:
        async with self.sequencer.hold(sid):
            await self.presence.authenticate(sid, data)

    async def on_send_message(self, sid: str, data: Any = None) -> None:
        async with self.sequencer.hold(sid):
            await self.relay.send(sid, data)

    async def on_typing_start(self, sid: str, data: Any = None) -> None:
        async with self.sequencer.hold(sid):
            await self.signaler.typing_start(data)

    async def on_typing_stop(self, sid: str, data: Any = None) -> None:
        async with self.sequencer.hold(sid):
            await self.signaler.typing_stop(data)

    async def on_mark_read(self, sid: str, data: Any = None) -> None:
        async with self.sequencer.hold(sid):
            await self.receipts.mark_read(data, sid=sid)
