"""Socket.IO server for the React frontend.

The frontend uses `socket.io-client` with:
- server URL: the API origin
- `path`: /socket.io/ (configurable through REALTIME_SOCKETIO_PATH)
- an `authenticate { token, userId }` event right after connecting

Connections are anonymous until they authenticate; see
:class:`~escort_directory.realtime.presence.PresenceCoordinator`.
"""

from __future__ import annotations

from typing import Any

import socketio

from . import conf
from .auth import JWTTokenVerifier
from .emitters import SocketIOEventSink
from .hub import ChatHub
from .stores import DjangoMessageStore
from .stores import DjangoUserPresenceStore


def create_sio() -> socketio.AsyncServer:
    return socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=conf.cors_allowed_origins(),
        logger=False,
        engineio_logger=False,
    )


def build_hub(sio: socketio.AsyncServer) -> ChatHub:
    """Build a hub backed by the Django stores and attach it to ``sio``."""

    hub = ChatHub.build(
        SocketIOEventSink(sio),
        messages=DjangoMessageStore(),
        users=DjangoUserPresenceStore(),
        token_verifier=JWTTokenVerifier() if conf.verify_token() else None,
        send_rate=conf.send_rate(),
        send_burst=conf.send_burst(),
        max_content_length=conf.message_max_length(),
        reconcile_on_startup=conf.reconcile_on_startup(),
    )
    hub.attach(sio)
    return hub


def create_asgi_app(other_asgi_app: Any = None) -> socketio.ASGIApp:
    """Socket.IO in front of ``other_asgi_app`` (the Django ASGI handler).

    Presence reconciliation runs on ASGI lifespan startup and registered
    users are marked offline on shutdown.
    """

    sio = create_sio()
    hub = build_hub(sio)
    return socketio.ASGIApp(
        sio,
        other_asgi_app=other_asgi_app,
        socketio_path=conf.socketio_path(),
        on_startup=hub.startup,
        on_shutdown=hub.shutdown,
    )
