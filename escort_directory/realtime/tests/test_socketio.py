from unittest.mock import AsyncMock

import pytest
import socketio

from escort_directory.realtime import conf
from escort_directory.realtime.auth import JWTTokenVerifier
from escort_directory.realtime.emitters import SocketIOEventSink
from escort_directory.realtime.socketio import build_hub
from escort_directory.realtime.socketio import create_asgi_app
from escort_directory.realtime.socketio import create_sio
from escort_directory.realtime.stores import DjangoMessageStore


def test_asgi_app_wraps_django():
    async def django_app(scope, receive, send):
        pass

    app = create_asgi_app(django_app)

    assert isinstance(app, socketio.ASGIApp)
    assert app.other_asgi_app is django_app


def test_build_hub_uses_settings(settings):
    settings.REALTIME_VERIFY_TOKEN = True
    settings.REALTIME_SEND_RATE = 2.0
    settings.REALTIME_SEND_BURST = 4

    hub = build_hub(create_sio())

    assert isinstance(hub.presence.token_verifier, JWTTokenVerifier)
    assert isinstance(hub.relay.relay.messages, DjangoMessageStore)
    assert hub.relay.enabled is True
    assert hub.relay.burst == 4


def test_token_verification_can_be_turned_off(settings):
    settings.REALTIME_VERIFY_TOKEN = False

    hub = build_hub(create_sio())

    assert hub.presence.token_verifier is None


def test_wildcard_cors_setting(settings):
    settings.REALTIME_CORS_ALLOWED_ORIGINS = ["*"]
    assert conf.cors_allowed_origins() == "*"

    settings.REALTIME_CORS_ALLOWED_ORIGINS = ["https://app.example.com"]
    assert conf.cors_allowed_origins() == ["https://app.example.com"]


def test_socketio_path_is_trimmed(settings):
    settings.REALTIME_SOCKETIO_PATH = "/realtime/"
    assert conf.socketio_path() == "realtime"


@pytest.mark.asyncio
async def test_sink_targets_one_connection():
    sio = AsyncMock()
    sink = SocketIOEventSink(sio)

    await sink.send_to("s1", "auth_error", {"error": "unauthorized"})
    await sink.broadcast("user_online", {"userId": "7"}, skip_sid="s1")

    sio.emit.assert_any_await("auth_error", {"error": "unauthorized"}, to="s1")
    sio.emit.assert_any_await("user_online", {"userId": "7"}, skip_sid="s1")


@pytest.mark.asyncio
async def test_sink_swallows_transport_errors():
    sio = AsyncMock()
    sio.emit.side_effect = ConnectionError("gone")
    sink = SocketIOEventSink(sio)

    await sink.send_to("s1", "new_message", {})
    await sink.broadcast("user_offline", {"userId": "7"})
