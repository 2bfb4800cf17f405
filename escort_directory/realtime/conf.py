from __future__ import annotations

from django.conf import settings


def socketio_path() -> str:
    """Mount path of the Socket.IO endpoint (socket.io-client default)."""

    return str(getattr(settings, "REALTIME_SOCKETIO_PATH", "socket.io")).strip("/")


def cors_allowed_origins() -> list[str] | str:
    origins = getattr(settings, "REALTIME_CORS_ALLOWED_ORIGINS", [])
    if origins == ["*"]:
        return "*"
    return list(origins)


def verify_token() -> bool:
    """Whether `authenticate` must carry a token issued for the claimed user."""

    return bool(getattr(settings, "REALTIME_VERIFY_TOKEN", True))


def send_rate() -> float:
    """Sustained send_message rate per connection, in messages per second."""

    return float(getattr(settings, "REALTIME_SEND_RATE", 5.0))


def send_burst() -> int:
    return int(getattr(settings, "REALTIME_SEND_BURST", 20))


def message_max_length() -> int:
    return int(getattr(settings, "REALTIME_MESSAGE_MAX_LENGTH", 2000))


def reconcile_on_startup() -> bool:
    return bool(getattr(settings, "REALTIME_RECONCILE_ON_STARTUP", True))
