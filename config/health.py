"""Liveness probe for the API process.

Only the database is checked; the Socket.IO endpoint is served by the same
process and has no separate probe.
"""

from __future__ import annotations

from django.db import connection
from django.http import JsonResponse


def database_status() -> dict[str, object]:
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1;")
    except Exception as exc:  # noqa: BLE001 - a failing probe reports, never raises
        return {"ok": False, "error": str(exc)}
    return {"ok": True}


def health(request):
    components = {"db": database_status()}
    healthy = all(component["ok"] for component in components.values())
    return JsonResponse(
        {"status": "ok" if healthy else "down", "components": components},
        status=200 if healthy else 503,
    )
