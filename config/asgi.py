"""
ASGI config for escort_directory project.

It exposes the ASGI callable as a module-level variable named ``application``.

For more information on this file, see
https://docs.djangoproject.com/en/dev/howto/deployment/asgi/

"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.local")

django_application = get_asgi_application()

from escort_directory.realtime.socketio import create_asgi_app  # noqa: E402

# Socket.IO must sit in front of Django because it handles BOTH
# HTTP long-polling (Engine.IO) and WebSocket upgrades on its own path.
application = create_asgi_app(django_application)
