"""
With these settings, tests run faster.
"""

from .base import *  # noqa: F403
from .base import LOGGING
from .base import TEMPLATES
from .base import env

# GENERAL
# ------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#secret-key
SECRET_KEY = env(
    "DJANGO_SECRET_KEY",
    default="qK3vTnW0dbXw8c1Lr6ZyJmP2hEoA9sUfV4gNiR7tCxYlBkDa5QjMe0FuHzGpOw1I",
)
# https://docs.djangoproject.com/en/dev/ref/settings/#test-runner
TEST_RUNNER = "django.test.runner.DiscoverRunner"

# PASSWORDS
# ------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#password-hashers
PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

# EMAIL
# ------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#email-backend
EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

# DEBUGGING FOR TEMPLATES
# ------------------------------------------------------------------------------
TEMPLATES[0]["OPTIONS"]["debug"] = True  # type: ignore[index]

# REALTIME
# ------------------------------------------------------------------------------
# Throttling is exercised explicitly in its own tests.
REALTIME_SEND_RATE = 0
REALTIME_RECONCILE_ON_STARTUP = False
LOGGING["loggers"]["escort_directory.realtime"]["level"] = "DEBUG"  # type: ignore[index]
# Your stuff...
# ------------------------------------------------------------------------------
