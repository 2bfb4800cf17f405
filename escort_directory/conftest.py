import itertools

import pytest
from django.contrib.auth import get_user_model

_usernames = itertools.count(1)


@pytest.fixture
def make_user(db):
    def _make_user(**extra):
        n = next(_usernames)
        username = extra.pop("username", f"user{n}")
        return get_user_model().objects.create_user(
            username=username,
            email=f"{username}@example.com",
            password="Pass!12345",  # noqa: S106
            **extra,
        )

    return _make_user
