from http import HTTPStatus

import pytest
from django.urls import resolve
from django.urls import reverse


def test_api_routes_are_versioned():
    assert reverse("api_v1:messages-list") == "/api/v1/messages/"
    assert resolve("/api/v1/messages/unread-count/").view_name == (
        "api_v1:messages-unread-count"
    )
    assert resolve("/api/v1/users/1/presence/").view_name == "api_v1:users-presence"


def test_api_v1_schema_generated_successfully(admin_client):
    response = admin_client.get(reverse("api-schema-v1"))
    assert response.status_code == HTTPStatus.OK


@pytest.mark.django_db
def test_api_v1_docs_not_accessible_by_anonymous_users(client):
    response = client.get(reverse("api-docs-v1"))
    assert response.status_code == HTTPStatus.FORBIDDEN
