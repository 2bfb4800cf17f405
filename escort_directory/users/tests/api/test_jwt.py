import pytest
from rest_framework import status
from rest_framework.test import APIClient

from escort_directory.realtime.auth import JWTTokenVerifier

pytestmark = pytest.mark.django_db


def test_issued_access_token_authenticates_realtime_connection(make_user):
    user = make_user(username="verifyuser")
    client = APIClient()

    response = client.post(
        "/api/v1/auth/jwt/create/",
        {"username": "verifyuser", "password": "Pass!12345"},
        format="json",
    )

    assert response.status_code == status.HTTP_200_OK, response.content
    JWTTokenVerifier().verify(response.data["access"], str(user.pk))
