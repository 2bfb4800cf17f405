import pytest
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

pytestmark = pytest.mark.django_db


class TestPresenceAPI:
    def setup_method(self):
        self.client = APIClient()

    def test_presence_detail(self, make_user):
        viewer = make_user()
        seen = timezone.now()
        other = make_user(is_online=True, last_active=seen)
        self.client.force_authenticate(user=viewer)

        response = self.client.get(f"/api/v1/users/{other.pk}/presence/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["id"] == str(other.pk)
        assert response.data["isOnline"] is True
        assert response.data["lastActive"] is not None

    def test_online_list(self, make_user):
        viewer = make_user()
        online = make_user(username="zoe", is_online=True)
        make_user(username="yan")
        self.client.force_authenticate(user=viewer)

        response = self.client.get("/api/v1/users/online/")

        assert response.status_code == status.HTTP_200_OK
        assert [row["username"] for row in response.data["results"]] == [online.username]

    def test_presence_requires_authentication(self, make_user):
        other = make_user()

        response = self.client.get(f"/api/v1/users/{other.pk}/presence/")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
