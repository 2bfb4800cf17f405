from rest_framework import serializers

from escort_directory.users.models import User


class UserPresenceSerializer(serializers.ModelSerializer[User]):
    id = serializers.CharField(source="pk", read_only=True)
    isOnline = serializers.BooleanField(source="is_online", read_only=True)  # noqa: N815
    lastActive = serializers.DateTimeField(source="last_active", read_only=True)  # noqa: N815

    class Meta:
        model = User
        fields = ["id", "username", "name", "isOnline", "lastActive"]
        read_only_fields = fields
