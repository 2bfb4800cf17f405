from __future__ import annotations

from rest_framework import serializers

from escort_directory.messaging.models import Message


class MessageSerializer(serializers.ModelSerializer):
    """Read serializer mirroring the realtime ``new_message`` payload."""

    _id = serializers.CharField(source="pk", read_only=True)
    sender = serializers.CharField(source="sender_id", read_only=True)
    recipient = serializers.CharField(source="recipient_id", read_only=True)
    type = serializers.CharField(source="message_type", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)  # noqa: N815
    isRead = serializers.BooleanField(source="is_read", read_only=True)  # noqa: N815
    readAt = serializers.DateTimeField(source="read_at", read_only=True)  # noqa: N815
    mediaUrl = serializers.CharField(source="media_url", read_only=True)  # noqa: N815

    class Meta:
        model = Message
        fields = (
            "_id",
            "sender",
            "recipient",
            "content",
            "type",
            "mediaUrl",
            "createdAt",
            "isRead",
            "readAt",
        )
        read_only_fields = fields


class ConversationSerializer(serializers.Serializer):
    """One conversation partner with the latest message exchanged."""

    userId = serializers.CharField()  # noqa: N815
    lastMessage = MessageSerializer()  # noqa: N815
    unreadCount = serializers.IntegerField()  # noqa: N815
