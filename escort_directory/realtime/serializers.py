"""DRF serializers validating inbound Socket.IO event payloads.

Field names follow the wire format used by the React client (camelCase).
"""

from __future__ import annotations

from typing import Any

from rest_framework import serializers

from escort_directory.messaging.models import MAX_CONTENT_LENGTH
from escort_directory.messaging.models import Message

from .exceptions import PayloadValidationError

USER_ID_MAX_LENGTH = 64


class AuthenticateSerializer(serializers.Serializer):
    token = serializers.CharField()
    userId = serializers.CharField(max_length=USER_ID_MAX_LENGTH)  # noqa: N815


class SendMessageSerializer(serializers.Serializer):
    senderId = serializers.CharField(max_length=USER_ID_MAX_LENGTH)  # noqa: N815
    recipientId = serializers.CharField(max_length=USER_ID_MAX_LENGTH)  # noqa: N815
    content = serializers.CharField(max_length=MAX_CONTENT_LENGTH)
    # Client-generated reference, echoed back in message_sent.
    messageId = serializers.CharField(  # noqa: N815
        max_length=100,
        required=False,
        allow_blank=True,
        allow_null=True,
        default="",
    )
    type = serializers.ChoiceField(
        choices=Message.Type.choices,
        required=False,
        default=Message.Type.TEXT,
    )
    mediaUrl = serializers.URLField(  # noqa: N815
        max_length=500,
        required=False,
        allow_blank=True,
        allow_null=True,
        default="",
    )

    def __init__(self, *args: Any, max_content_length: int | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        if max_content_length is not None:
            self.fields["content"] = serializers.CharField(
                max_length=min(max_content_length, MAX_CONTENT_LENGTH),
            )


class TypingSerializer(serializers.Serializer):
    senderId = serializers.CharField(max_length=USER_ID_MAX_LENGTH)  # noqa: N815
    recipientId = serializers.CharField(max_length=USER_ID_MAX_LENGTH)  # noqa: N815


class MarkReadSerializer(serializers.Serializer):
    messageId = serializers.CharField(max_length=100)  # noqa: N815
    readerId = serializers.CharField(max_length=USER_ID_MAX_LENGTH)  # noqa: N815


def _plain_errors(errors: Any) -> dict[str, list[str]]:
    if not isinstance(errors, dict):
        return {"non_field_errors": [str(e) for e in errors]}
    return {
        str(field): [str(e) for e in (messages if isinstance(messages, list) else [messages])]
        for field, messages in errors.items()
    }


def validate_payload(
    serializer_class: type[serializers.Serializer],
    payload: Any,
    **kwargs: Any,
) -> dict[str, Any]:
    """Validate ``payload`` or raise :class:`PayloadValidationError`."""

    serializer = serializer_class(data=payload, **kwargs)
    if not serializer.is_valid():
        msg = "Invalid payload"
        raise PayloadValidationError(msg, errors=_plain_errors(serializer.errors))
    return dict(serializer.validated_data)
