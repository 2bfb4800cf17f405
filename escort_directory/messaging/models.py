from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

MAX_CONTENT_LENGTH = 2000


class Message(models.Model):
    """A direct message between two users.

    Rows are created by the realtime relay and mutated only when the
    recipient reads them. ``read_at`` is written once.
    """

    class Type(models.TextChoices):
        TEXT = "text", _("Text")
        IMAGE = "image", _("Image")
        FILE = "file", _("File")
        SYSTEM = "system", _("System")

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_messages",
    )
    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="received_messages",
    )
    content = models.TextField(max_length=MAX_CONTENT_LENGTH)
    message_type = models.CharField(
        max_length=20,
        choices=Type.choices,
        default=Type.TEXT,
    )
    media_url = models.URLField(max_length=500, blank=True, default="")
    # Client-side reference supplied with send_message, echoed in acks.
    client_id = models.CharField(max_length=100, blank=True, default="")
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["sender", "recipient", "-created_at"],
                name="message_pair_recent_idx",
            ),
            models.Index(
                fields=["recipient", "is_read", "-created_at"],
                name="message_unread_idx",
            ),
            models.Index(fields=["-created_at"], name="message_recent_idx"),
        ]

    def __str__(self):
        return f"Message({self.pk}) {self.sender_id} -> {self.recipient_id}"
