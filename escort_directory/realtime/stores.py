"""Durable stores used by the realtime core.

The core only talks to the ``MessageStore`` / ``UserPresenceStore``
protocols. The Django implementations run ORM calls through
``database_sync_to_async`` and translate database failures into
:class:`PersistenceError`.
"""

from __future__ import annotations

import contextlib
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING
from typing import Any
from typing import Protocol

from channels.db import database_sync_to_async
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError
from django.db import transaction
from django.utils import timezone

from escort_directory.messaging.models import Message

from .exceptions import PersistenceError

if TYPE_CHECKING:  # import for type checking only
    from escort_directory.users.models import User

_STORE_ERRORS = (DatabaseError, ValueError, TypeError, DjangoValidationError)


@dataclass(frozen=True)
class StoredMessage:
    id: str
    sender_id: str
    recipient_id: str
    content: str
    created_at: datetime
    message_type: str = Message.Type.TEXT
    media_url: str = ""
    client_id: str = ""
    is_read: bool = False
    read_at: datetime | None = None

    @classmethod
    def from_model(cls, message: Message) -> StoredMessage:
        return cls(
            id=str(message.pk),
            sender_id=str(message.sender_id),
            recipient_id=str(message.recipient_id),
            content=message.content,
            created_at=message.created_at,
            message_type=message.message_type,
            media_url=message.media_url,
            client_id=message.client_id,
            is_read=message.is_read,
            read_at=message.read_at,
        )


class MessageStore(Protocol):
    async def create(
        self,
        *,
        sender_id: str,
        recipient_id: str,
        content: str,
        message_type: str = ...,
        media_url: str = ...,
        client_id: str = ...,
    ) -> StoredMessage: ...

    async def find_by_id(self, message_id: str) -> StoredMessage | None: ...

    async def update(self, message_id: str, fields: dict[str, Any]) -> None: ...

    async def mark_read(self, message_id: str, read_at: datetime) -> bool:
        """Flip an unread message to read. Returns ``False`` if it was already read."""
        ...


class UserPresenceStore(Protocol):
    async def update_presence(
        self,
        user_id: str,
        *,
        is_online: bool,
        last_active: datetime,
    ) -> int: ...

    async def mark_all_offline(self, keep_online: Iterable[str] = ...) -> int: ...


class DjangoMessageStore:
    """``MessageStore`` backed by :class:`~escort_directory.messaging.models.Message`."""

    def create_sync(
        self,
        *,
        sender_id: str,
        recipient_id: str,
        content: str,
        message_type: str = Message.Type.TEXT,
        media_url: str = "",
        client_id: str = "",
    ) -> StoredMessage:
        user_model = get_user_model()
        try:
            participants = {str(sender_id), str(recipient_id)}
            found = user_model.objects.filter(pk__in=participants).count()
            if found != len(participants):
                msg = "Unknown sender or recipient"
                raise PersistenceError(msg)
            with transaction.atomic():
                message = Message.objects.create(
                    sender_id=sender_id,
                    recipient_id=recipient_id,
                    content=content,
                    message_type=message_type,
                    media_url=media_url,
                    client_id=client_id,
                )
        except _STORE_ERRORS as exc:
            msg = "Failed to persist message"
            raise PersistenceError(msg) from exc
        return StoredMessage.from_model(message)

    def find_by_id_sync(self, message_id: str) -> StoredMessage | None:
        try:
            message = Message.objects.get(pk=message_id)
        except (Message.DoesNotExist, ValueError, TypeError, DjangoValidationError):
            return None
        except DatabaseError as exc:
            msg = "Failed to load message"
            raise PersistenceError(msg) from exc
        return StoredMessage.from_model(message)

    def update_sync(self, message_id: str, fields: dict[str, Any]) -> None:
        try:
            Message.objects.filter(pk=message_id).update(
                **fields,
                updated_at=timezone.now(),
            )
        except _STORE_ERRORS as exc:
            msg = "Failed to update message"
            raise PersistenceError(msg) from exc

    def mark_read_sync(self, message_id: str, read_at: datetime) -> bool:
        # Only an unread row matches, so read_at is written once.
        try:
            updated = Message.objects.filter(pk=message_id, is_read=False).update(
                is_read=True,
                read_at=read_at,
                updated_at=timezone.now(),
            )
        except _STORE_ERRORS as exc:
            msg = "Failed to mark message read"
            raise PersistenceError(msg) from exc
        return updated == 1

    async def create(self, **fields: Any) -> StoredMessage:
        return await database_sync_to_async(self.create_sync)(**fields)

    async def find_by_id(self, message_id: str) -> StoredMessage | None:
        return await database_sync_to_async(self.find_by_id_sync)(message_id)

    async def update(self, message_id: str, fields: dict[str, Any]) -> None:
        await database_sync_to_async(self.update_sync)(message_id, fields)

    async def mark_read(self, message_id: str, read_at: datetime) -> bool:
        return await database_sync_to_async(self.mark_read_sync)(message_id, read_at)


class DjangoUserPresenceStore:
    """``UserPresenceStore`` writing ``is_online`` / ``last_active`` on the user."""

    def update_presence_sync(
        self,
        user_id: str,
        *,
        is_online: bool,
        last_active: datetime,
    ) -> int:
        user_model: type[User] = get_user_model()
        try:
            return user_model.objects.filter(pk=user_id).update(
                is_online=is_online,
                last_active=last_active,
            )
        except _STORE_ERRORS as exc:
            msg = f"Failed to update presence for user {user_id}"
            raise PersistenceError(msg) from exc

    def mark_all_offline_sync(self, keep_online: Iterable[str] = ()) -> int:
        user_model: type[User] = get_user_model()
        keep_pks = []
        for user_id in keep_online:
            # Skip ids the pk field cannot represent; they match no row.
            with contextlib.suppress(DjangoValidationError):
                keep_pks.append(user_model._meta.pk.to_python(user_id))  # noqa: SLF001
        try:
            return (
                user_model.objects.filter(is_online=True)
                .exclude(pk__in=keep_pks)
                .update(is_online=False)
            )
        except _STORE_ERRORS as exc:
            msg = "Failed to reset presence flags"
            raise PersistenceError(msg) from exc

    async def update_presence(
        self,
        user_id: str,
        *,
        is_online: bool,
        last_active: datetime,
    ) -> int:
        return await database_sync_to_async(self.update_presence_sync)(
            user_id,
            is_online=is_online,
            last_active=last_active,
        )

    async def mark_all_offline(self, keep_online: Iterable[str] = ()) -> int:
        return await database_sync_to_async(self.mark_all_offline_sync)(
            list(keep_online),
        )
