import asyncio
from unittest.mock import MagicMock

import pytest

from escort_directory.realtime.events.messages import MESSAGE_SENT
from escort_directory.realtime.events.messages import NEW_MESSAGE
from escort_directory.realtime.events.messages import USER_TYPING
from escort_directory.realtime.events.presence import USER_OFFLINE
from escort_directory.realtime.events.presence import USER_ONLINE
from escort_directory.realtime.hub import ChatHub

from .fakes import InMemoryPresenceStore


async def connect_as(hub, sid, user_id):
    await hub.on_connect(sid, {})
    await hub.on_authenticate(sid, {"token": f"token-{user_id}", "userId": user_id})


@pytest.mark.asyncio
async def test_message_between_online_users(hub, message_store, sink):
    await connect_as(hub, "sA", "A")
    await connect_as(hub, "sB", "B")

    await hub.on_send_message("sA", {"senderId": "A", "recipientId": "B", "content": "hi"})

    (stored,) = message_store.rows.values()
    assert stored.content == "hi"
    assert sink.events_for("sB") == [
        (
            NEW_MESSAGE,
            {
                "message": {
                    "_id": stored.id,
                    "sender": "A",
                    "recipient": "B",
                    "content": "hi",
                    "type": "text",
                    "createdAt": stored.created_at.isoformat(),
                    "isRead": False,
                },
            },
        ),
    ]
    assert sink.events_for("sA") == [
        (MESSAGE_SENT, {"messageId": stored.id, "success": True}),
    ]


@pytest.mark.asyncio
async def test_message_to_offline_user_waits_in_history(hub, message_store, sink):
    await connect_as(hub, "sA", "A")

    await hub.on_send_message("sA", {"senderId": "A", "recipientId": "B", "content": "hi"})

    assert len(message_store.rows) == 1
    assert sink.named(NEW_MESSAGE) == []
    assert [event for event, _ in sink.events_for("sA")] == [MESSAGE_SENT]


@pytest.mark.asyncio
async def test_anonymous_disconnect_is_silent(hub, presence_store, sink):
    await hub.on_connect("s1", {})
    await hub.on_disconnect("s1", "client disconnect")

    assert presence_store.writes == []
    assert sink.sent == []
    assert sink.broadcasts == []
    assert len(hub.sequencer) == 0


@pytest.mark.asyncio
async def test_presence_round_trip(hub, presence_store, sink):
    await connect_as(hub, "sA", "A")
    await hub.on_disconnect("sA", "transport close")

    assert hub.registry.size() == 0
    assert [event for event, _, _ in sink.broadcasts] == [USER_ONLINE, USER_OFFLINE]
    assert presence_store.flags == {"A": False}


@pytest.mark.asyncio
async def test_events_of_one_connection_run_in_arrival_order(hub, message_store, sink):
    await connect_as(hub, "sA", "A")
    await connect_as(hub, "sB", "B")
    message_store.create_gate = asyncio.Event()

    send = asyncio.create_task(
        hub.on_send_message("sA", {"senderId": "A", "recipientId": "B", "content": "1"}),
    )
    typing = asyncio.create_task(
        hub.on_typing_start("sA", {"senderId": "A", "recipientId": "B"}),
    )
    for _ in range(5):
        await asyncio.sleep(0)

    # The send is parked in the store, so the typing signal must still wait.
    assert sink.events_for("sB") == []

    message_store.create_gate.set()
    await asyncio.gather(send, typing)

    assert [event for event, _ in sink.events_for("sB")] == [NEW_MESSAGE, USER_TYPING]


@pytest.mark.asyncio
async def test_other_connections_are_not_blocked(hub, message_store, sink):
    await connect_as(hub, "sA", "A")
    await connect_as(hub, "sB", "B")
    await connect_as(hub, "sC", "C")
    message_store.create_gate = asyncio.Event()

    send = asyncio.create_task(
        hub.on_send_message("sA", {"senderId": "A", "recipientId": "B", "content": "1"}),
    )
    await asyncio.sleep(0)
    await hub.on_typing_start("sC", {"senderId": "C", "recipientId": "B"})

    assert sink.events_for("sB") == [(USER_TYPING, {"senderId": "C"})]

    message_store.create_gate.set()
    await send


@pytest.mark.asyncio
async def test_mark_read_through_hub(hub, message_store, sink):
    await connect_as(hub, "sA", "A")
    await connect_as(hub, "sB", "B")
    await hub.on_send_message("sA", {"senderId": "A", "recipientId": "B", "content": "hi"})
    (stored,) = message_store.rows.values()

    await hub.on_mark_read("sB", {"messageId": stored.id, "readerId": "B"})

    assert message_store.rows[stored.id].is_read is True
    assert sink.events_for("sA")[-1] == ("message_read", {"messageId": stored.id})


@pytest.mark.asyncio
async def test_startup_reconciles_and_shutdown_offlines(sink, message_store):
    users = InMemoryPresenceStore(online={"stale"})
    hub = ChatHub.build(sink, messages=message_store, users=users)

    await hub.startup()
    assert users.flags == {"stale": False}

    await hub.on_authenticate("sA", {"token": "any", "userId": "A"})
    await hub.shutdown()
    assert users.flags == {"stale": False, "A": False}


@pytest.mark.asyncio
async def test_startup_reconcile_can_be_disabled(sink, message_store):
    users = InMemoryPresenceStore(online={"stale"})
    hub = ChatHub.build(
        sink,
        messages=message_store,
        users=users,
        reconcile_on_startup=False,
    )

    await hub.startup()

    assert users.flags == {"stale": True}


def test_attach_registers_every_event(hub):
    sio = MagicMock()

    hub.attach(sio)

    registered = {call.args[0] for call in sio.on.call_args_list}
    assert registered == {
        "connect",
        "disconnect",
        "authenticate",
        "send_message",
        "typing_start",
        "typing_stop",
        "mark_read",
    }


@pytest.mark.asyncio
async def test_verified_connection_cannot_send_as_someone_else(hub, message_store, sink):
    await connect_as(hub, "sA", "A")
    await connect_as(hub, "sB", "B")

    await hub.on_send_message("sA", {"senderId": "B", "recipientId": "A", "content": "x"})

    assert message_store.rows == {}
    assert sink.events_for("sA") == [
        ("message_error", {"error": "Sender does not match authenticated user"}),
    ]
