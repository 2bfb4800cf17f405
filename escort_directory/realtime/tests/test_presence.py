import pytest

from escort_directory.realtime.events.presence import AUTH_ERROR
from escort_directory.realtime.events.presence import USER_OFFLINE
from escort_directory.realtime.events.presence import USER_ONLINE
from escort_directory.realtime.presence import PresenceCoordinator

from .fakes import InMemoryPresenceStore
from .fakes import StaticTokenVerifier


@pytest.fixture
def presence(registry, presence_store, sink):
    return PresenceCoordinator(
        registry,
        presence_store,
        sink,
        token_verifier=StaticTokenVerifier(),
    )


def auth(user_id):
    return {"token": f"token-{user_id}", "userId": user_id}


@pytest.mark.asyncio
async def test_authenticate_registers_persists_and_broadcasts(
    presence,
    registry,
    presence_store,
    sink,
):
    assert await presence.authenticate("s1", auth("A")) == "A"

    assert registry.lookup("A") == "s1"
    assert presence_store.flags == {"A": True}
    assert sink.broadcasts == [(USER_ONLINE, {"userId": "A"}, "s1")]


@pytest.mark.asyncio
async def test_invalid_payload_sends_auth_error(presence, registry, sink):
    assert await presence.authenticate("s1", {"token": "x"}) is None
    assert await presence.authenticate("s1", "not a dict") is None

    assert registry.size() == 0
    assert sink.events_for("s1") == [
        (AUTH_ERROR, {"error": "invalid_payload"}),
        (AUTH_ERROR, {"error": "invalid_payload"}),
    ]
    assert sink.broadcasts == []


@pytest.mark.asyncio
async def test_rejected_token_leaves_connection_anonymous(presence, registry, sink):
    result = await presence.authenticate("s1", {"token": "token-B", "userId": "A"})

    assert result is None
    assert registry.lookup("A") is None
    assert sink.events_for("s1") == [(AUTH_ERROR, {"error": "unauthorized"})]


@pytest.mark.asyncio
async def test_without_verifier_any_token_is_accepted(registry, presence_store, sink):
    presence = PresenceCoordinator(registry, presence_store, sink)

    assert await presence.authenticate("s1", {"token": "any", "userId": "A"}) == "A"


@pytest.mark.asyncio
async def test_disconnect_before_authenticate_has_no_side_effects(
    presence,
    presence_store,
    sink,
):
    assert await presence.disconnect("s1") is None

    assert presence_store.writes == []
    assert sink.broadcasts == []
    assert sink.sent == []


@pytest.mark.asyncio
async def test_disconnect_takes_user_offline(presence, registry, presence_store, sink):
    await presence.authenticate("s1", auth("A"))

    assert await presence.disconnect("s1") == "A"

    assert registry.lookup("A") is None
    assert presence_store.flags == {"A": False}
    assert sink.broadcasts[-1] == (USER_OFFLINE, {"userId": "A"}, "s1")


@pytest.mark.asyncio
async def test_displaced_connection_closing_keeps_user_online(
    presence,
    registry,
    presence_store,
    sink,
):
    await presence.authenticate("s1", auth("A"))
    await presence.authenticate("s2", auth("A"))

    assert await presence.disconnect("s1") is None

    assert registry.lookup("A") == "s2"
    assert presence_store.flags == {"A": True}
    assert [event for event, _, _ in sink.broadcasts] == [USER_ONLINE, USER_ONLINE]


@pytest.mark.asyncio
async def test_reauthenticating_as_another_user_offlines_the_first(
    presence,
    registry,
    presence_store,
    sink,
):
    await presence.authenticate("s1", auth("A"))
    await presence.authenticate("s1", auth("B"))

    assert registry.lookup("A") is None
    assert registry.lookup("B") == "s1"
    assert presence_store.flags == {"A": False, "B": True}
    assert [(event, payload["userId"]) for event, payload, _ in sink.broadcasts] == [
        (USER_ONLINE, "A"),
        (USER_OFFLINE, "A"),
        (USER_ONLINE, "B"),
    ]


@pytest.mark.asyncio
async def test_persistence_failure_does_not_block_presence(
    presence,
    registry,
    presence_store,
    sink,
):
    presence_store.fail = True

    assert await presence.authenticate("s1", auth("A")) == "A"
    assert registry.lookup("A") == "s1"
    assert sink.broadcasts == [(USER_ONLINE, {"userId": "A"}, "s1")]

    assert await presence.disconnect("s1") == "A"
    assert registry.size() == 0


@pytest.mark.asyncio
async def test_reconcile_clears_stale_flags_only(registry, sink):
    store = InMemoryPresenceStore(online={"A", "B", "C"})
    presence = PresenceCoordinator(registry, store, sink)
    registry.register("B", "s1")

    assert await presence.reconcile() == 2
    assert store.flags == {"A": False, "B": True, "C": False}


@pytest.mark.asyncio
async def test_shutdown_marks_registered_users_offline(presence, registry, presence_store):
    await presence.authenticate("s1", auth("A"))
    await presence.authenticate("s2", auth("B"))

    await presence.shutdown()

    assert registry.size() == 0
    assert presence_store.flags == {"A": False, "B": False}
