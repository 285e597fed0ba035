import pytest

from application.services.chat_relay import ChatRelay, ModerationErrorPolicy, RelayOutcome
from fakes import RecordingBroker, StubBlockLookup, build_realtime, connect_as
from application.services.notification_service import NotificationBroadcaster


@pytest.mark.asyncio
async def test_message_reaches_receiver_and_echoes_to_sender():
    rt, _ = await build_realtime()
    cid1, sock1 = await connect_as(rt, 1)
    _, sock2 = await connect_as(rt, 2)

    payload = {"senderId": 1, "receiverId": 2, "text": "hi"}
    await rt.handle_event(cid1, {"type": "sendMessage", "data": payload})
    await rt.connections.flush(timeout=1)

    for sock in (sock1, sock2):
        received = sock.events("receiveMessage")
        assert len(received) == 1
        assert received[0]["data"]["text"] == "hi"
        assert received[0]["data"] == payload


@pytest.mark.asyncio
async def test_blocked_pair_only_notifies_sender():
    lookup = StubBlockLookup(blocked_pairs=[(1, 2)])
    rt, _ = await build_realtime(lookup)
    _, sock1 = await connect_as(rt, 1)
    _, sock2 = await connect_as(rt, 2)

    payload = {"senderId": 1, "receiverId": 2, "text": "hi"}
    outcome = await rt.relay.relay(payload)
    await rt.connections.flush(timeout=1)

    assert outcome is RelayOutcome.BLOCKED
    assert sock2.sent == []
    blocked = sock1.events("messageBlocked")
    assert len(blocked) == 1
    assert blocked[0]["data"] == {"reason": "User blocked", "data": payload}
    assert sock1.events("receiveMessage") == []


@pytest.mark.asyncio
async def test_block_applies_in_both_directions():
    lookup = StubBlockLookup(blocked_pairs=[(1, 2)])
    rt, _ = await build_realtime(lookup)
    _, sock1 = await connect_as(rt, 1)
    _, sock2 = await connect_as(rt, 2)

    outcome = await rt.relay.relay({"senderId": "2", "receiverId": "1", "text": "hey"})
    await rt.connections.flush(timeout=1)

    assert outcome is RelayOutcome.BLOCKED
    assert sock1.sent == []
    assert len(sock2.events("messageBlocked")) == 1


@pytest.mark.asyncio
async def test_store_failure_fails_open_and_logs(caplog):
    lookup = StubBlockLookup(blocked_pairs=[(1, 2)], error=RuntimeError("db down"))
    rt, _ = await build_realtime(lookup)
    _, sock1 = await connect_as(rt, 1)
    _, sock2 = await connect_as(rt, 2)

    outcome = await rt.relay.relay({"senderId": 1, "receiverId": 2, "text": "hi"})
    await rt.connections.flush(timeout=1)

    assert outcome is RelayOutcome.DELIVERED
    assert len(sock2.events("receiveMessage")) == 1
    assert len(sock1.events("receiveMessage")) == 1
    assert "moderation_lookup_failed" in caplog.text


@pytest.mark.asyncio
async def test_store_failure_with_deny_policy_blocks():
    lookup = StubBlockLookup(error=RuntimeError("db down"))
    rt, _ = await build_realtime(lookup, on_store_error="deny")
    _, sock1 = await connect_as(rt, 1)
    _, sock2 = await connect_as(rt, 2)

    outcome = await rt.relay.relay({"senderId": 1, "receiverId": 2, "text": "hi"})
    await rt.connections.flush(timeout=1)

    assert outcome is RelayOutcome.BLOCKED
    assert sock2.sent == []
    assert sock1.events("messageBlocked")[0]["data"]["reason"] == "Moderation unavailable"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"receiverId": 2, "text": "hi"},
        {"senderId": 1, "text": "hi"},
        {"senderId": "", "receiverId": 2},
        {"senderId": None, "receiverId": None},
    ],
)
async def test_missing_participant_is_dropped_silently(payload):
    lookup = StubBlockLookup()
    broker = RecordingBroker()
    relay = ChatRelay(block_lookup=lookup, broadcaster=NotificationBroadcaster(broker))

    assert await relay.relay(payload) is RelayOutcome.DROPPED
    assert broker.published == []
    assert lookup.calls == []


@pytest.mark.asyncio
async def test_absent_receiver_still_echoes_to_sender():
    rt, _ = await build_realtime()
    _, sock1 = await connect_as(rt, 1)

    outcome = await rt.relay.relay({"senderId": 1, "receiverId": 99, "text": "anyone?"})
    await rt.connections.flush(timeout=1)

    assert outcome is RelayOutcome.DELIVERED
    assert len(sock1.events("receiveMessage")) == 1


@pytest.mark.asyncio
async def test_receiver_is_published_before_sender_echo():
    broker = RecordingBroker()
    relay = ChatRelay(block_lookup=StubBlockLookup(), broadcaster=NotificationBroadcaster(broker))

    await relay.send_message(1, 2, {"text": "hi"})

    assert [ch for ch, _ in broker.events("receiveMessage")] == ["2", "1"]


def test_invalid_policy_is_rejected():
    with pytest.raises(ValueError):
        ChatRelay(block_lookup=StubBlockLookup(), broadcaster=NotificationBroadcaster(), on_store_error="maybe")


def test_policy_accepts_enum_and_string():
    relay = ChatRelay(block_lookup=StubBlockLookup(), broadcaster=NotificationBroadcaster(), on_store_error="deny")
    assert relay.on_store_error is ModerationErrorPolicy.DENY
