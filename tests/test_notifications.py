import pytest

from application.services.notification_service import NotificationBroadcaster
from fakes import RecordingBroker


@pytest.mark.asyncio
async def test_unbound_broadcaster_logs_and_returns(caplog):
    broadcaster = NotificationBroadcaster()
    assert broadcaster.ready is False

    assert await broadcaster.notify(1, "userBlocked", {}) is False
    await broadcaster.user_blocked(1, 2)
    assert "realtime_not_initialized" in caplog.text


@pytest.mark.asyncio
async def test_bind_makes_broadcaster_ready():
    broker = RecordingBroker()
    broadcaster = NotificationBroadcaster()
    broadcaster.bind(broker)

    assert broadcaster.ready
    assert await broadcaster.notify("3", "kycVerified", {}) is True
    assert broker.published[0][0] == "3"


@pytest.mark.asyncio
async def test_invalid_target_is_not_published():
    broker = RecordingBroker()
    broadcaster = NotificationBroadcaster(broker)

    assert await broadcaster.notify(None, "userBlocked", {}) is False
    assert broker.published == []


@pytest.mark.asyncio
async def test_publish_failure_is_swallowed(caplog):
    broadcaster = NotificationBroadcaster(RecordingBroker(error=ConnectionError("redis gone")))

    assert await broadcaster.notify(1, "userReported", {}) is False
    await broadcaster.user_reported(1, 2)
    assert "notify_failed" in caplog.text


@pytest.mark.asyncio
async def test_user_blocked_goes_to_both_parties():
    broker = RecordingBroker()
    await NotificationBroadcaster(broker).user_blocked(1, 2)

    events = broker.events("userBlocked")
    assert [ch for ch, _ in events] == ["1", "2"]
    assert all(env.data == {"userId": 1, "targetId": 2} for _, env in events)


@pytest.mark.asyncio
async def test_user_reported_goes_to_both_parties():
    broker = RecordingBroker()
    await NotificationBroadcaster(broker).user_reported(5, 6)

    events = broker.events("userReported")
    assert [ch for ch, _ in events] == ["5", "6"]
    assert events[0][1].data == {"reporterId": 5, "targetId": 6}


@pytest.mark.asyncio
async def test_kyc_verified_goes_to_user_only():
    broker = RecordingBroker()
    await NotificationBroadcaster(broker).kyc_verified(9, "verified", {"id": 9})

    assert [(ch, env.type) for ch, env in broker.published] == [("9", "kycVerified")]
    assert broker.published[0][1].data == {"userId": 9, "status": "verified", "user": {"id": 9}}
