import pytest

from application.services.notification_service import NotificationBroadcaster
from application.services.profile_service import ProfileApplicationService
from domain.common.exceptions import DomainValidationException, UserNotFoundException
from domain.user.entity import KycStatus, User
from fakes import InMemoryUnitOfWork, RecordingBroker


@pytest.mark.asyncio
async def test_verifying_kyc_notifies_the_user():
    uow = InMemoryUnitOfWork(users=[User(id=5, name="Sunita")])
    broker = RecordingBroker()
    service = ProfileApplicationService(uow, NotificationBroadcaster(broker))

    profile = await service.set_kyc_status(5, "verified")

    assert profile.kyc_status == "verified"
    assert profile.kyc_verified_at is not None
    assert uow.users.users[5].kyc_status is KycStatus.VERIFIED
    (channel, envelope), = broker.events("kycVerified")
    assert channel == "5"
    assert envelope.data["userId"] == 5
    assert envelope.data["status"] == "verified"
    assert envelope.data["user"]["kycStatus"] == "verified"
    assert envelope.data["user"]["name"] == "Sunita"


@pytest.mark.asyncio
async def test_rejecting_kyc_clears_verified_at():
    uow = InMemoryUnitOfWork(users=[User(id=5)])
    service = ProfileApplicationService(uow, NotificationBroadcaster(RecordingBroker()))

    await service.set_kyc_status(5, "verified")
    profile = await service.set_kyc_status(5, "REJECTED")

    assert profile.kyc_status == "rejected"
    assert profile.kyc_verified_at is None


@pytest.mark.asyncio
async def test_invalid_status_and_unknown_user():
    uow = InMemoryUnitOfWork(users=[User(id=5)])
    broker = RecordingBroker()
    service = ProfileApplicationService(uow, NotificationBroadcaster(broker))

    with pytest.raises(DomainValidationException):
        await service.set_kyc_status(5, "approved-ish")
    with pytest.raises(UserNotFoundException):
        await service.set_kyc_status(6, "verified")
    assert broker.published == []


@pytest.mark.asyncio
async def test_get_profile():
    uow = InMemoryUnitOfWork(users=[User(id=5, name="Sunita", role="seeker")])
    service = ProfileApplicationService(uow, NotificationBroadcaster())

    profile = await service.get_profile(5)
    assert profile.kyc_status == "none"
    assert profile.role == "seeker"
