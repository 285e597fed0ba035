import pytest

from application.services.chat_service import ChatApplicationService
from domain.common.exceptions import (
    MessageNotFoundException,
    MessageNotOwnedException,
    MessageRequiredException,
)
from domain.user.entity import User
from fakes import InMemoryUnitOfWork


def _service():
    uow = InMemoryUnitOfWork(users=[
        User(id=1, name="Asha"),
        User(id=2, name="Ravi", profile_photo="https://img/2.png"),
        User(id=3, name="Meera"),
    ])
    return ChatApplicationService(uow_factory=uow), uow


@pytest.mark.asyncio
async def test_send_requires_receiver_and_text():
    service, _ = _service()
    with pytest.raises(MessageRequiredException):
        await service.send(1, None, "hi")
    with pytest.raises(MessageRequiredException):
        await service.send(1, 2, "   ")


@pytest.mark.asyncio
async def test_conversations_group_by_counterpart_with_unread_counts():
    service, _ = _service()
    await service.send(2, 1, "hello")
    await service.send(2, 1, "are you there?")
    await service.send(1, 2, "yes")
    await service.send(3, 1, "new job")

    chats = await service.list_conversations(1)

    assert [c.id for c in chats] == [3, 2]
    by_id = {c.id: c for c in chats}
    assert by_id[2].last_message == "yes"
    assert by_id[2].unread_count == 2
    assert by_id[2].name == "Ravi"
    assert by_id[2].profile_photo == "https://img/2.png"
    assert by_id[3].unread_count == 1


@pytest.mark.asyncio
async def test_mark_read_clears_unread_from_that_sender_only():
    service, _ = _service()
    await service.send(2, 1, "a")
    await service.send(2, 1, "b")
    await service.send(3, 1, "c")

    assert await service.mark_read(1, 2) == 2
    unread = {c.id: c.unread_count for c in await service.list_conversations(1)}
    assert unread == {2: 0, 3: 1}


@pytest.mark.asyncio
async def test_history_is_oldest_first_and_covers_both_directions():
    service, _ = _service()
    await service.send(1, 2, "first")
    await service.send(2, 1, "second")
    await service.send(1, 3, "elsewhere")

    history = await service.history(1, 2)
    assert [m.message for m in history] == ["first", "second"]


@pytest.mark.asyncio
async def test_only_sender_may_edit_or_delete():
    service, _ = _service()
    sent = await service.send(1, 2, "original")

    with pytest.raises(MessageNotOwnedException):
        await service.edit(2, sent.id, "hijack")
    with pytest.raises(MessageNotOwnedException):
        await service.delete(2, sent.id)

    edited = await service.edit(1, sent.id, "fixed")
    assert edited.message == "fixed"

    await service.delete(1, sent.id)
    assert await service.history(1, 2) == []


@pytest.mark.asyncio
async def test_empty_edit_keeps_text():
    service, _ = _service()
    sent = await service.send(1, 2, "keep me")
    edited = await service.edit(1, sent.id, "")
    assert edited.message == "keep me"


@pytest.mark.asyncio
async def test_unknown_message_is_not_found():
    service, _ = _service()
    with pytest.raises(MessageNotFoundException):
        await service.edit(1, 404, "x")
    with pytest.raises(MessageNotFoundException):
        await service.delete(1, 404)


def test_message_dto_uses_camel_case_and_utc_z():
    from datetime import datetime, timezone
    from application.dto import MessageDTO

    dto = MessageDTO(
        id=1, sender_id=1, receiver_id=2, message="hi",
        created_at=datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
    )
    data = dto.model_dump(by_alias=True)
    assert data["senderId"] == 1
    assert data["createdAt"] == "2024-01-01T12:00:00Z"
