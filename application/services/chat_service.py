"""
聊天记录应用服务（REST）- 消息的持久化、会话列表、已读、编辑和删除
"""
from __future__ import annotations

from typing import Callable, Dict, List, Optional

from domain.chat.entity import ChatMessage, Conversation
from domain.common.exceptions import MessageNotFoundException
from domain.common.unit_of_work import AbstractUnitOfWork
from application.dto import MessageDTO, ConversationDTO


class ChatApplicationService:
    """聊天记录服务 - 与实时转发相互独立"""

    def __init__(self, uow_factory: Callable[..., AbstractUnitOfWork]):
        self._uow_factory = uow_factory

    async def send(self, sender_id: int, receiver_id: Optional[int], text: Optional[str]) -> MessageDTO:
        message = ChatMessage(id=None, sender_id=sender_id, receiver_id=receiver_id, message=text or "")
        async with self._uow_factory() as uow:
            saved = await uow.message_repository.create(message)
            return MessageDTO.from_entity(saved)

    async def list_conversations(self, user_id: int) -> List[ConversationDTO]:
        """One entry per counterpart, newest conversation first."""
        async with self._uow_factory(readonly=True) as uow:
            messages = await uow.message_repository.list_for_user(user_id)
            conversations: Dict[int, Conversation] = {}
            for msg in messages:
                other = msg.counterpart_of(user_id)
                unread = 1 if msg.receiver_id == user_id and not msg.read else 0
                conv = conversations.get(other)
                if conv is None:
                    # messages arrive newest first, so the first hit is the latest
                    conversations[other] = Conversation(
                        user_id=other,
                        name=None,
                        profile_photo=None,
                        last_message=msg.message,
                        updated_at=msg.created_at,
                        unread_count=unread,
                    )
                else:
                    conv.unread_count += unread

            users = await uow.user_repository.get_many(conversations.keys())
            for other, conv in conversations.items():
                user = users.get(other)
                if user is not None:
                    conv.name = user.name
                    conv.profile_photo = user.profile_photo
            return [ConversationDTO.from_entity(c) for c in conversations.values()]

    async def history(self, user_id: int, other_id: int) -> List[MessageDTO]:
        async with self._uow_factory(readonly=True) as uow:
            messages = await uow.message_repository.list_between(user_id, other_id)
            return [MessageDTO.from_entity(m) for m in messages]

    async def mark_read(self, user_id: int, other_id: int) -> int:
        """Mark everything `other_id` sent to `user_id` as read."""
        async with self._uow_factory() as uow:
            return await uow.message_repository.mark_read(sender_id=other_id, receiver_id=user_id)

    async def edit(self, user_id: int, message_id: int, text: Optional[str]) -> MessageDTO:
        async with self._uow_factory() as uow:
            message = await uow.message_repository.get_by_id(message_id)
            if message is None:
                raise MessageNotFoundException(message_id)
            message.ensure_sender(user_id)
            message.edit(text)
            saved = await uow.message_repository.update(message)
            return MessageDTO.from_entity(saved)

    async def delete(self, user_id: int, message_id: int) -> None:
        async with self._uow_factory() as uow:
            message = await uow.message_repository.get_by_id(message_id)
            if message is None:
                raise MessageNotFoundException(message_id)
            message.ensure_sender(user_id)
            await uow.message_repository.delete(message_id)
