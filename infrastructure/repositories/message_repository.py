"""
聊天消息仓储实现 - 使用SQLAlchemy实现数据访问
"""
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, and_, or_

from domain.chat.entity import ChatMessage
from domain.chat.repository import MessageRepository
from domain.common.exceptions import MessageNotFoundException
from infrastructure.models.message import MessageModel
from core.logging_config import get_logger


logger = get_logger(__name__)


def _pair_clause(a: int, b: int):
    return or_(
        and_(MessageModel.sender_id == a, MessageModel.receiver_id == b),
        and_(MessageModel.sender_id == b, MessageModel.receiver_id == a),
    )


class SQLAlchemyMessageRepository(MessageRepository):
    """消息仓储的SQLAlchemy实现"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: MessageModel) -> ChatMessage:
        return ChatMessage(
            id=model.id,
            sender_id=model.sender_id,
            receiver_id=model.receiver_id,
            message=model.message,
            read=bool(model.read),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    async def create(self, message: ChatMessage) -> ChatMessage:
        db_msg = MessageModel(
            sender_id=message.sender_id,
            receiver_id=message.receiver_id,
            message=message.message,
            read=message.read,
        )
        self.session.add(db_msg)
        await self.session.flush()
        await self.session.refresh(db_msg)
        return self._to_entity(db_msg)

    async def get_by_id(self, message_id: int) -> Optional[ChatMessage]:
        result = await self.session.execute(
            select(MessageModel).where(MessageModel.id == message_id)
        )
        db_msg = result.scalar_one_or_none()
        return self._to_entity(db_msg) if db_msg else None

    async def list_for_user(self, user_id: int) -> List[ChatMessage]:
        result = await self.session.execute(
            select(MessageModel)
            .where(or_(MessageModel.sender_id == user_id, MessageModel.receiver_id == user_id))
            .order_by(MessageModel.created_at.desc(), MessageModel.id.desc())
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def list_between(self, user_id: int, other_id: int) -> List[ChatMessage]:
        result = await self.session.execute(
            select(MessageModel)
            .where(_pair_clause(user_id, other_id))
            .order_by(MessageModel.created_at.asc(), MessageModel.id.asc())
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def mark_read(self, sender_id: int, receiver_id: int) -> int:
        result = await self.session.execute(
            update(MessageModel)
            .where(
                and_(
                    MessageModel.sender_id == sender_id,
                    MessageModel.receiver_id == receiver_id,
                    MessageModel.read == False,  # noqa: E712
                )
            )
            .values(read=True)
        )
        return int(result.rowcount or 0)

    async def update(self, message: ChatMessage) -> ChatMessage:
        result = await self.session.execute(
            select(MessageModel).where(MessageModel.id == message.id)
        )
        db_msg = result.scalar_one_or_none()
        if not db_msg:
            raise MessageNotFoundException(message.id)
        db_msg.message = message.message
        db_msg.read = message.read
        await self.session.flush()
        await self.session.refresh(db_msg)
        return self._to_entity(db_msg)

    async def delete(self, message_id: int) -> bool:
        result = await self.session.execute(
            delete(MessageModel).where(MessageModel.id == message_id)
        )
        return bool(result.rowcount)

    async def delete_between(self, user_id: int, other_id: int) -> int:
        result = await self.session.execute(
            delete(MessageModel).where(_pair_clause(user_id, other_id))
        )
        count = int(result.rowcount or 0)
        logger.info("messages_deleted_between", user_id=user_id, other_id=other_id, count=count)
        return count
