"""
聊天消息仓储接口
"""
from abc import ABC, abstractmethod
from typing import Optional, List

from .entity import ChatMessage


class MessageRepository(ABC):
    """消息仓储抽象接口"""

    @abstractmethod
    async def create(self, message: ChatMessage) -> ChatMessage:
        """保存消息"""

    @abstractmethod
    async def get_by_id(self, message_id: int) -> Optional[ChatMessage]:
        """根据ID获取消息"""

    @abstractmethod
    async def list_for_user(self, user_id: int) -> List[ChatMessage]:
        """用户参与的全部消息，按创建时间倒序"""

    @abstractmethod
    async def list_between(self, user_id: int, other_id: int) -> List[ChatMessage]:
        """两个用户之间的消息，按创建时间正序"""

    @abstractmethod
    async def mark_read(self, sender_id: int, receiver_id: int) -> int:
        """将 sender 发给 receiver 的未读消息标记为已读，返回更新条数"""

    @abstractmethod
    async def update(self, message: ChatMessage) -> ChatMessage:
        """更新消息"""

    @abstractmethod
    async def delete(self, message_id: int) -> bool:
        """删除消息"""

    @abstractmethod
    async def delete_between(self, user_id: int, other_id: int) -> int:
        """删除两个用户之间的全部消息（双向），返回删除条数"""
