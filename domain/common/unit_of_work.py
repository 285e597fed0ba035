"""Unit of Work 抽象定义

聊天记录、屏蔽/举报与用户资料共享同一个事务边界：
屏蔽后清理聊天记录使用独立的 Unit of Work，失败不影响屏蔽本身。
"""
from __future__ import annotations

from abc import ABC, abstractmethod

from domain.user.repository import UserRepository
from domain.chat.repository import MessageRepository
from domain.moderation.repository import BlockRepository, ReportRepository


class AbstractUnitOfWork(ABC):
    """应用层事务边界控制抽象

    ``readonly=True`` 时退出不提交，用于查询与实时转发中的屏蔽校验。
    """

    user_repository: UserRepository
    message_repository: MessageRepository
    block_repository: BlockRepository
    report_repository: ReportRepository

    def __init__(self, *, readonly: bool = False) -> None:
        self._committed = False
        self._readonly = readonly

    @property
    def readonly(self) -> bool:
        return self._readonly

    async def __aenter__(self) -> "AbstractUnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc:
            await self.rollback()
        elif not self._readonly and not self._committed:
            await self.commit()

    @abstractmethod
    async def commit(self) -> None:
        """提交事务"""

    @abstractmethod
    async def rollback(self) -> None:
        """回滚事务"""
