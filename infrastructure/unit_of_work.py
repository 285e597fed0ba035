"""SQLAlchemy Unit of Work 实现

写操作（发送消息、屏蔽、举报、KYC）在显式事务中执行；
只读操作（会话列表、聊天记录、屏蔽校验）依赖会话的自动开启，退出时回滚释放连接。
"""
from __future__ import annotations

from typing import Optional, Callable

from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction

from domain.common.unit_of_work import AbstractUnitOfWork
from infrastructure.database import AsyncSessionLocal
from infrastructure.repositories.user_repository import SQLAlchemyUserRepository
from infrastructure.repositories.message_repository import SQLAlchemyMessageRepository
from infrastructure.repositories.moderation_repository import (
    SQLAlchemyBlockRepository,
    SQLAlchemyReportRepository,
)


class SQLAlchemyUnitOfWork(AbstractUnitOfWork):
    """基于SQLAlchemy的Unit of Work"""

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession] = AsyncSessionLocal,
        session: Optional[AsyncSession] = None,
        *,
        readonly: bool = False,
    ) -> None:
        super().__init__(readonly=readonly)
        self._session_factory = session_factory
        self._external_session = session
        self.session: Optional[AsyncSession] = session
        self._transaction: Optional[AsyncSessionTransaction] = None

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        if self.session is None:
            self.session = self._session_factory()
        self._bind_repositories(self.session)
        if not self._readonly:
            self._transaction = await self.session.begin()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            await super().__aexit__(exc_type, exc, tb)
            if self._readonly and self.session is not None and self.session.in_transaction():
                await self.session.rollback()
        finally:
            await self._release()

    def _bind_repositories(self, session: AsyncSession) -> None:
        self.user_repository = SQLAlchemyUserRepository(session)
        self.message_repository = SQLAlchemyMessageRepository(session)
        self.block_repository = SQLAlchemyBlockRepository(session)
        self.report_repository = SQLAlchemyReportRepository(session)

    async def _release(self) -> None:
        if self._transaction is not None and self._transaction.is_active:
            await self._transaction.rollback()
        self._transaction = None
        # 外部传入的会话由调用方负责关闭
        if self._external_session is None and self.session is not None:
            await self.session.close()
            self.session = None
        self.user_repository = None  # type: ignore[assignment]
        self.message_repository = None  # type: ignore[assignment]
        self.block_repository = None  # type: ignore[assignment]
        self.report_repository = None  # type: ignore[assignment]

    async def commit(self) -> None:
        if self._readonly:
            self._committed = True
            return
        if self.session is not None and self.session.in_transaction():
            await self.session.commit()
        self._committed = True

    async def rollback(self) -> None:
        if self.session is not None and self.session.in_transaction():
            await self.session.rollback()
        self._committed = False
