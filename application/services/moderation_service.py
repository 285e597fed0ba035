"""
屏蔽/举报应用服务 - 持久化记录，然后通知双方并清理聊天记录
"""
from __future__ import annotations

from typing import Callable, Optional

from domain.common.unit_of_work import AbstractUnitOfWork
from domain.moderation.entity import BlockRecord, Report
from application.dto import BlockRecordDTO, ReportDTO
from application.services.notification_service import NotificationBroadcaster
from core.logging_config import get_logger


logger = get_logger(__name__)


class ModerationApplicationService:
    def __init__(
        self,
        uow_factory: Callable[..., AbstractUnitOfWork],
        broadcaster: NotificationBroadcaster,
    ) -> None:
        self._uow_factory = uow_factory
        self._broadcaster = broadcaster

    async def block_user(self, user_id: int, target_id: Optional[int]) -> BlockRecordDTO:
        record = BlockRecord(id=None, user_id=user_id, target_id=target_id)  # validates the pair
        async with self._uow_factory() as uow:
            saved = await uow.block_repository.create(record)

        # the block is committed at this point; follow-ups are best-effort
        await self._broadcaster.user_blocked(saved.user_id, saved.target_id)
        await self._purge_messages(saved.user_id, saved.target_id, cause="block")
        return BlockRecordDTO(
            id=saved.id,
            user_id=saved.user_id,
            target_id=saved.target_id,
            created_at=saved.created_at,
        )

    async def report_user(self, reporter_id: int, target_id: Optional[int], reason: Optional[str] = None) -> ReportDTO:
        report = Report(id=None, reporter_id=reporter_id, target_id=target_id, reason=reason)
        async with self._uow_factory() as uow:
            saved = await uow.report_repository.create(report)

        await self._broadcaster.user_reported(saved.reporter_id, saved.target_id)
        await self._purge_messages(saved.reporter_id, saved.target_id, cause="report")
        return ReportDTO(
            id=saved.id,
            reporter_id=saved.reporter_id,
            target_id=saved.target_id,
            reason=saved.reason,
            created_at=saved.created_at,
        )

    async def _purge_messages(self, user_id: int, other_id: int, *, cause: str) -> int:
        """Clear the chat between the pair so both chat lists drop the conversation."""
        try:
            async with self._uow_factory() as uow:
                return await uow.message_repository.delete_between(user_id, other_id)
        except Exception as exc:
            logger.warning(
                "moderation_message_purge_failed",
                cause=cause,
                user_id=user_id,
                other_id=other_id,
                error=str(exc),
            )
            return 0
