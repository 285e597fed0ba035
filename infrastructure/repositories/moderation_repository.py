"""
屏蔽/举报仓储实现 - 使用SQLAlchemy实现数据访问
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, or_

from domain.moderation.entity import BlockRecord, Report
from domain.moderation.repository import BlockRepository, ReportRepository
from infrastructure.models.moderation import BlockedUserModel, ReportModel
from core.logging_config import get_logger


logger = get_logger(__name__)


class SQLAlchemyBlockRepository(BlockRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, record: BlockRecord) -> BlockRecord:
        db_record = BlockedUserModel(user_id=record.user_id, target_id=record.target_id)
        self.session.add(db_record)
        await self.session.flush()
        await self.session.refresh(db_record)
        logger.info("user_block_created", user_id=record.user_id, target_id=record.target_id)
        return BlockRecord(
            id=db_record.id,
            user_id=db_record.user_id,
            target_id=db_record.target_id,
            created_at=db_record.created_at,
        )

    async def exists_between(self, a: int, b: int) -> bool:
        result = await self.session.execute(
            select(BlockedUserModel.id)
            .where(
                or_(
                    and_(BlockedUserModel.user_id == a, BlockedUserModel.target_id == b),
                    and_(BlockedUserModel.user_id == b, BlockedUserModel.target_id == a),
                )
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None


class SQLAlchemyReportRepository(ReportRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, report: Report) -> Report:
        db_report = ReportModel(
            reporter_id=report.reporter_id,
            target_id=report.target_id,
            reason=report.reason,
        )
        self.session.add(db_report)
        await self.session.flush()
        await self.session.refresh(db_report)
        logger.info("user_report_created", reporter_id=report.reporter_id, target_id=report.target_id)
        return Report(
            id=db_report.id,
            reporter_id=db_report.reporter_id,
            target_id=db_report.target_id,
            reason=db_report.reason,
            created_at=db_report.created_at,
        )
