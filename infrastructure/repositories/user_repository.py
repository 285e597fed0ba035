"""
用户仓储实现 - 使用SQLAlchemy实现数据访问
"""
from typing import Dict, Iterable, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from domain.user.entity import User, KycStatus
from domain.user.repository import UserRepository
from infrastructure.models.user import UserModel
from core.logging_config import get_logger
from domain.common.exceptions import UserNotFoundException


logger = get_logger(__name__)


class SQLAlchemyUserRepository(UserRepository):
    """用户仓储的SQLAlchemy实现"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: UserModel) -> User:
        """将数据库模型转换为领域实体"""
        try:
            kyc = KycStatus(model.kyc_status or KycStatus.NONE.value)
        except ValueError:
            kyc = KycStatus.NONE
        return User(
            id=model.id,
            name=model.name,
            phone=model.phone,
            profile_photo=model.profile_photo,
            role=model.role,
            kyc_status=kyc,
            kyc_verified_at=model.kyc_verified_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    async def get_by_id(self, user_id: int) -> Optional[User]:
        """根据ID获取用户"""
        result = await self.session.execute(
            select(UserModel).where(UserModel.id == user_id)
        )
        db_user = result.scalar_one_or_none()
        return self._to_entity(db_user) if db_user else None

    async def get_many(self, user_ids: Iterable[int]) -> Dict[int, User]:
        ids = {int(uid) for uid in user_ids}
        if not ids:
            return {}
        result = await self.session.execute(
            select(UserModel).where(UserModel.id.in_(ids))
        )
        return {m.id: self._to_entity(m) for m in result.scalars().all()}

    async def update(self, user: User) -> User:
        """更新用户"""
        result = await self.session.execute(
            select(UserModel).where(UserModel.id == user.id)
        )
        db_user = result.scalar_one_or_none()
        if not db_user:
            raise UserNotFoundException(str(user.id))

        db_user.name = user.name
        db_user.phone = user.phone
        db_user.profile_photo = user.profile_photo
        db_user.role = user.role
        db_user.kyc_status = user.kyc_status.value
        db_user.kyc_verified_at = user.kyc_verified_at

        await self.session.flush()
        await self.session.refresh(db_user)
        logger.info("user_updated", user_id=user.id, kyc_status=db_user.kyc_status)
        return self._to_entity(db_user)
