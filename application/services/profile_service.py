"""
用户资料应用服务 - KYC 审核结果写入后实时通知用户
"""
from __future__ import annotations

from typing import Callable

from domain.common.exceptions import UserNotFoundException
from domain.common.unit_of_work import AbstractUnitOfWork
from application.dto import UserProfileDTO
from application.services.notification_service import NotificationBroadcaster
from core.logging_config import get_logger


logger = get_logger(__name__)


class ProfileApplicationService:
    def __init__(
        self,
        uow_factory: Callable[..., AbstractUnitOfWork],
        broadcaster: NotificationBroadcaster,
    ) -> None:
        self._uow_factory = uow_factory
        self._broadcaster = broadcaster

    async def get_profile(self, user_id: int) -> UserProfileDTO:
        async with self._uow_factory(readonly=True) as uow:
            user = await uow.user_repository.get_by_id(user_id)
            if user is None:
                raise UserNotFoundException(str(user_id))
            return UserProfileDTO.from_entity(user)

    async def set_kyc_status(self, user_id: int, status: str) -> UserProfileDTO:
        async with self._uow_factory() as uow:
            user = await uow.user_repository.get_by_id(user_id)
            if user is None:
                raise UserNotFoundException(str(user_id))
            user.set_kyc_status(status)
            saved = await uow.user_repository.update(user)
            profile = UserProfileDTO.from_entity(saved)

        logger.info("kyc_status_updated", user_id=user_id, status=profile.kyc_status)
        await self._broadcaster.kyc_verified(
            user_id,
            profile.kyc_status,
            profile.model_dump(mode="json", by_alias=True),
        )
        return profile
