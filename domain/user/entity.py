"""
用户领域实体 - 只保留实时/聊天/KYC 需要的字段
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from dataclasses import dataclass

from domain.common.exceptions import DomainValidationException


class KycStatus(str, Enum):
    NONE = "none"
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


@dataclass
class User:
    """用户实体 - 领域核心"""

    id: Optional[int]
    name: Optional[str] = None
    phone: Optional[str] = None
    profile_photo: Optional[str] = None
    role: Optional[str] = None
    kyc_status: KycStatus = KycStatus.NONE
    kyc_verified_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def set_kyc_status(self, status: str) -> None:
        """业务规则：更新 KYC 状态，通过时记录时间"""
        try:
            new_status = KycStatus(str(status).lower())
        except ValueError:
            raise DomainValidationException(
                f"Invalid KYC status: {status}",
                field="status",
                message_key="profile.kyc.status.invalid",
                format_params={"status": status},
            )
        now = datetime.now(timezone.utc)
        self.kyc_status = new_status
        self.kyc_verified_at = now if new_status is KycStatus.VERIFIED else None
        self.updated_at = now

    @property
    def is_admin(self) -> bool:
        return (self.role or "").lower() == "admin"
