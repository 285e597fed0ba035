"""
用户数据库模型 - SQLAlchemy ORM模型
注意：用户表由账户服务维护，这里只映射聊天/KYC 需要的列
"""
from sqlalchemy import Column, Integer, String, DateTime
from datetime import datetime, timezone

from .base import Base


class UserModel(Base):
    """
    用户数据库模型

    这是数据库表的映射，不包含业务逻辑
    所有业务规则都在 domain.user.entity.User 中
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(100), nullable=True, comment="姓名")
    phone = Column(String(20), nullable=True, index=True, comment="手机号")
    profile_photo = Column(String(1024), nullable=True, comment="头像URL")
    role = Column(String(20), nullable=True, comment="角色：seeker/provider/admin")

    kyc_status = Column(String(20), default="none", nullable=False, comment="KYC状态：none/pending/verified/rejected")
    kyc_verified_at = Column(DateTime(timezone=True), nullable=True, comment="KYC通过时间")

    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="创建时间"
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="更新时间"
    )

    def __repr__(self):
        return f"<UserModel(id={self.id}, name='{self.name}', kyc_status='{self.kyc_status}')>"
