"""
屏蔽/举报数据库模型
"""
from sqlalchemy import Column, Integer, DateTime, Index, Text
from datetime import datetime, timezone

from .base import Base


def _utcnow():
    return datetime.now(timezone.utc)


class BlockedUserModel(Base):
    """user_id 屏蔽了 target_id（方向存储，双向校验）"""
    __tablename__ = "blocked_users"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, comment="发起屏蔽的用户")
    target_id = Column(Integer, nullable=False, comment="被屏蔽的用户")
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_blocked_users_pair", "user_id", "target_id"),
        Index("ix_blocked_users_target", "target_id"),
    )


class ReportModel(Base):
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, index=True)
    reporter_id = Column(Integer, nullable=False, index=True, comment="举报人")
    target_id = Column(Integer, nullable=False, index=True, comment="被举报人")
    reason = Column(Text, nullable=True, comment="举报原因")
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)
