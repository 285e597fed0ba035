"""
聊天消息数据库模型
"""
from sqlalchemy import Column, Integer, Boolean, DateTime, ForeignKey, Index, Text
from datetime import datetime, timezone

from .base import Base


class MessageModel(Base):
    """1:1 聊天消息（持久化历史，实时转发不写此表）"""
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    sender_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, comment="发送者ID")
    receiver_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, comment="接收者ID")
    message = Column(Text, nullable=False, comment="消息内容")
    read = Column(Boolean, default=False, nullable=False, comment="是否已读")

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

    __table_args__ = (
        Index("ix_messages_pair_created", "sender_id", "receiver_id", "created_at"),
        Index("ix_messages_receiver_unread", "receiver_id", "read"),
    )

    def __repr__(self):
        return f"<MessageModel(id={self.id}, sender_id={self.sender_id}, receiver_id={self.receiver_id})>"
