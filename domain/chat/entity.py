"""
聊天消息领域实体
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from domain.common.exceptions import MessageRequiredException, MessageNotOwnedException


@dataclass
class ChatMessage:
    """A persisted 1:1 chat message.

    The realtime relay never creates these; durable history is written by the
    REST send endpoint, which clients call alongside the socket emit.
    """

    id: Optional[int]
    sender_id: int
    receiver_id: int
    message: str
    read: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not self.receiver_id:
            raise MessageRequiredException("receiver_id")
        if not (self.message or "").strip():
            raise MessageRequiredException("message")

    def ensure_sender(self, user_id: int) -> None:
        """业务规则：只有发送者可以编辑或删除消息"""
        if self.sender_id != user_id:
            raise MessageNotOwnedException(self.id or 0)

    def edit(self, text: Optional[str]) -> None:
        # empty edits keep the previous text
        if text:
            self.message = text
        self.updated_at = datetime.now(timezone.utc)

    def counterpart_of(self, user_id: int) -> int:
        return self.receiver_id if self.sender_id == user_id else self.sender_id


@dataclass
class Conversation:
    """One row of the chat list: latest message with a counterpart."""

    user_id: int
    name: Optional[str]
    profile_photo: Optional[str]
    last_message: str
    updated_at: Optional[datetime]
    unread_count: int = 0
