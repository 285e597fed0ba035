"""
数据传输对象（DTO）- 应用层与表现层之间的数据传输

对外字段统一使用 camelCase（与移动端保持一致），入参同时接受 snake_case。
"""
from pydantic import BaseModel, ConfigDict, Field, model_serializer
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime, timezone

from domain.chat.entity import ChatMessage, Conversation
from domain.user.entity import User


class DTOBase(BaseModel):
    """Base DTO: camelCase aliases and UTC-Z datetime serialization."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_serializer(mode="wrap")
    def _serialize_model(self, handler):  # type: ignore[override]
        data = handler(self)

        def convert(value):
            if isinstance(value, datetime):
                ts = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
                s = ts.astimezone(timezone.utc).isoformat()
                return s.replace("+00:00", "Z")
            if isinstance(value, list):
                return [convert(v) for v in value]
            if isinstance(value, dict):
                return {k: convert(v) for k, v in value.items()}
            return value

        return convert(data)


# ---------------------------------------------------------------- requests

class SendMessageDTO(DTOBase):
    """发送消息（持久化）"""
    receiver_id: Optional[int] = Field(None, description="接收者ID")
    message: Optional[str] = Field(None, description="消息内容")


class EditMessageDTO(DTOBase):
    message: Optional[str] = Field(None, description="新的消息内容，为空则保持不变")


class BlockUserDTO(DTOBase):
    target_id: Optional[int] = Field(None, description="要屏蔽的用户ID")


class ReportUserDTO(DTOBase):
    target_id: Optional[int] = Field(None, description="被举报的用户ID")
    reason: Optional[str] = Field(None, max_length=2000, description="举报原因")


class KycStatusDTO(DTOBase):
    status: str = Field("verified", description="none | pending | verified | rejected")


# --------------------------------------------------------------- responses

class MessageDTO(DTOBase):
    id: int
    sender_id: int
    receiver_id: int
    message: str
    read: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, msg: ChatMessage) -> "MessageDTO":
        return cls(
            id=msg.id,
            sender_id=msg.sender_id,
            receiver_id=msg.receiver_id,
            message=msg.message,
            read=msg.read,
            created_at=msg.created_at,
            updated_at=msg.updated_at,
        )


class ConversationDTO(DTOBase):
    """会话列表项"""
    id: int
    name: Optional[str] = None
    profile_photo: Optional[str] = None
    last_message: str
    updated_at: Optional[datetime] = None
    unread_count: int = 0

    @classmethod
    def from_entity(cls, conv: Conversation) -> "ConversationDTO":
        return cls(
            id=conv.user_id,
            name=conv.name,
            profile_photo=conv.profile_photo,
            last_message=conv.last_message,
            updated_at=conv.updated_at,
            unread_count=conv.unread_count,
        )


class BlockRecordDTO(DTOBase):
    id: int
    user_id: int
    target_id: int
    created_at: Optional[datetime] = None


class ReportDTO(DTOBase):
    id: int
    reporter_id: int
    target_id: int
    reason: Optional[str] = None
    created_at: Optional[datetime] = None


class UserProfileDTO(DTOBase):
    id: int
    name: Optional[str] = None
    phone: Optional[str] = None
    profile_photo: Optional[str] = None
    role: Optional[str] = None
    kyc_status: str
    kyc_verified_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, user: User) -> "UserProfileDTO":
        return cls(
            id=user.id,
            name=user.name,
            phone=user.phone,
            profile_photo=user.profile_photo,
            role=user.role,
            kyc_status=user.kyc_status.value,
            kyc_verified_at=user.kyc_verified_at,
        )


class MarkReadResultDTO(DTOBase):
    updated: int
