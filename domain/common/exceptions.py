"""领域层业务异常定义，供领域与基础设施使用。

核心（core）层仅负责全局映射与异常处理，尽量避免领域层反向依赖核心层。
"""
from __future__ import annotations

from typing import Optional
from shared.codes import BusinessCode
from shared.codes.chat_codes import ChatCode


class BusinessException(Exception):
    """业务异常基类"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
        message_key: Optional[str] = None,
        format_params: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        self.message_key = message_key
        self.format_params = format_params
        super().__init__(self.message)


class UserNotFoundException(BusinessException):
    def __init__(self, user_id: Optional[str] = None):
        details = {"user_id": user_id} if user_id else None
        super().__init__(
            code=BusinessCode.USER_NOT_FOUND,
            message="User not found",
            error_type="UserNotFound",
            details=details,
            message_key="user.not_found",
        )


class DomainValidationException(BusinessException):
    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict | None = None,
        message_key: str | None = None,
        format_params: dict | None = None,
    ):
        super().__init__(
            code=BusinessCode.PARAM_VALIDATION_ERROR,
            message=message,
            error_type="DomainValidationError",
            details=details,
            field=field,
            message_key=message_key or "validation.domain",
            format_params=format_params,
        )


class MessageRequiredException(BusinessException):
    """发送消息缺少接收者或内容"""

    def __init__(self, field: str):
        super().__init__(
            code=ChatCode.MESSAGE_REQUIRED,
            message="Message & Receiver required",
            error_type="MessageRequired",
            field=field,
            message_key="chat.message.required",
        )


class MessageNotFoundException(BusinessException):
    def __init__(self, message_id: Optional[int] = None):
        details = {"message_id": message_id} if message_id is not None else None
        super().__init__(
            code=ChatCode.MESSAGE_NOT_FOUND,
            message="Message not found",
            error_type="MessageNotFound",
            details=details,
            message_key="chat.message.not_found",
        )


class MessageNotOwnedException(BusinessException):
    """只有发送者可以编辑或删除消息"""

    def __init__(self, message_id: int):
        super().__init__(
            code=ChatCode.MESSAGE_NOT_OWNED,
            message="Not authorized",
            error_type="MessageNotOwned",
            details={"message_id": message_id},
            message_key="chat.message.not_owned",
        )


class ModerationTargetRequiredException(BusinessException):
    def __init__(self):
        super().__init__(
            code=ChatCode.MODERATION_TARGET_REQUIRED,
            message="Missing fields: userId or targetId",
            error_type="ModerationTargetRequired",
            field="target_id",
            message_key="moderation.target.required",
        )


class ModerationSelfTargetException(BusinessException):
    def __init__(self, user_id: int):
        super().__init__(
            code=ChatCode.MODERATION_SELF_TARGET,
            message="Cannot block or report yourself",
            error_type="ModerationSelfTarget",
            details={"user_id": user_id},
            field="target_id",
            message_key="moderation.target.self",
        )
