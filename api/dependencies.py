"""
API依赖项 - 认证、授权与应用服务装配
"""
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional

from application.services.chat_service import ChatApplicationService
from application.services.moderation_service import ModerationApplicationService
from application.services.notification_service import NotificationBroadcaster
from application.services.profile_service import ProfileApplicationService
from application.services.token_service import TokenService, AccessClaims
from core.exceptions import ForbiddenException
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork

# HTTP Bearer for direct API calls
http_bearer = HTTPBearer(
    scheme_name="Bearer",
    description="JWT Bearer token authentication",
    auto_error=False,
)

_token_service = TokenService()


def get_token_service() -> TokenService:
    return _token_service


async def get_token(
    bearer_token: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer)
) -> str:
    """从 Bearer token 中提取 token"""
    if bearer_token and bearer_token.credentials:
        return bearer_token.credentials

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="未提供认证凭据",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_claims(
    token: str = Depends(get_token),
    token_service: TokenService = Depends(get_token_service),
) -> AccessClaims:
    return token_service.verify_access_token(token)


async def get_current_user_id(claims: AccessClaims = Depends(get_current_claims)) -> int:
    """获取当前登录用户ID"""
    return claims.user_id


async def get_current_admin_id(claims: AccessClaims = Depends(get_current_claims)) -> int:
    """获取当前管理员用户ID"""
    if not claims.is_admin:
        raise ForbiddenException("Admin privileges required")
    return claims.user_id


def get_broadcaster(request: Request) -> NotificationBroadcaster:
    """Broadcaster from app state; an unbound one (logs and drops) before realtime starts."""
    broadcaster = getattr(request.app.state, "notification_broadcaster", None)
    if broadcaster is None:
        return NotificationBroadcaster()
    return broadcaster


async def get_chat_service() -> ChatApplicationService:
    return ChatApplicationService(uow_factory=SQLAlchemyUnitOfWork)


async def get_moderation_service(
    broadcaster: NotificationBroadcaster = Depends(get_broadcaster),
) -> ModerationApplicationService:
    return ModerationApplicationService(uow_factory=SQLAlchemyUnitOfWork, broadcaster=broadcaster)


async def get_profile_service(
    broadcaster: NotificationBroadcaster = Depends(get_broadcaster),
) -> ProfileApplicationService:
    return ProfileApplicationService(uow_factory=SQLAlchemyUnitOfWork, broadcaster=broadcaster)
