"""
令牌服务 - 校验由账户服务签发的 JWT 访问令牌
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
import uuid

import jwt

from core.config import settings
from core.exceptions import UnauthorizedException, TokenExpiredException
from core.logging_config import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class AccessClaims:
    user_id: int
    role: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return (self.role or "").lower() == "admin"


class TokenService:
    """JWT 访问令牌的签发（开发/测试用）与校验"""

    def __init__(self, secret_key: Optional[str] = None, algorithm: Optional[str] = None) -> None:
        self._secret = secret_key or settings.SECRET_KEY
        self._algorithm = algorithm or settings.ALGORITHM

    def create_access_token(self, user_id: int, *, role: Optional[str] = None, expires_minutes: int = 60) -> str:
        expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
        to_encode = {
            "sub": str(user_id),
            "role": role,
            "exp": expire,
            "type": "access",
            "jti": str(uuid.uuid4()),
        }
        return jwt.encode(to_encode, self._secret, algorithm=self._algorithm)

    def verify_access_token(self, token: str) -> AccessClaims:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError:
            raise TokenExpiredException()
        except jwt.PyJWTError as exc:
            logger.info("access_token_invalid", error=str(exc))
            raise UnauthorizedException("Invalid token")

        # 兼容旧令牌：未携带 type 时视为访问令牌
        if payload.get("type", "access") != "access":
            raise UnauthorizedException("Invalid token type")
        sub = payload.get("sub") or payload.get("id")
        try:
            user_id = int(sub)
        except (TypeError, ValueError):
            raise UnauthorizedException("Invalid token subject")
        return AccessClaims(user_id=user_id, role=payload.get("role"))
