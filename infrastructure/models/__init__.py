"""Infrastructure models package exports."""
from .base import Base, metadata
from .user import UserModel
from .message import MessageModel
from .moderation import BlockedUserModel, ReportModel

__all__ = [
    "Base",
    "metadata",
    "UserModel",
    "MessageModel",
    "BlockedUserModel",
    "ReportModel",
]
