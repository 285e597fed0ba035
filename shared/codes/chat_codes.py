"""
Chat/moderation specific codes and relay reason strings.
"""
from __future__ import annotations

from enum import IntEnum


class ChatCode(IntEnum):
    # Chat history errors (7xxxx)
    MESSAGE_NOT_FOUND = 70001
    MESSAGE_NOT_OWNED = 70002
    MESSAGE_REQUIRED = 70003

    # Moderation errors (71xxx)
    MODERATION_TARGET_REQUIRED = 71001
    MODERATION_SELF_TARGET = 71002


# Reasons carried by the outbound `messageBlocked` event
BLOCKED_REASON_USER = "User blocked"
BLOCKED_REASON_STORE_UNAVAILABLE = "Moderation unavailable"
