"""Message relay with a moderation gate.

Forwards one inbound chat message between two users' live channels:
the receiver gets it for delivery, the sender gets an echo to confirm its
optimistic UI. Nothing here persists the message; clients also call the
REST send endpoint, and the two writes are independent.

The block lookup is the only suspension point. Registrations, disconnects and
new block records may land while it is pending, so a user blocked right after
the lookup returns can still get one more message.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Mapping

from application.ports.moderation import BlockLookup
from application.services.notification_service import (
    NotificationBroadcaster,
    EVENT_MESSAGE_BLOCKED,
    EVENT_RECEIVE_MESSAGE,
)
from core.logging_config import get_logger
from shared.codes.chat_codes import BLOCKED_REASON_USER, BLOCKED_REASON_STORE_UNAVAILABLE


logger = get_logger(__name__)


class RelayOutcome(str, Enum):
    DELIVERED = "delivered"
    BLOCKED = "blocked"
    DROPPED = "dropped"


class ModerationErrorPolicy(str, Enum):
    ALLOW = "allow"  # fail-open: a broken store silently disables blocking
    DENY = "deny"


def _missing(value: Any) -> bool:
    return value is None or isinstance(value, bool) or str(value).strip() == ""


class ChatRelay:
    def __init__(
        self,
        *,
        block_lookup: BlockLookup,
        broadcaster: NotificationBroadcaster,
        on_store_error: ModerationErrorPolicy | str = ModerationErrorPolicy.ALLOW,
    ) -> None:
        self._blocks = block_lookup
        self._broadcaster = broadcaster
        self._on_store_error = ModerationErrorPolicy(on_store_error)

    @property
    def on_store_error(self) -> ModerationErrorPolicy:
        return self._on_store_error

    async def relay(self, message: Mapping[str, Any]) -> RelayOutcome:
        """Entry point for an inbound ``sendMessage`` payload."""
        if not isinstance(message, Mapping):
            logger.warning("relay_message_dropped", reason="payload_not_object")
            return RelayOutcome.DROPPED
        return await self.send_message(message.get("senderId"), message.get("receiverId"), message)

    async def send_message(
        self,
        sender_id: int | str | None,
        receiver_id: int | str | None,
        payload: Any,
    ) -> RelayOutcome:
        if _missing(sender_id) or _missing(receiver_id):
            logger.warning(
                "relay_message_dropped",
                reason="participant_missing",
                sender_id=sender_id,
                receiver_id=receiver_id,
            )
            return RelayOutcome.DROPPED

        blocked_reason = await self._blocked_reason(sender_id, receiver_id)
        if blocked_reason is not None:
            await self._broadcaster.notify(
                sender_id,
                EVENT_MESSAGE_BLOCKED,
                {"reason": blocked_reason, "data": payload},
            )
            logger.info("relay_message_blocked", sender_id=sender_id, receiver_id=receiver_id, reason=blocked_reason)
            return RelayOutcome.BLOCKED

        await self._broadcaster.notify(receiver_id, EVENT_RECEIVE_MESSAGE, payload)
        await self._broadcaster.notify(sender_id, EVENT_RECEIVE_MESSAGE, payload)
        logger.info("relay_message_delivered", sender_id=sender_id, receiver_id=receiver_id)
        return RelayOutcome.DELIVERED

    async def _blocked_reason(self, sender_id: int | str, receiver_id: int | str) -> str | None:
        try:
            blocked = await self._blocks.exists(sender_id, receiver_id)
        except Exception as exc:
            logger.error(
                "moderation_lookup_failed",
                sender_id=sender_id,
                receiver_id=receiver_id,
                policy=self._on_store_error.value,
                error=str(exc),
                exc_info=True,
            )
            if self._on_store_error is ModerationErrorPolicy.DENY:
                return BLOCKED_REASON_STORE_UNAVAILABLE
            return None
        return BLOCKED_REASON_USER if blocked else None


__all__ = ["ChatRelay", "RelayOutcome", "ModerationErrorPolicy"]
