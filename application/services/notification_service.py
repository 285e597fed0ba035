"""Notification broadcaster.

Delivers out-of-band lifecycle events (block, report, KYC) and relay output
to the per-user channel of a target identity. Callers are HTTP handlers and
the relay; neither must ever fail because realtime delivery did, so every
method here logs and swallows errors.
"""
from __future__ import annotations

from typing import Any, Optional

from application.ports.realtime import Envelope, RealtimeBrokerPort
from application.services.presence import channel_for
from core.logging_config import get_logger


logger = get_logger(__name__)


EVENT_RECEIVE_MESSAGE = "receiveMessage"
EVENT_MESSAGE_BLOCKED = "messageBlocked"
EVENT_USER_BLOCKED = "userBlocked"
EVENT_USER_REPORTED = "userReported"
EVENT_KYC_VERIFIED = "kycVerified"


class NotificationBroadcaster:
    def __init__(self, broker: Optional[RealtimeBrokerPort] = None) -> None:
        self._broker = broker

    def bind(self, broker: RealtimeBrokerPort) -> None:
        self._broker = broker

    @property
    def ready(self) -> bool:
        return self._broker is not None

    async def notify(self, target_user_id: int | str, event: str, payload: Any) -> bool:
        """Best-effort publish of ``event`` to the target's channel.

        Returns False when nothing was published. Nobody being registered for
        the channel is not an error: the envelope simply reaches no socket.
        """
        if self._broker is None:
            logger.warning("realtime_not_initialized", event=event, target=str(target_user_id))
            return False
        try:
            channel = channel_for(target_user_id)
        except ValueError:
            logger.warning("notify_target_invalid", event=event, target=repr(target_user_id))
            return False
        try:
            await self._broker.publish(channel, Envelope(type=event, room=channel, data=payload))
        except Exception as exc:
            logger.warning("notify_failed", event=event, channel=channel, error=str(exc), exc_info=True)
            return False
        return True

    async def user_blocked(self, user_id: int, target_id: int) -> None:
        payload = {"userId": user_id, "targetId": target_id}
        await self.notify(user_id, EVENT_USER_BLOCKED, payload)
        await self.notify(target_id, EVENT_USER_BLOCKED, payload)

    async def user_reported(self, reporter_id: int, target_id: int) -> None:
        payload = {"reporterId": reporter_id, "targetId": target_id}
        await self.notify(reporter_id, EVENT_USER_REPORTED, payload)
        await self.notify(target_id, EVENT_USER_REPORTED, payload)

    async def kyc_verified(self, user_id: int, status: str, user: dict) -> None:
        await self.notify(user_id, EVENT_KYC_VERIFIED, {"userId": user_id, "status": status, "user": user})


__all__ = [
    "NotificationBroadcaster",
    "EVENT_RECEIVE_MESSAGE",
    "EVENT_MESSAGE_BLOCKED",
    "EVENT_USER_BLOCKED",
    "EVENT_USER_REPORTED",
    "EVENT_KYC_VERIFIED",
]
