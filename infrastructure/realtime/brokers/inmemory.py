"""In-memory implementation of RealtimeBrokerPort.

Single-process only. Default when no Redis URL is configured, and used in tests.
Handlers run inline in the publisher's task, so a relay publish returns after
the envelope is queued on every local socket in the channel.
"""
from __future__ import annotations

from typing import List

from application.ports.realtime import ChannelKey, Envelope, RealtimeBrokerPort, Handler
from core.logging_config import get_logger


logger = get_logger(__name__)


class InMemoryRealtimeBroker(RealtimeBrokerPort):
    def __init__(self) -> None:
        self._handlers: List[Handler] = []
        self._closed = False

    async def publish(self, channel: ChannelKey, envelope: Envelope) -> None:  # type: ignore[override]
        if self._closed:
            logger.debug("inmemory_broker_closed_drop", channel=channel, type=envelope.type)
            return
        if envelope.room != channel:
            envelope = envelope.model_copy(update={"room": channel})
        for handler in list(self._handlers):
            try:
                await handler(envelope)
            except Exception as exc:
                # one failing subscriber must not starve the others
                logger.warning("inmemory_broker_handler_failed", channel=channel, type=envelope.type, error=str(exc))

    async def subscribe(self, handler: Handler) -> None:  # type: ignore[override]
        self._handlers.append(handler)

    async def aclose(self) -> None:  # type: ignore[override]
        self._closed = True
        self._handlers.clear()
