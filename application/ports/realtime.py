"""
Realtime port and message DTOs (contracts-first).

This module defines the boundary DTOs and the RealtimeBrokerPort
protocol so the application layer can remain decoupled from the
concrete connection/broadcast implementations (infrastructure).
"""
from __future__ import annotations

from typing import Any, Awaitable, Callable, NewType, Protocol
from pydantic import BaseModel, Field
from datetime import datetime, timezone


ChannelKey = NewType("ChannelKey", str)


def _utc_now_z() -> str:
    ts = datetime.now(timezone.utc)
    s = ts.isoformat()
    return s.replace("+00:00", "Z")


class Envelope(BaseModel):
    """Unified WS event envelope passed around the system.

    Fields:
      - type: event name (register/sendMessage/receiveMessage/messageBlocked/...)
      - room: target channel key; set on envelopes travelling through the broker
      - data: event payload, passed through verbatim (JSON-serializable)
      - ts: server-generated UTC timestamp (ISO8601 with Z)
    """

    type: str
    room: str | None = None
    data: Any = None
    ts: str = Field(default_factory=_utc_now_z)


Handler = Callable[[Envelope], Awaitable[None]]


class RealtimeBrokerPort(Protocol):
    """Abstraction for cross-process channel broadcast.

    Implementations may be in-memory (single process) or Redis pub/sub.
    Every process subscribes and delivers envelopes to its own local
    members of `envelope.room`.
    """

    async def publish(self, channel: ChannelKey, envelope: Envelope) -> None: ...

    async def subscribe(self, handler: Handler) -> None: ...

    async def aclose(self) -> None: ...  # pragma: no cover - optional


__all__ = ["ChannelKey", "Envelope", "RealtimeBrokerPort", "Handler"]
