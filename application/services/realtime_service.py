"""Application service for realtime WebSocket sessions.

Owns the connection lifecycle (Connected -> Registered -> Disconnected) and
dispatches inbound events. Keeps application logic separate from the
concrete connection management and broadcast transport.
"""
from __future__ import annotations

from typing import Any, Dict
from uuid import uuid4

from application.ports.realtime import Envelope
from application.services.chat_relay import ChatRelay
from application.services.presence import PresenceDirectory
from infrastructure.realtime.connection_manager import ConnectionManager
from core.logging_config import get_logger, bind_connection_context


logger = get_logger(__name__)


class RealtimeService:
    def __init__(
        self,
        *,
        presence: PresenceDirectory,
        connections: ConnectionManager,
        relay: ChatRelay,
    ) -> None:
        self._presence = presence
        self._conn = connections
        self._relay = relay

    # Connection lifecycle management
    async def connect(self, ws: Any) -> str:
        """Accept a new transport connection; it stays unregistered until `register`."""
        connection_id = uuid4().hex
        await self._conn.add(connection_id, ws)
        await self._conn.send_to_connection(
            connection_id,
            Envelope(type="welcome", data={"connectionId": connection_id}),
        )
        logger.info("session_connected", connection_id=connection_id)
        return connection_id

    async def register(self, connection_id: str, user_id: Any) -> bool:
        """Associate the connection with a user and subscribe it to the user's channel.

        Re-registering overwrites: the user's previous connection stops
        receiving the channel, and a connection switching users leaves the
        old channel.
        """
        try:
            result = self._presence.register(user_id, connection_id)
        except ValueError:
            logger.warning("session_register_invalid", connection_id=connection_id, user_id=repr(user_id))
            await self._send_error(connection_id, "register_invalid_user", "A user id is required to register")
            return False

        if result.previous_channel is not None:
            await self._conn.leave(result.previous_channel, connection_id)
        if result.displaced_connection is not None:
            await self._conn.leave(result.channel, result.displaced_connection)
            logger.info(
                "session_displaced",
                user_id=result.channel,
                connection_id=result.displaced_connection,
                by=connection_id,
            )
        await self._conn.join(result.channel, connection_id)
        bind_connection_context(connection_id, result.channel)
        await self._conn.send_to_connection(
            connection_id,
            Envelope(type="registered", data={"userId": result.channel}),
        )
        logger.info("session_registered", user_id=result.channel, connection_id=connection_id)
        return True

    async def disconnect(self, connection_id: str) -> None:
        """Purge presence and channel state for the connection. Safe to call twice."""
        removed = self._presence.unregister(connection_id)
        await self._conn.remove(connection_id)
        logger.info("session_disconnected", connection_id=connection_id, users=list(removed))

    # Inbound events
    async def handle_event(self, connection_id: str, message: Dict[str, Any]) -> None:
        mtype = str(message.get("type") or "")
        data = message.get("data")
        if mtype == "register":
            await self.register(connection_id, data)
        elif mtype == "sendMessage":
            await self._relay.relay(data if isinstance(data, dict) else {})
        elif mtype == "ping":
            await self._conn.send_to_connection(connection_id, Envelope(type="pong"))
        elif mtype == "pong":
            # Client heartbeat reply; nothing else to do.
            return
        else:
            await self._send_error(connection_id, "unknown_type", f"Unknown event type: {mtype or '<empty>'}")

    # Broker callback (cross-process events -> in-process broadcast)
    async def on_broker_event(self, envelope: Envelope) -> None:
        if not envelope.room:
            logger.warning("realtime_event_without_channel", type=envelope.type)
            return
        delivered = await self._conn.broadcast_channel(envelope.room, envelope)
        logger.debug("realtime_event_dispatched", type=envelope.type, channel=envelope.room, delivered=delivered)

    @property
    def presence(self) -> PresenceDirectory:
        return self._presence

    @property
    def connections(self) -> ConnectionManager:
        return self._conn

    @property
    def relay(self) -> ChatRelay:
        return self._relay

    async def _send_error(self, connection_id: str, key: str, message: str) -> None:
        await self._conn.send_to_connection(
            connection_id,
            Envelope(type="error", data={"message": message, "message_key": f"ws.error.{key}"}),
        )
