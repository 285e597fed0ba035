"""In-process WebSocket connection manager.

Keeps track of live connections (by server-assigned connection id) and
channel memberships, and provides broadcast helpers for this process.
Cross-process broadcast is handled by a RealtimeBrokerPort implementation.
"""
from __future__ import annotations

import asyncio
from typing import Any, Dict, Set

from application.ports.realtime import ChannelKey, Envelope
from core.logging_config import get_logger
from core.config import settings


logger = get_logger(__name__)


class ConnectionManager:
    """Manage per-process WebSocket connections and channel memberships."""

    def __init__(self) -> None:
        # connection_id -> WebSocket
        self._connections: Dict[str, Any] = {}
        # channel -> set[connection_id]
        self._by_channel: Dict[ChannelKey, Set[str]] = {}
        self._lock = asyncio.Lock()
        # per-connection send queues and sender tasks
        self._send_queues: Dict[str, asyncio.Queue] = {}
        self._sender_tasks: Dict[str, asyncio.Task] = {}

    async def add(self, connection_id: str, ws: Any) -> None:
        async with self._lock:
            self._connections[connection_id] = ws
            if connection_id not in self._send_queues:
                q: asyncio.Queue = asyncio.Queue(maxsize=max(1, int(settings.REALTIME_WS_SEND_QUEUE_MAX)))
                self._send_queues[connection_id] = q
                self._sender_tasks[connection_id] = asyncio.create_task(self._sender_loop(connection_id, ws, q))
        logger.info("ws_connected", connection_id=connection_id)

    async def remove(self, connection_id: str) -> None:
        async with self._lock:
            ws = self._connections.pop(connection_id, None)
            self._leave_all_locked(connection_id)
            task = self._sender_tasks.pop(connection_id, None)
            if task is not None:
                task.cancel()
            self._send_queues.pop(connection_id, None)
        if ws is not None:
            logger.info("ws_removed", connection_id=connection_id)

    async def join(self, channel: ChannelKey, connection_id: str) -> None:
        async with self._lock:
            self._by_channel.setdefault(channel, set()).add(connection_id)
        logger.debug("ws_join_channel", channel=channel, connection_id=connection_id)

    async def leave(self, channel: ChannelKey, connection_id: str) -> None:
        async with self._lock:
            members = self._by_channel.get(channel)
            if members is not None:
                members.discard(connection_id)
                if not members:
                    del self._by_channel[channel]
        logger.debug("ws_leave_channel", channel=channel, connection_id=connection_id)

    async def leave_all(self, connection_id: str) -> None:
        async with self._lock:
            self._leave_all_locked(connection_id)

    def _leave_all_locked(self, connection_id: str) -> None:
        for channel in [c for c, members in self._by_channel.items() if connection_id in members]:
            members = self._by_channel[channel]
            members.discard(connection_id)
            if not members:
                del self._by_channel[channel]

    async def members(self, channel: ChannelKey) -> Set[str]:
        async with self._lock:
            return set(self._by_channel.get(channel, set()))

    def is_connected(self, connection_id: str) -> bool:
        return connection_id in self._connections

    async def send_to_connection(self, connection_id: str, envelope: Envelope) -> bool:
        payload = envelope.model_dump(mode="json")
        return await self._enqueue(connection_id, payload, context={"connection_id": connection_id})

    async def broadcast_channel(self, channel: ChannelKey, envelope: Envelope) -> int:
        """Queue the envelope for every local member; returns how many were queued."""
        async with self._lock:
            targets = list(self._by_channel.get(channel, set()))
        if not targets:
            return 0
        payload = envelope.model_dump(mode="json")
        sent = 0
        for connection_id in targets:
            if await self._enqueue(connection_id, payload, context={"channel": channel}):
                sent += 1
        return sent

    async def _enqueue(self, connection_id: str, payload: dict, context: dict) -> bool:
        q = self._send_queues.get(connection_id)
        if q is None:
            return False
        try:
            q.put_nowait(payload)
            return True
        except asyncio.QueueFull:
            policy = (settings.REALTIME_WS_SEND_OVERFLOW_POLICY or "drop_oldest").lower()
            if policy not in {"drop_oldest", "drop_new", "disconnect"}:
                logger.warning("ws_send_queue_policy_invalid", policy=policy, fallback="drop_oldest")
                policy = "drop_oldest"
            if policy == "drop_new":
                logger.warning("ws_send_queue_drop_new", **context)
                return False
            if policy == "disconnect":
                logger.warning("ws_send_queue_disconnect", **context)
                ws = self._connections.get(connection_id)
                if ws is not None:
                    try:
                        await ws.close(code=1013)
                    except Exception as exc:
                        logger.debug("ws_close_failed", error=str(exc), **context)
                return False
            # default: drop_oldest
            try:
                q.get_nowait()
                q.task_done()
            except asyncio.QueueEmpty:
                pass
            try:
                q.put_nowait(payload)
                return True
            except asyncio.QueueFull:
                logger.warning("ws_send_queue_drop_after_trim", **context)
                return False

    async def flush(self, timeout: float | None = None) -> None:
        """Wait until every queued payload has been handed to its socket."""
        async with self._lock:
            queues = list(self._send_queues.values())
        if not queues:
            return
        await asyncio.wait_for(asyncio.gather(*(q.join() for q in queues)), timeout=timeout)

    async def aclose(self) -> None:
        try:
            await self.flush(timeout=2.0)
        except asyncio.TimeoutError:
            logger.warning("ws_flush_timeout")
        async with self._lock:
            for task in self._sender_tasks.values():
                task.cancel()
            self._sender_tasks.clear()
            self._send_queues.clear()
            self._connections.clear()
            self._by_channel.clear()

    async def _sender_loop(self, connection_id: str, ws: Any, q: asyncio.Queue) -> None:
        try:
            while True:
                payload = await q.get()
                try:
                    await ws.send_json(payload)
                except Exception as exc:  # pragma: no cover
                    logger.warning("ws_send_failed", connection_id=connection_id, error=str(exc))
                finally:
                    q.task_done()
        except asyncio.CancelledError:  # graceful exit
            return
