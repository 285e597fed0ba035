"""WebSocket route for the chat relay.

One persistent connection per client. The client registers its user id,
then sends `sendMessage` events; the server pushes relay output and
moderation/KYC notifications on the same socket.

Heartbeat: the server sends a JSON ping when idle and closes after a
configurable number of missed pongs, so half-open connections leave the
presence directory.
"""
from __future__ import annotations

import asyncio
import contextlib
import json

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from application.services.realtime_service import RealtimeService
from application.ports.realtime import Envelope
from core.logging_config import get_logger, bind_connection_context, clear_connection_context
from core.config import settings


logger = get_logger(__name__)


router = APIRouter(prefix="/ws", tags=["WebSocket"])


def get_realtime_service_from_app(ws: WebSocket) -> RealtimeService | None:
    return getattr(ws.app.state, "realtime_service", None)


@router.websocket("")
async def websocket_endpoint(ws: WebSocket) -> None:
    rt = get_realtime_service_from_app(ws)
    if rt is None:
        logger.error("realtime_not_initialized", message="lifespan did not set app.state.realtime_service")
        await ws.close(code=1011)
        return

    await ws.accept()
    connection_id = await rt.connect(ws)
    bind_connection_context(connection_id)
    try:
        idle_ping_interval = float(settings.REALTIME_WS_IDLE_PING_INTERVAL_S)
        pong_grace = float(settings.REALTIME_WS_PONG_GRACE_S)
        missed_limit = int(settings.REALTIME_WS_MISSED_PING_LIMIT)

        missed = 0
        while True:
            if idle_ping_interval and idle_ping_interval > 0:
                try:
                    raw = await asyncio.wait_for(ws.receive_text(), timeout=idle_ping_interval)
                except asyncio.TimeoutError:
                    # Idle: send ping and wait a short grace for response
                    missed += 1
                    await rt.connections.send_to_connection(connection_id, Envelope(type="ping"))
                    try:
                        raw = await asyncio.wait_for(ws.receive_text(), timeout=pong_grace)
                        missed = 0
                    except asyncio.TimeoutError:
                        if missed > missed_limit:
                            logger.info("ws_heartbeat_timeout", connection_id=connection_id, missed=missed)
                            await ws.close(code=1001)
                            break
                        continue
            else:
                raw = await ws.receive_text()

            try:
                msg = json.loads(raw)
            except ValueError as exc:
                logger.warning("ws_bad_frame", connection_id=connection_id, error=str(exc))
                await _send_bad_frame(rt, connection_id, "Event must be valid JSON")
                continue
            if not isinstance(msg, dict):
                logger.warning("ws_bad_frame", connection_id=connection_id, frame_type=type(msg).__name__)
                await _send_bad_frame(rt, connection_id, "Event must be a JSON object")
                continue
            await rt.handle_event(connection_id, msg)
    except WebSocketDisconnect:
        logger.info("ws_client_disconnected", connection_id=connection_id)
    except Exception as exc:
        logger.error("ws_error", connection_id=connection_id, error=str(exc), exc_info=True)
        # The client may already be gone
        with contextlib.suppress(RuntimeError, WebSocketDisconnect):
            await ws.close(code=1011)
    finally:
        await rt.disconnect(connection_id)
        clear_connection_context()


async def _send_bad_frame(rt: RealtimeService, connection_id: str, message: str) -> None:
    await rt.connections.send_to_connection(
        connection_id,
        Envelope(type="error", data={"message": message, "message_key": "ws.error.bad_frame"}),
    )
