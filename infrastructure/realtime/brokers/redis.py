"""Redis Pub/Sub based RealtimeBrokerPort implementation.

Publishes to per-channel keys `rt:user:{channel}` and pattern-subscribes
`rt:user:*` so every process receives every channel event and delivers it
to its own local members.
"""
from __future__ import annotations

import asyncio
import json
from typing import Optional

from redis import asyncio as aioredis

from application.ports.realtime import ChannelKey, Envelope, RealtimeBrokerPort, Handler
from core.config import settings
from core.logging_config import get_logger


logger = get_logger(__name__)


class RedisRealtimeBroker(RealtimeBrokerPort):
    PATTERN = "rt:user:*"

    def __init__(self, url: Optional[str] = None) -> None:
        self._url = url or settings.redis.url
        self._task: Optional[asyncio.Task] = None
        self._stopping = asyncio.Event()
        self._handler: Optional[Handler] = None
        self._client: Optional[aioredis.Redis] = None

    @staticmethod
    def _redis_channel(channel: ChannelKey) -> str:
        return f"rt:user:{channel}"

    def _ensure_client(self) -> aioredis.Redis:
        if self._client is None:
            if not self._url:
                raise RuntimeError("REDIS__URL is not configured")
            self._client = aioredis.from_url(
                self._url,
                max_connections=settings.redis.max_connections,
                decode_responses=True,
            )
        return self._client

    async def publish(self, channel: ChannelKey, envelope: Envelope) -> None:  # type: ignore[override]
        client = self._ensure_client()
        if envelope.room != channel:
            envelope = envelope.model_copy(update={"room": channel})
        redis_channel = self._redis_channel(channel)
        await client.publish(redis_channel, json.dumps(envelope.model_dump(mode="json"), ensure_ascii=False))

    async def _listen(self) -> None:
        assert self._client is not None and self._handler is not None
        pubsub = self._client.pubsub()
        try:
            await pubsub.psubscribe(self.PATTERN)
            logger.info("redis_pubsub_subscribed", pattern=self.PATTERN)
            async for message in pubsub.listen():
                if self._stopping.is_set():
                    break
                if message.get("type") != "pmessage":
                    continue
                try:
                    env = Envelope.model_validate_json(message["data"])
                except Exception as exc:  # pragma: no cover
                    logger.warning("redis_pubsub_parse_failed", error=str(exc))
                    continue
                try:
                    await self._handler(env)
                except Exception as exc:  # pragma: no cover
                    logger.warning("redis_pubsub_handler_failed", type=env.type, error=str(exc))
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # pragma: no cover
            logger.error("redis_pubsub_listen_failed", error=str(exc))
        finally:
            await pubsub.aclose()

    async def subscribe(self, handler: Handler) -> None:  # type: ignore[override]
        self._handler = handler
        self._ensure_client()
        self._task = asyncio.create_task(self._listen(), name="redis-realtime-listener")

    async def aclose(self) -> None:  # type: ignore[override]
        self._stopping.set()
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        if self._client is not None:
            await self._client.aclose()
        self._client = None
