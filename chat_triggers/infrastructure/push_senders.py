# chat_triggers/infrastructure/push_senders.py
import json
import logging
import uuid

import httpx
import redis.asyncio as redis

from chat_triggers.domain.exceptions import PushDeliveryError
from chat_triggers.domain.schemas import PushMessage
from chat_triggers.gateways.interfaces import IPushSender


class RedisPushSender(IPushSender):
    """Queues push messages on a Redis list drained by the delivery gateway."""

    def __init__(self, host: str, port: int, queue_key: str, logger: logging.Logger):
        self.host = host
        self.port = port
        self.queue_key = queue_key
        self.client: redis.Redis | None = None
        self.logger = logger

    async def connect(self):
        self.client = redis.Redis(
            host=self.host,
            port=self.port,
            db=0,
            decode_responses=True,
        )
        try:
            await self.client.ping()
            self.logger.info(
                f"Successfully connected to Redis at {self.host}:{self.port}"
            )
        except redis.ConnectionError as e:
            self.logger.error(f"Failed to connect to Redis: {e!s}")
            self.logger.error(f"Redis host: {self.host}, Redis port: {self.port}")
            raise e

    async def disconnect(self):
        if self.client:
            await self.client.aclose()
            self.logger.info("Disconnected from Redis")

    async def send(self, message: PushMessage) -> str:
        if self.client is None:
            raise RuntimeError("Redis client not connected")
        delivery_id = uuid.uuid4().hex
        envelope = {"id": delivery_id, "message": message.model_dump()}
        try:
            await self.client.rpush(self.queue_key, json.dumps(envelope))
        except redis.RedisError as e:
            raise PushDeliveryError(f"Could not queue push message: {e!s}") from e
        self.logger.debug(f"Queued push message {delivery_id} on {self.queue_key}")
        return delivery_id


class HttpPushSender(IPushSender):
    """Posts push messages to an FCM-v1 style ``messages:send`` endpoint."""

    def __init__(
        self,
        endpoint: str,
        logger: logging.Logger,
        api_key: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport
        self.logger = logger
        self.client: httpx.AsyncClient | None = None

    async def connect(self):
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        self.client = httpx.AsyncClient(
            headers=headers, timeout=self.timeout, transport=self.transport
        )
        self.logger.info(f"Push delivery endpoint: {self.endpoint}")

    async def disconnect(self):
        if self.client:
            await self.client.aclose()
            self.client = None

    async def send(self, message: PushMessage) -> str:
        if self.client is None:
            raise RuntimeError("Push HTTP client not connected")
        try:
            response = await self.client.post(
                self.endpoint, json={"message": message.model_dump()}
            )
        except httpx.HTTPError as e:
            raise PushDeliveryError(f"Push endpoint unreachable: {e!s}") from e
        if response.is_error:
            raise PushDeliveryError(
                f"Push endpoint answered {response.status_code}: {response.text}"
            )
        # Accepted; only a JSON object body carries a message id.
        try:
            body = response.json()
        except ValueError:
            body = None
        return str(body.get("name", "")) if isinstance(body, dict) else ""
