import asyncio
from functools import partial
from typing import Any

from aiokafka import AIOKafkaConsumer, AIOKafkaProducer
from fastapi import HTTPException, Request
from loguru import logger
from pydantic import BaseModel

from kafka_sample.core.config import Settings
from kafka_sample.core.exceptions import KafkaClientNotStartedError
from kafka_sample.core.utils.codec import Codec
from kafka_sample.core.worker.listener import ListenerContainer, MessageHandler


class ClientConfig(BaseModel):
    """Everything needed to build a :class:`KafkaClient`."""

    bootstrap_servers: str = "localhost:9092"
    client_id: str = "kafka-sample"
    auto_offset_reset: str = "earliest"
    listener_max_attempts: int = 10
    codec: Codec

    class Config:
        arbitrary_types_allowed = True

    @classmethod
    def from_settings(cls, settings: Settings, codec: Codec) -> "ClientConfig":
        return cls(
            bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
            client_id=settings.KAFKA_CLIENT_ID,
            auto_offset_reset=settings.KAFKA_AUTO_OFFSET_RESET,
            listener_max_attempts=settings.KAFKA_LISTENER_MAX_ATTEMPTS,
            codec=codec,
        )


def _encode_key(key: str | None) -> bytes | None:
    return key.encode("utf-8") if key is not None else None


def _check_channel(channel: str) -> None:
    if not isinstance(channel, str) or not channel:
        raise ValueError("Channel name must be a non-empty string")


def _log_send_result(channel: str, future: asyncio.Future) -> None:
    if future.cancelled():
        return
    error = future.exception()
    if error is not None:
        logger.error(f"Failed to send message to {channel}: {str(error)}")
        return
    metadata = future.result()
    logger.debug(f"Message delivered to {channel}-{metadata.partition}@{metadata.offset}")


class KafkaClient:
    """Producer plus the listener containers registered on it."""

    def __init__(self, config: ClientConfig):
        self.config = config
        self._producer: AIOKafkaProducer | None = None
        self._containers: dict[str, ListenerContainer] = {}

    @property
    def running(self) -> bool:
        return self._producer is not None

    @property
    def listeners(self) -> list[str]:
        return list(self._containers)

    def get_listener(self, listener_id: str) -> ListenerContainer | None:
        return self._containers.get(listener_id)

    async def start(self) -> None:
        """Start the producer and every registered listener."""
        if self.running:
            return
        producer = AIOKafkaProducer(
            bootstrap_servers=self.config.bootstrap_servers,
            client_id=self.config.client_id,
            key_serializer=_encode_key,
            value_serializer=self.config.codec.serialize,
        )
        try:
            await producer.start()
        except Exception as e:
            logger.error(f"Failed to connect to Kafka producer at {self.config.bootstrap_servers}: {str(e)}")
            raise
        self._producer = producer
        logger.info(f"Kafka client {self.config.client_id} connected to {self.config.bootstrap_servers}")

        try:
            for container in self._containers.values():
                await container.start()
        except Exception as e:
            logger.error(f"Failed to start listeners, stopping Kafka client {self.config.client_id}: {str(e)}")
            await self.stop()
            raise

    async def stop(self) -> None:
        """Stop every listener, then flush and close the producer."""
        try:
            for container in self._containers.values():
                await container.stop()
        finally:
            if self._producer is not None:
                producer, self._producer = self._producer, None
                await producer.stop()
                logger.info(f"Kafka client {self.config.client_id} stopped")

    async def subscribe(self, channel: str, listener_id: str, callback: MessageHandler) -> ListenerContainer:
        """Register ``callback`` on ``channel`` under ``listener_id``.

        The listener id doubles as the consumer group id. On a running client
        the listener starts immediately, otherwise it starts with the client.
        """
        _check_channel(channel)
        if not listener_id:
            raise ValueError("Listener id must be a non-empty string")
        if listener_id in self._containers:
            raise ValueError(f"Listener {listener_id} is already registered")

        consumer = AIOKafkaConsumer(
            channel,
            bootstrap_servers=self.config.bootstrap_servers,
            client_id=f"{self.config.client_id}-{listener_id}",
            group_id=listener_id,
            auto_offset_reset=self.config.auto_offset_reset,
        )
        container = ListenerContainer(
            listener_id=listener_id,
            topic=channel,
            consumer=consumer,
            codec=self.config.codec,
            handler=callback,
            max_attempts=self.config.listener_max_attempts,
        )
        # a listener is only registered once its consumer could start
        if self.running:
            await container.start()
        self._containers[listener_id] = container
        logger.debug(f"Registered listener {listener_id} on topic {channel}")
        return container

    async def publish(self, channel: str, payload: Any, key: str | None = None) -> asyncio.Future:
        """Hand one message to the producer's send queue.

        Returns the delivery future without waiting on it. A failed delivery
        is logged by the client.
        """
        _check_channel(channel)
        if self._producer is None:
            raise KafkaClientNotStartedError("Kafka producer is not started")

        logger.debug(f"Publishing to {channel}: {payload}")
        future = await self._producer.send(channel, payload, key=key)
        future.add_done_callback(partial(_log_send_result, channel))
        return future


def get_kafka_client(request: Request) -> KafkaClient:
    """Get the Kafka client started by the application lifespan."""
    client = getattr(request.app.state, "kafka_client", None)
    if client is None or not client.running:
        raise HTTPException(status_code=500, detail="Kafka client is not initialized")
    return client
