import asyncio
import inspect
import traceback
from collections.abc import Awaitable, Callable
from typing import Any

from aiokafka import AIOKafkaConsumer
from aiokafka.structs import ConsumerRecord
from loguru import logger
from tenacity import retry, stop_after_attempt, wait_none

from kafka_sample.core.exceptions import CodecError
from kafka_sample.core.utils.codec import Codec

MessageHandler = Callable[[Any], Awaitable[None] | None]


class ListenerContainer:
    """Runs one registered handler against one topic.

    The container owns its consumer and a single asyncio task iterating it.
    Records that fail to decode are logged and skipped. A handler that raises
    is invoked again immediately, up to ``max_attempts`` times in total, before
    the record is logged and skipped.
    """

    def __init__(
        self,
        listener_id: str,
        topic: str,
        consumer: AIOKafkaConsumer,
        codec: Codec,
        handler: MessageHandler,
        max_attempts: int = 10,
    ):
        self.listener_id = listener_id
        self.topic = topic
        self.consumer = consumer
        self.codec = codec
        self.handler = handler
        self.max_attempts = max_attempts
        self._task: asyncio.Task | None = None
        self._invoke = retry(stop=stop_after_attempt(max_attempts), wait=wait_none(), reraise=True)(
            self._call_handler
        )

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return
        try:
            await self.consumer.start()
        except Exception as e:
            logger.error(f"Listener {self.listener_id} failed to start on topic {self.topic}: {str(e)}")
            await self.consumer.stop()
            raise
        self._task = asyncio.create_task(self._consume(), name=f"listener-{self.listener_id}")
        logger.info(f"Listener {self.listener_id} started on topic {self.topic}")

    async def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        await self.consumer.stop()
        logger.info(f"Listener {self.listener_id} stopped")

    async def _consume(self) -> None:
        logger.debug(f"Listener {self.listener_id} waiting for records on {self.topic}")
        try:
            async for record in self.consumer:
                await self.process_record(record)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Fatal error in listener {self.listener_id}: {str(e)}\n{traceback.format_exc()}")
            raise

    async def process_record(self, record: ConsumerRecord) -> None:
        location = f"{record.topic}-{record.partition}@{record.offset}"
        try:
            payload = self.codec.deserialize(record.value)
        except CodecError as e:
            logger.error(f"Listener {self.listener_id} skipping undecodable record {location}: {str(e)}")
            return

        try:
            await self._invoke(payload)
        except Exception as e:
            logger.error(
                f"Listener {self.listener_id} failed on record {location} after {self.max_attempts} attempts: "
                f"{str(e)}\n{traceback.format_exc()}"
            )

    async def _call_handler(self, payload: Any) -> None:
        result = self.handler(payload)
        if inspect.isawaitable(result):
            await result
