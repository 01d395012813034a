from typing import Annotated

from fastapi import APIRouter, Depends
from loguru import logger

from kafka_sample.core.config import settings
from kafka_sample.core.utils.message_queue import KafkaClient, get_kafka_client
from kafka_sample.schemas.message import PublishResponse, SendMessageRequest

router = APIRouter(tags=["messages"])


@router.post("/messages", response_model=PublishResponse, status_code=202)
async def send_message(
    request: SendMessageRequest,
    client: Annotated[KafkaClient, Depends(get_kafka_client)],
):
    """Send a text message to the string topic."""
    logger.info(f"Sending message to {settings.KAFKA_STRING_TOPIC}: {request.value}")
    await client.publish(settings.KAFKA_STRING_TOPIC, request.value)
    return PublishResponse(topic=settings.KAFKA_STRING_TOPIC)
