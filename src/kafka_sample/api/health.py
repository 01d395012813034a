from typing import Annotated

from fastapi import APIRouter, Depends, Response
from loguru import logger

from ..core.utils.message_queue import KafkaClient, get_kafka_client
from ..schemas.message import HealthResponse, ListenerStatus

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health(response: Response, client: Annotated[KafkaClient, Depends(get_kafka_client)]):
    """Report every registered listener; 503 once any of them has stopped consuming."""
    listeners = []
    for listener_id in client.listeners:
        container = client.get_listener(listener_id)
        listeners.append(ListenerStatus(id=listener_id, topic=container.topic, running=container.running))

    if all(listener.running for listener in listeners):
        return HealthResponse(listeners=listeners)

    logger.warning(f"Listeners not running: {[listener.id for listener in listeners if not listener.running]}")
    response.status_code = 503
    return HealthResponse(status="degraded", listeners=listeners)
