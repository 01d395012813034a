from typing import Annotated

from fastapi import APIRouter, Depends
from loguru import logger

from kafka_sample.core.config import settings
from kafka_sample.core.utils.message_queue import KafkaClient, get_kafka_client
from kafka_sample.schemas.book import Book
from kafka_sample.schemas.message import PublishResponse

router = APIRouter(tags=["books"])


@router.post("/books", response_model=PublishResponse, status_code=202)
async def send_book(
    book: Book,
    client: Annotated[KafkaClient, Depends(get_kafka_client)],
):
    """Send a book record to the books topic."""
    logger.info(f"Sending {book} to {settings.KAFKA_BOOK_TOPIC}")
    await client.publish(settings.KAFKA_BOOK_TOPIC, book)
    return PublishResponse(topic=settings.KAFKA_BOOK_TOPIC)
