from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from .api import book_router
from .core.config import settings
from .core.logger import setup_logging
from .core.setup import create_application, lifespan_factory
from .core.utils.codec import ModelCodec
from .core.utils.message_queue import ClientConfig, KafkaClient
from .schemas.book import Book


def listen(book: Book) -> None:
    print(book)


async def runner(client: KafkaClient) -> None:
    """Publish the startup book once."""
    book = Book(title="Kafka in Action", author="Dylan Scott, Viktor Gamov, Dave Klein")
    await client.publish(settings.KAFKA_BOOK_TOPIC, book)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    default_lifespan = lifespan_factory(settings)

    async with default_lifespan(app):
        client = KafkaClient(ClientConfig.from_settings(settings, codec=ModelCodec(Book)))
        await client.start()
        app.state.kafka_client = client
        try:
            await client.subscribe(settings.KAFKA_BOOK_TOPIC, settings.KAFKA_LISTENER_ID, listen)
            await runner(client)
            yield
        finally:
            await client.stop()


app = create_application(
    router=book_router, settings=settings, lifespan=lifespan, title=f"{settings.APP_NAME} (books)"
)


def main() -> None:
    setup_logging(settings.LOG_LEVEL)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    main()
