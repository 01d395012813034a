from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from .api import string_router
from .core.config import settings
from .core.logger import setup_logging
from .core.setup import create_application, lifespan_factory
from .core.utils.codec import StringCodec
from .core.utils.message_queue import ClientConfig, KafkaClient


def listen(message: str) -> None:
    print(message)


async def runner(client: KafkaClient) -> None:
    """Publish the startup message once."""
    await client.publish(settings.KAFKA_STRING_TOPIC, "test")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    default_lifespan = lifespan_factory(settings)

    async with default_lifespan(app):
        client = KafkaClient(ClientConfig.from_settings(settings, codec=StringCodec()))
        await client.start()
        app.state.kafka_client = client
        try:
            await client.subscribe(settings.KAFKA_STRING_TOPIC, settings.KAFKA_LISTENER_ID, listen)
            await runner(client)
            yield
        finally:
            await client.stop()


app = create_application(
    router=string_router, settings=settings, lifespan=lifespan, title=f"{settings.APP_NAME} (strings)"
)


def main() -> None:
    setup_logging(settings.LOG_LEVEL)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    main()
