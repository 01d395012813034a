import os
from enum import Enum

from pydantic_settings import BaseSettings
from starlette.config import Config

current_file_dir = os.path.dirname(os.path.realpath(__file__))
env_path = os.path.join(current_file_dir, "..", "..", "..", ".env")
config = Config(env_path)


class AppSettings(BaseSettings):
    APP_NAME: str = config("APP_NAME", default="Kafka sample")
    APP_DESCRIPTION: str | None = config("APP_DESCRIPTION", default=None)
    APP_VERSION: str | None = config("APP_VERSION", default=None)
    LICENSE_NAME: str | None = config("LICENSE", default=None)
    CONTACT_NAME: str | None = config("CONTACT_NAME", default=None)
    CONTACT_EMAIL: str | None = config("CONTACT_EMAIL", default=None)


class ServerSettings(BaseSettings):
    HOST: str = config("HOST", default="0.0.0.0")
    PORT: int = config("PORT", cast=int, default=8000)


class LoggingSettings(BaseSettings):
    LOG_LEVEL: str = config("LOG_LEVEL", default="INFO")


class KafkaSettings(BaseSettings):
    KAFKA_BOOTSTRAP_SERVERS: str = config("KAFKA_BOOTSTRAP_SERVERS", default="localhost:9092")
    KAFKA_CLIENT_ID: str = config("KAFKA_CLIENT_ID", default="kafka-sample")
    KAFKA_AUTO_OFFSET_RESET: str = config("KAFKA_AUTO_OFFSET_RESET", default="earliest")

    # Topics for the two sample applications
    KAFKA_STRING_TOPIC: str = config("KAFKA_STRING_TOPIC", default="topic1")  # plain text
    KAFKA_BOOK_TOPIC: str = config("KAFKA_BOOK_TOPIC", default="books")  # Book records

    # Listener id, also used as the consumer group
    KAFKA_LISTENER_ID: str = config("KAFKA_LISTENER_ID", default="myId")
    KAFKA_LISTENER_MAX_ATTEMPTS: int = config("KAFKA_LISTENER_MAX_ATTEMPTS", cast=int, default=10)


class EnvironmentOption(Enum):
    LOCAL = "local"
    STAGING = "staging"
    PRODUCTION = "production"


class EnvironmentSettings(BaseSettings):
    ENVIRONMENT: EnvironmentOption = config("ENVIRONMENT", cast=EnvironmentOption, default="local")


class Settings(
    AppSettings,
    ServerSettings,
    LoggingSettings,
    KafkaSettings,
    EnvironmentSettings,
):
    pass


settings = Settings()
