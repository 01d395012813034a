from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from kafka_sample.core.exceptions import CodecError

ModelT = TypeVar("ModelT", bound=BaseModel)


class Codec(ABC):
    """Converts message values to and from the bytes stored on a topic.

    ``None`` passes through both ways so that tombstone records stay tombstones.
    """

    @abstractmethod
    def serialize(self, value: Any) -> bytes | None: ...

    @abstractmethod
    def deserialize(self, data: bytes | None) -> Any: ...


class StringCodec(Codec):
    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def serialize(self, value: str | None) -> bytes | None:
        if value is None:
            return None
        if not isinstance(value, str):
            raise CodecError(f"StringCodec expects str, got {type(value).__name__}")
        return value.encode(self.encoding)

    def deserialize(self, data: bytes | None) -> str | None:
        if data is None:
            return None
        try:
            return data.decode(self.encoding)
        except UnicodeDecodeError as e:
            raise CodecError(f"Value is not valid {self.encoding}: {str(e)}") from e


class ModelCodec(Codec, Generic[ModelT]):
    """JSON codec for a pydantic model, e.g. ``ModelCodec(Book)``."""

    def __init__(self, model: type[ModelT]):
        self.model = model

    def serialize(self, value: ModelT | None) -> bytes | None:
        if value is None:
            return None
        if not isinstance(value, self.model):
            raise CodecError(f"{self.model.__name__} codec cannot serialize {type(value).__name__}")
        return value.model_dump_json().encode("utf-8")

    def deserialize(self, data: bytes | None) -> ModelT | None:
        if data is None:
            return None
        try:
            return self.model.model_validate_json(data)
        except ValidationError as e:
            raise CodecError(f"Invalid {self.model.__name__} payload: {str(e)}") from e
