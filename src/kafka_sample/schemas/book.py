# src/kafka_sample/schemas/book.py

from pydantic import BaseModel


class Book(BaseModel):
    title: str | None = None
    author: str | None = None

    class Config:
        validate_assignment = True
        json_schema_extra = {
            "example": {
                "title": "Kafka in Action",
                "author": "Dylan Scott, Viktor Gamov, Dave Klein",
            }
        }

    def __str__(self) -> str:
        return f"Book(title={self.title}, author={self.author})"
