from pydantic import BaseModel


class SendMessageRequest(BaseModel):
    value: str

    class Config:
        json_schema_extra = {"example": {"value": "test"}}


class PublishResponse(BaseModel):
    status: str = "accepted"
    topic: str


class ListenerStatus(BaseModel):
    id: str
    topic: str
    running: bool


class HealthResponse(BaseModel):
    status: str = "ok"  # "degraded" when a listener is not running
    listeners: list[ListenerStatus]
