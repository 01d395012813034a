import asyncio
import time
from types import SimpleNamespace

import pytest

from kafka_sample.core.utils import message_queue


class FakeBroker:
    """In-memory stand-in for a Kafka cluster: one partition per topic."""

    def __init__(self):
        self.topics: dict[str, list[SimpleNamespace]] = {}
        self.group_offsets: dict[tuple[str, str], int] = {}
        self.fail_sends: Exception | None = None
        self.fail_consumer_start: Exception | None = None
        self.fail_consumer_stop: Exception | None = None
        self.fail_consume: Exception | None = None
        self.producers: list["FakeProducer"] = []
        self.consumers: list["FakeConsumer"] = []

    def append(self, topic: str, key: bytes | None, value: bytes | None) -> SimpleNamespace:
        log = self.topics.setdefault(topic, [])
        record = SimpleNamespace(topic=topic, partition=0, offset=len(log), key=key, value=value)
        log.append(record)
        return record

    def values(self, topic: str) -> list[bytes | None]:
        return [record.value for record in self.topics.get(topic, [])]


class FakeProducer:
    def __init__(self, broker: FakeBroker, bootstrap_servers=None, key_serializer=None, value_serializer=None, **kwargs):
        self.broker = broker
        self.bootstrap_servers = bootstrap_servers
        self.kwargs = kwargs
        self.key_serializer = key_serializer
        self.value_serializer = value_serializer
        self.started = False
        broker.producers.append(self)

    async def start(self):
        self.started = True

    async def stop(self):
        self.started = False

    async def send(self, topic, value=None, key=None):
        assert self.started, "producer is not started"
        if self.key_serializer is not None:
            key = self.key_serializer(key)
        if self.value_serializer is not None:
            value = self.value_serializer(value)

        future = asyncio.get_running_loop().create_future()
        if self.broker.fail_sends is not None:
            future.set_exception(self.broker.fail_sends)
        else:
            record = self.broker.append(topic, key, value)
            future.set_result(SimpleNamespace(topic=topic, partition=record.partition, offset=record.offset))
        return future


class FakeConsumer:
    def __init__(self, broker: FakeBroker, *topics, group_id=None, auto_offset_reset="latest", **kwargs):
        self.broker = broker
        self.topic = topics[0]
        self.group_id = group_id
        self.auto_offset_reset = auto_offset_reset
        self.kwargs = kwargs
        self.started = False
        broker.consumers.append(self)

    @property
    def _offset_key(self) -> tuple[str, str]:
        return (self.group_id, self.topic)

    async def start(self):
        if self.broker.fail_consumer_start is not None:
            raise self.broker.fail_consumer_start
        if self._offset_key not in self.broker.group_offsets:
            start = 0 if self.auto_offset_reset == "earliest" else len(self.broker.topics.get(self.topic, []))
            self.broker.group_offsets[self._offset_key] = start
        self.started = True

    async def stop(self):
        self.started = False
        if self.broker.fail_consumer_stop is not None:
            raise self.broker.fail_consumer_stop

    def __aiter__(self):
        return self

    async def __anext__(self):
        while self.started:
            if self.broker.fail_consume is not None:
                raise self.broker.fail_consume
            log = self.broker.topics.get(self.topic, [])
            offset = self.broker.group_offsets[self._offset_key]
            if offset < len(log):
                self.broker.group_offsets[self._offset_key] = offset + 1
                return log[offset]
            await asyncio.sleep(0.005)
        raise StopAsyncIteration


@pytest.fixture(autouse=True)
def broker(monkeypatch) -> FakeBroker:
    fake = FakeBroker()
    monkeypatch.setattr(
        message_queue, "AIOKafkaProducer", lambda *args, **kwargs: FakeProducer(fake, *args, **kwargs)
    )
    monkeypatch.setattr(
        message_queue, "AIOKafkaConsumer", lambda *args, **kwargs: FakeConsumer(fake, *args, **kwargs)
    )
    return fake


async def wait_for(predicate, timeout: float = 2.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


def wait_for_output(capsys, expected: str, timeout: float = 2.0) -> str:
    """Poll captured stdout from another thread's event loop until ``expected`` shows up."""
    output = ""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        output += capsys.readouterr().out
        if expected in output:
            return output
        time.sleep(0.01)
    raise AssertionError(f"{expected!r} not written to stdout, got {output!r}")
