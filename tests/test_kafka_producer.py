from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from photofeed.clients.kafka_producer import EventNotifier


@pytest.mark.asyncio
async def test_publish_waits_for_ack():
    notifier = EventNotifier("kafka.test:9092")
    producer = AsyncMock()
    producer.send_and_wait.return_value = SimpleNamespace(partition=0, offset=41)
    notifier._producer = producer

    await notifier.publish("like", b'{"user_id":1,"post_id":2}')

    producer.send_and_wait.assert_awaited_once_with("like", b'{"user_id":1,"post_id":2}')


@pytest.mark.asyncio
async def test_publish_before_start():
    with pytest.raises(RuntimeError):
        await EventNotifier("kafka.test:9092").publish("like", b"{}")


@pytest.mark.asyncio
async def test_stop_releases_producer():
    notifier = EventNotifier("kafka.test:9092")
    producer = AsyncMock()
    notifier._producer = producer

    await notifier.stop()

    producer.stop.assert_awaited_once()
    with pytest.raises(RuntimeError):
        await notifier.publish("like", b"{}")
