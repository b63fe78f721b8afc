"""
Async Kafka producer — the event notifier.

Publishes one message per successful mutation, on a topic named after the
action:
  follow / unfollow   { follower_id, following_id }
  like / unlike       { user_id, post_id }
  post                { user_id, caption, image_url }

Payloads arrive already JSON-encoded; the producer only moves bytes.
Delivery is at-least-once from our side: downstream consumers must tolerate
duplicates, nothing here deduplicates or retries.
"""
import logging
from typing import Optional

from aiokafka import AIOKafkaProducer

from photofeed.config import settings

logger = logging.getLogger(__name__)


class EventNotifier:
    def __init__(self, bootstrap_servers: str = settings.kafka_bootstrap_servers) -> None:
        self._bootstrap_servers = bootstrap_servers
        self._producer: Optional[AIOKafkaProducer] = None

    async def start(self) -> None:
        self._producer = AIOKafkaProducer(
            bootstrap_servers=self._bootstrap_servers,
            acks="all",          # wait for all in-sync replicas
            enable_idempotence=True,
        )
        await self._producer.start()
        logger.info("Kafka producer started → %s", self._bootstrap_servers)

    async def stop(self) -> None:
        if self._producer:
            await self._producer.stop()
            self._producer = None

    def _get_producer(self) -> AIOKafkaProducer:
        if self._producer is None:
            raise RuntimeError("Kafka producer not initialised")
        return self._producer

    async def publish(self, topic: str, payload: bytes) -> None:
        """Send ``payload`` to ``topic`` and wait for the broker ack."""
        producer = self._get_producer()
        metadata = await producer.send_and_wait(topic, payload)
        logger.info(
            "Message sent topic=%s partition=%s offset=%s",
            topic, metadata.partition, metadata.offset,
        )


# Singleton
notifier = EventNotifier()


def get_notifier() -> EventNotifier:
    """FastAPI dependency; overridden in tests."""
    return notifier
