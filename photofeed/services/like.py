"""
Engagement service: like / unlike / like counts.

The insert is never preceded by an "already liked?" lookup: two
concurrent likes of the same pair race at the store, exactly one insert
wins, and the loser surfaces as PostAlreadyLiked via uq_likes_user_post.
"""
import logging
from typing import Optional

from opentelemetry import trace

from photofeed.config import settings
from photofeed.errors import LikeNotFound, PostAlreadyLiked
from photofeed.schemas import LikeCountResponse, LikeRequest
from photofeed.services.events import Notifier, emit
from photofeed.storage.likes import LikeStorage

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class EngagementService:
    def __init__(
        self,
        likes: LikeStorage,
        notifier: Notifier,
        notify_timeout: Optional[float] = None,
    ) -> None:
        self.likes = likes
        self.notifier = notifier
        self.notify_timeout = (
            settings.notify_timeout_seconds if notify_timeout is None else notify_timeout
        )

    async def like(self, req: LikeRequest) -> None:
        with tracer.start_as_current_span("like_post") as span:
            span.set_attribute("like.user_id", req.user_id)
            span.set_attribute("like.post_id", req.post_id)

            inserted = await self.likes.insert(req.user_id, req.post_id)
            if inserted == 0:
                raise PostAlreadyLiked()
            logger.info("User %s liked post %s", req.user_id, req.post_id)

            await emit(
                self.notifier,
                settings.kafka_topic_like,
                req,
                op="service.like.like",
                timeout=self.notify_timeout,
            )

    async def unlike(self, req: LikeRequest) -> None:
        with tracer.start_as_current_span("unlike_post") as span:
            span.set_attribute("like.user_id", req.user_id)
            span.set_attribute("like.post_id", req.post_id)

            deleted = await self.likes.delete(req.user_id, req.post_id)
            if deleted == 0:
                raise LikeNotFound()
            logger.info("User %s unliked post %s", req.user_id, req.post_id)

            await emit(
                self.notifier,
                settings.kafka_topic_unlike,
                req,
                op="service.like.unlike",
                timeout=self.notify_timeout,
            )

    async def like_count(self, post_id: int) -> LikeCountResponse:
        # Reads never produce events
        return LikeCountResponse(count=await self.likes.count(post_id))
