"""
Content service — post ingestion and post reads.

Ingestion path (write side):
  1. Persist metadata; the author FK rejects unknown users.
  2. Upload the photo to MinIO under the derived key.
  3. Emit a 'post' event for downstream consumers.
"""
import logging
from typing import Optional

from opentelemetry import trace

from photofeed.config import settings
from photofeed.errors import PhotofeedError, PostNotFound
from photofeed.schemas import PostEvent, PostResponse
from photofeed.services.events import Notifier, emit
from photofeed.services.photo import PhotoService, derive_key, photo_url
from photofeed.storage.posts import PostStorage

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class ContentService:
    def __init__(
        self,
        posts: PostStorage,
        photos: PhotoService,
        notifier: Notifier,
        notify_timeout: Optional[float] = None,
    ) -> None:
        self.posts = posts
        self.photos = photos
        self.notifier = notifier
        self.notify_timeout = (
            settings.notify_timeout_seconds if notify_timeout is None else notify_timeout
        )

    async def create_post(
        self,
        user_id: int,
        caption: Optional[str],
        filename: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> PostResponse:
        with tracer.start_as_current_span("create_post") as span:
            key = derive_key(filename)
            event = PostEvent(user_id=user_id, caption=caption, image_url=photo_url(key))

            post = await self.posts.insert(user_id, caption, event.image_url)
            span.set_attribute("post.id", post.id)
            span.set_attribute("post.user_id", post.user_id)

            try:
                await self.photos.put(key, data, content_type)
            except PhotofeedError:
                # Never leave a post pointing at an object that was not stored
                logger.error("Photo upload failed for post %s, removing it", post.id)
                try:
                    await self.posts.delete(post.id)
                except PhotofeedError as cleanup_exc:
                    logger.error(
                        "Could not remove post %s after failed upload: %s",
                        post.id, cleanup_exc,
                    )
                raise

            await emit(
                self.notifier,
                settings.kafka_topic_post,
                event,
                op="service.post.create_post",
                timeout=self.notify_timeout,
            )

            logger.info("Post created: %s by user %s (%s)", post.id, post.user_id, key)
            return PostResponse.model_validate(post)

    async def get_post(self, post_id: int) -> PostResponse:
        post = await self.posts.get(post_id)
        if post is None:
            raise PostNotFound()
        return PostResponse.model_validate(post)

    async def list_posts(self) -> list[PostResponse]:
        return [PostResponse.model_validate(p) for p in await self.posts.list_all()]

    async def list_user_posts(self, user_id: int) -> list[PostResponse]:
        return [PostResponse.model_validate(p) for p in await self.posts.list_by_user(user_id)]

    async def delete_post(self, post_id: int) -> None:
        deleted = await self.posts.delete(post_id)
        if deleted == 0:
            raise PostNotFound()
        logger.info("Post deleted: %s", post_id)
