"""
Relationship service: follow / unfollow and the follower listings.

Write path, in order:
  1. reject self-reference (no store access)
  2. insert/delete the edge; the store's constraints decide conflicts
  3. publish the request on the 'follow' / 'unfollow' topic

Step 3 only runs once step 2 has committed.
"""
import logging
from typing import Optional

from opentelemetry import trace

from photofeed.config import settings
from photofeed.errors import FollowNotFound, SelfFollowError, SelfUnfollowError, UserNotFound
from photofeed.schemas import FollowerResponse, FollowRequest
from photofeed.services.events import Notifier, emit
from photofeed.storage.follows import FollowStorage
from photofeed.storage.users import UserStorage

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class RelationshipService:
    def __init__(
        self,
        follows: FollowStorage,
        users: UserStorage,
        notifier: Notifier,
        notify_timeout: Optional[float] = None,
    ) -> None:
        self.follows = follows
        self.users = users
        self.notifier = notifier
        self.notify_timeout = (
            settings.notify_timeout_seconds if notify_timeout is None else notify_timeout
        )

    async def follow(self, req: FollowRequest) -> None:
        with tracer.start_as_current_span("follow") as span:
            span.set_attribute("follow.follower_id", req.follower_id)
            span.set_attribute("follow.following_id", req.following_id)

            if req.follower_id == req.following_id:
                raise SelfFollowError()

            await self.follows.insert(req.follower_id, req.following_id)
            logger.info("%s followed %s", req.follower_id, req.following_id)

            await emit(
                self.notifier,
                settings.kafka_topic_follow,
                req,
                op="service.follow.follow",
                timeout=self.notify_timeout,
            )

    async def unfollow(self, req: FollowRequest) -> None:
        with tracer.start_as_current_span("unfollow") as span:
            span.set_attribute("follow.follower_id", req.follower_id)
            span.set_attribute("follow.following_id", req.following_id)

            if req.follower_id == req.following_id:
                raise SelfUnfollowError()

            deleted = await self.follows.delete(req.follower_id, req.following_id)
            if deleted == 0:
                raise FollowNotFound()
            logger.info("%s unfollowed %s", req.follower_id, req.following_id)

            await emit(
                self.notifier,
                settings.kafka_topic_unfollow,
                req,
                op="service.follow.unfollow",
                timeout=self.notify_timeout,
            )

    async def followers(self, user_id: int) -> list[FollowerResponse]:
        if not await self.users.exists(user_id):
            raise UserNotFound()
        rows = await self.follows.list_followers(user_id)
        return [FollowerResponse(username=u, profile_pic=p) for u, p in rows]

    async def following(self, user_id: int) -> list[FollowerResponse]:
        if not await self.users.exists(user_id):
            raise UserNotFound()
        rows = await self.follows.list_following(user_id)
        return [FollowerResponse(username=u, profile_pic=p) for u, p in rows]
