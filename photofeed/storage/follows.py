"""
Follow edges in the relational store.

Writes never look the edge up first: the uq_follows_follower_following
constraint and the users foreign keys arbitrate concurrent requests, and
``translate`` turns their violations into domain errors.
"""
from sqlalchemy import delete, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from photofeed.errors import AlreadyFollowed, UserNotFound
from photofeed.models import Follow, User
from photofeed.storage.conflicts import translate


class FollowStorage:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def insert(self, follower_id: int, following_id: int) -> int:
        """Insert the edge and commit. Returns the affected row count."""
        op = "storage.follows.insert"
        try:
            result = await self.db.execute(
                insert(Follow).values(follower_id=follower_id, following_id=following_id)
            )
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise translate(
                op, exc, unique=AlreadyFollowed(), foreign_key=UserNotFound()
            ) from exc
        return result.rowcount

    async def delete(self, follower_id: int, following_id: int) -> int:
        """Delete the edge and commit. Returns the affected row count."""
        op = "storage.follows.delete"
        try:
            result = await self.db.execute(
                delete(Follow).where(
                    Follow.follower_id == follower_id,
                    Follow.following_id == following_id,
                )
            )
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise translate(op, exc) from exc
        return result.rowcount

    async def list_followers(self, user_id: int) -> list[tuple[str, str | None]]:
        """(username, profile_pic) of every user following ``user_id``."""
        op = "storage.follows.list_followers"
        try:
            rows = await self.db.execute(
                select(User.username, User.profile_pic)
                .join(Follow, Follow.follower_id == User.id)
                .where(Follow.following_id == user_id)
                .order_by(Follow.created_at, Follow.id)
            )
        except SQLAlchemyError as exc:
            raise translate(op, exc) from exc
        return [(r.username, r.profile_pic) for r in rows.all()]

    async def list_following(self, user_id: int) -> list[tuple[str, str | None]]:
        """(username, profile_pic) of every user ``user_id`` follows."""
        op = "storage.follows.list_following"
        try:
            rows = await self.db.execute(
                select(User.username, User.profile_pic)
                .join(Follow, Follow.following_id == User.id)
                .where(Follow.follower_id == user_id)
                .order_by(Follow.created_at, Follow.id)
            )
        except SQLAlchemyError as exc:
            raise translate(op, exc) from exc
        return [(r.username, r.profile_pic) for r in rows.all()]
