"""Like edges in the relational store."""
from sqlalchemy import delete, func, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from photofeed.errors import PostAlreadyLiked, PostNotFound
from photofeed.models import Like
from photofeed.storage.conflicts import translate


class LikeStorage:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def insert(self, user_id: int, post_id: int) -> int:
        op = "storage.likes.insert"
        try:
            result = await self.db.execute(
                insert(Like).values(user_id=user_id, post_id=post_id)
            )
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            # A missing user or a missing post both fail the same FK check
            raise translate(
                op,
                exc,
                unique=PostAlreadyLiked(),
                foreign_key=PostNotFound("Post or user not found"),
            ) from exc
        return result.rowcount

    async def delete(self, user_id: int, post_id: int) -> int:
        op = "storage.likes.delete"
        try:
            result = await self.db.execute(
                delete(Like).where(Like.user_id == user_id, Like.post_id == post_id)
            )
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise translate(op, exc) from exc
        return result.rowcount

    async def count(self, post_id: int) -> int:
        op = "storage.likes.count"
        try:
            result = await self.db.execute(
                select(func.count()).select_from(Like).where(Like.post_id == post_id)
            )
        except SQLAlchemyError as exc:
            raise translate(op, exc) from exc
        return result.scalar_one()
