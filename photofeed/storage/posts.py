"""Post metadata in the relational store."""
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from photofeed.errors import UserNotFound
from photofeed.models import Post
from photofeed.storage.conflicts import translate


class PostStorage:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def insert(self, user_id: int, caption: Optional[str], image_url: str) -> Post:
        op = "storage.posts.insert"
        post = Post(user_id=user_id, caption=caption, image_url=image_url)
        try:
            self.db.add(post)
            await self.db.commit()
            await self.db.refresh(post)  # load server-generated timestamps
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise translate(op, exc, foreign_key=UserNotFound("Author not found")) from exc
        return post

    async def get(self, post_id: int) -> Optional[Post]:
        op = "storage.posts.get"
        try:
            return await self.db.get(Post, post_id, populate_existing=True)
        except SQLAlchemyError as exc:
            raise translate(op, exc) from exc

    async def list_all(self) -> list[Post]:
        op = "storage.posts.list_all"
        try:
            rows = await self.db.execute(select(Post).order_by(Post.id))
        except SQLAlchemyError as exc:
            raise translate(op, exc) from exc
        return list(rows.scalars().all())

    async def list_by_user(self, user_id: int) -> list[Post]:
        op = "storage.posts.list_by_user"
        try:
            rows = await self.db.execute(
                select(Post).where(Post.user_id == user_id).order_by(Post.id)
            )
        except SQLAlchemyError as exc:
            raise translate(op, exc) from exc
        return list(rows.scalars().all())

    async def delete(self, post_id: int) -> int:
        op = "storage.posts.delete"
        try:
            result = await self.db.execute(delete(Post).where(Post.id == post_id))
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise translate(op, exc) from exc
        return result.rowcount
