"""User accounts in the relational store."""
from typing import Any, Optional

from sqlalchemy import select, update, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from photofeed.errors import (
    ConflictError,
    EmailAlreadyRegistered,
    PhotofeedError,
    UsernameAlreadyRegistered,
)
from photofeed.models import User
from photofeed.storage.conflicts import Violation, classify, translate

EMAIL_CONSTRAINT = "uq_users_email"


class UserStorage:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _duplicate(
        self,
        violation_constraint: Optional[str],
        email: Optional[str],
        user_id: Optional[int],
    ) -> ConflictError:
        """Tell an email clash from a username clash.

        Drivers that report the violated constraint settle it directly. The
        others (MySQL, SQLite) only give an error code, so the email is
        looked up after the failed insert; this lookup only picks the
        message, the constraint already decided the outcome.
        """
        if violation_constraint is not None:
            if violation_constraint == EMAIL_CONSTRAINT:
                return EmailAlreadyRegistered()
            return UsernameAlreadyRegistered()
        if email is not None:
            query = select(User.id).where(User.email == email)
            if user_id is not None:
                query = query.where(User.id != user_id)
            taken = await self.db.scalar(query)
            if taken is not None:
                return EmailAlreadyRegistered()
        return UsernameAlreadyRegistered()

    async def _failed(
        self,
        op: str,
        exc: SQLAlchemyError,
        email: Optional[str],
        user_id: Optional[int] = None,
    ) -> PhotofeedError:
        await self.db.rollback()
        if isinstance(exc, IntegrityError):
            violation = classify(exc)
            if violation.kind is Violation.UNIQUE:
                conflict = await self._duplicate(violation.constraint, email, user_id)
                return translate(op, exc, unique=conflict)
        return translate(op, exc)

    async def insert(self, username: str, email: str, password_hash: str) -> User:
        op = "storage.users.insert"
        user = User(username=username, email=email, password=password_hash)
        try:
            self.db.add(user)
            await self.db.commit()
            await self.db.refresh(user)
        except SQLAlchemyError as exc:
            raise await self._failed(op, exc, email) from exc
        return user

    async def get(self, user_id: int) -> Optional[User]:
        op = "storage.users.get"
        try:
            return await self.db.get(User, user_id, populate_existing=True)
        except SQLAlchemyError as exc:
            raise translate(op, exc) from exc

    async def exists(self, user_id: int) -> bool:
        op = "storage.users.exists"
        try:
            found = await self.db.scalar(select(User.id).where(User.id == user_id))
        except SQLAlchemyError as exc:
            raise translate(op, exc) from exc
        return found is not None

    async def update(self, user_id: int, values: dict[str, Any]) -> int:
        """Apply ``values`` to the user row and commit. Returns the row count."""
        op = "storage.users.update"
        try:
            result = await self.db.execute(
                update(User).where(User.id == user_id).values(**values)
            )
            await self.db.commit()
        except SQLAlchemyError as exc:
            raise await self._failed(op, exc, values.get("email"), user_id) from exc
        return result.rowcount

    async def delete(self, user_id: int) -> int:
        op = "storage.users.delete"
        try:
            result = await self.db.execute(delete(User).where(User.id == user_id))
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise translate(op, exc) from exc
        return result.rowcount
