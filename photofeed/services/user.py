"""
User service: registration, profile reads/updates and account deletion.

Passwords are stored as bcrypt hashes and never leave the service.
Duplicate email/username is detected by the users table's unique
constraints, not by a lookup before the insert.
"""
import logging
from typing import Optional

import bcrypt
from email_validator import EmailNotValidError, validate_email
from opentelemetry import trace

from photofeed.config import settings
from photofeed.errors import InvalidEmailError, UserNotFound
from photofeed.schemas import UserCreate, UserResponse, UserUpdate
from photofeed.storage.users import UserStorage

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def _validate_email(email: str) -> str:
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError as exc:
        logger.info("Rejected email %r: %s", email, exc)
        raise InvalidEmailError() from exc
    return email


class UserService:
    def __init__(self, users: UserStorage) -> None:
        self.users = users

    async def register(self, body: UserCreate) -> UserResponse:
        with tracer.start_as_current_span("register_user"):
            email = _validate_email(body.email)
            user = await self.users.insert(body.username, email, hash_password(body.password))
            logger.info("Created user %s (id=%s)", user.username, user.id)
            return UserResponse.model_validate(user)

    async def get(self, user_id: int) -> UserResponse:
        user = await self.users.get(user_id)
        if user is None:
            raise UserNotFound()
        return UserResponse.model_validate(user)

    async def update(self, body: UserUpdate) -> UserResponse:
        """Partial update: only fields present in the request are written."""
        with tracer.start_as_current_span("update_user"):
            values = body.model_dump(exclude_unset=True, exclude={"id"})
            if values.get("email") is not None:
                _validate_email(values["email"])
            values = {k: v for k, v in values.items() if v is not None or k == "bio"}

            if values:
                updated = await self.users.update(body.id, values)
                if updated == 0:
                    raise UserNotFound()
            return await self.get(body.id)

    async def delete(self, user_id: int) -> None:
        deleted = await self.users.delete(user_id)
        if deleted == 0:
            raise UserNotFound()
        logger.info("Deleted user %s", user_id)
