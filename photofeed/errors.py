"""
Domain error taxonomy.

Errors are classified once, where the storage layer talks to the driver,
and travel unchanged up to the HTTP layer, which maps each kind to a status
code and nothing else:

  ValidationError → 400   rejected before any store access
  NotFoundError   → 404   referenced user/post/edge/object is absent
  ConflictError   → 409   uniqueness violation reported by the store
  InternalError   → 500   unclassified store/infra failure
  NotifyError             publish failed after a persisted write; logged,
                          never surfaced to the client
"""
from typing import Optional


class PhotofeedError(Exception):
    """Base class for every error the services raise on purpose."""

    message = "Internal error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.message)

    @property
    def detail(self) -> str:
        return str(self)


# ─────────────────────────── Validation ──────────────────────────────────

class ValidationError(PhotofeedError):
    message = "Invalid request"


class SelfFollowError(ValidationError):
    message = "Cannot follow yourself"


class SelfUnfollowError(ValidationError):
    message = "Cannot unfollow yourself"


class InvalidEmailError(ValidationError):
    message = "Invalid email"


# ─────────────────────────── Not found ───────────────────────────────────

class NotFoundError(PhotofeedError):
    message = "Not found"


class UserNotFound(NotFoundError):
    message = "User not found"


class PostNotFound(NotFoundError):
    message = "Post not found"


class LikeNotFound(NotFoundError):
    message = "Like not found"


class FollowNotFound(NotFoundError):
    message = "Follow not found"


class PhotoNotFound(NotFoundError):
    message = "No such key"


# ─────────────────────────── Conflicts ───────────────────────────────────

class ConflictError(PhotofeedError):
    message = "Conflict"


class AlreadyFollowed(ConflictError):
    message = "User already followed"


class PostAlreadyLiked(ConflictError):
    message = "Post already liked"


class EmailAlreadyRegistered(ConflictError):
    message = "User with this email already exists"


class UsernameAlreadyRegistered(ConflictError):
    message = "User with this username already exists"


# ─────────────────────────── Infrastructure ──────────────────────────────

class InternalError(PhotofeedError):
    message = "Internal error"


class StorageError(InternalError):
    """Unclassified store failure, tagged with the failing operation."""

    def __init__(self, op: str, cause: BaseException) -> None:
        super().__init__(f"{op}: {cause}")
        self.op = op
        self.cause = cause


class NotifyError(PhotofeedError):
    """An event could not be published after its write was committed."""

    def __init__(self, topic: str, cause: BaseException) -> None:
        super().__init__(f"publish to {topic!r} failed: {cause!r}")
        self.topic = topic
        self.cause = cause
