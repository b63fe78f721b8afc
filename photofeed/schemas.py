"""
Pydantic request / response schemas for the API layer.
Kept separate from ORM models to avoid coupling transport to storage.

FollowRequest, LikeRequest and PostEvent double as event payloads: their
JSON encoding is exactly what lands on the Kafka topics.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

BCRYPT_MAX_PASSWORD_BYTES = 72


# ──────────────────────────── Generic ─────────────────────────────────────

class StatusResponse(BaseModel):
    status: int


class ErrorResponse(BaseModel):
    error: str


# ──────────────────────────── Users ───────────────────────────────────────

class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=BCRYPT_MAX_PASSWORD_BYTES)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        """bcrypt rejects secrets over 72 bytes; multibyte characters count in full."""
        if len(v.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValueError(f"Password exceeds {BCRYPT_MAX_PASSWORD_BYTES} bytes")
        return v


class UserUpdate(BaseModel):
    id: int
    username: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    bio: Optional[str] = None


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    bio: Optional[str] = None
    profile_pic: Optional[str] = None

    class Config:
        from_attributes = True


class FollowerResponse(BaseModel):
    username: str
    profile_pic: Optional[str] = None


# ──────────────────────────── Follows ─────────────────────────────────────

class FollowRequest(BaseModel):
    follower_id: int
    following_id: int


# ──────────────────────────── Likes ───────────────────────────────────────

class LikeRequest(BaseModel):
    user_id: int
    post_id: int


class LikeCountResponse(BaseModel):
    count: int


# ──────────────────────────── Posts ───────────────────────────────────────

class PostEvent(BaseModel):
    user_id: int
    caption: Optional[str] = None
    image_url: str


class PostResponse(BaseModel):
    id: int
    user_id: int
    image_url: str
    caption: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ──────────────────────────── Photos ──────────────────────────────────────

class PhotoUploadResponse(BaseModel):
    filename: str
