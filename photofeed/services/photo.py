"""
Photo service: object keys, profile pictures and photo download.

Keys are the first 8 bytes of SHA-256 over the upload filename plus a
microsecond timestamp, hex-encoded (16 characters), so re-uploading the same
file name never overwrites an earlier object.
"""
import hashlib
import logging
from datetime import datetime
from typing import Optional

from starlette.concurrency import run_in_threadpool

from photofeed.clients.minio_client import PhotoStore
from photofeed.errors import UserNotFound
from photofeed.storage.users import UserStorage

logger = logging.getLogger(__name__)

PHOTO_URL_PREFIX = "/api/photo/"


def derive_key(filename: str, now: Optional[datetime] = None) -> str:
    stamp = (now or datetime.now()).strftime("%Y-%m-%d_%H-%M-%S.%f")
    digest = hashlib.sha256(f"{filename}{stamp}".encode("utf-8")).digest()
    return digest[:8].hex()


def photo_url(key: str) -> str:
    return f"{PHOTO_URL_PREFIX}{key}"


class PhotoService:
    def __init__(self, store: PhotoStore, users: Optional[UserStorage] = None) -> None:
        self.store = store
        self.users = users

    async def put(self, key: str, data: bytes, content_type: Optional[str] = None) -> None:
        await run_in_threadpool(self.store.put, key, data, content_type)

    async def get_photo(self, key: str) -> bytes:
        return await run_in_threadpool(self.store.get, key)

    async def upload_profile_pic(
        self,
        user_id: int,
        filename: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        """Point the user's profile_pic at a fresh key, then store the bytes."""
        key = derive_key(filename)
        updated = await self.users.update(user_id, {"profile_pic": photo_url(key)})
        if updated == 0:
            raise UserNotFound()

        await self.put(key, data, content_type)
        logger.info("Stored profile picture %s for user %s", key, user_id)
        return key
