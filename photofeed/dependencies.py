"""
FastAPI dependency wiring: request-scoped session → storage → service.

Tests swap the leaves (get_db, get_notifier, get_photo_store) through
app.dependency_overrides; everything above them is rebuilt per request.
"""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from photofeed.clients.kafka_producer import EventNotifier, get_notifier
from photofeed.clients.minio_client import PhotoStore, get_photo_store
from photofeed.database import get_db
from photofeed.services.follow import RelationshipService
from photofeed.services.like import EngagementService
from photofeed.services.photo import PhotoService
from photofeed.services.post import ContentService
from photofeed.services.user import UserService
from photofeed.storage.follows import FollowStorage
from photofeed.storage.likes import LikeStorage
from photofeed.storage.posts import PostStorage
from photofeed.storage.users import UserStorage


def get_relationship_service(
    db: AsyncSession = Depends(get_db),
    notifier: EventNotifier = Depends(get_notifier),
) -> RelationshipService:
    return RelationshipService(FollowStorage(db), UserStorage(db), notifier)


def get_engagement_service(
    db: AsyncSession = Depends(get_db),
    notifier: EventNotifier = Depends(get_notifier),
) -> EngagementService:
    return EngagementService(LikeStorage(db), notifier)


def get_photo_service(
    db: AsyncSession = Depends(get_db),
    store: PhotoStore = Depends(get_photo_store),
) -> PhotoService:
    return PhotoService(store, UserStorage(db))


def get_content_service(
    db: AsyncSession = Depends(get_db),
    photos: PhotoService = Depends(get_photo_service),
    notifier: EventNotifier = Depends(get_notifier),
) -> ContentService:
    return ContentService(PostStorage(db), photos, notifier)


def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(UserStorage(db))
