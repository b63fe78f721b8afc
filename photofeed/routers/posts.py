"""
Post endpoints:
  POST   /post                 — create a post (multipart: photo, user_id, caption)
  GET    /post/all             — every post
  GET    /post/user/{user_id}  — posts by one author
  GET    /post/{id}            — a single post
  DELETE /post/{id}            — delete a post
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from photofeed.config import settings
from photofeed.dependencies import get_content_service
from photofeed.errors import ValidationError
from photofeed.routers.errors import ERRORS
from photofeed.schemas import PostResponse, StatusResponse
from photofeed.services.post import ContentService

logger = logging.getLogger(__name__)
router = APIRouter()


async def read_upload(upload: UploadFile) -> bytes:
    """Read a multipart file, refusing anything over max_upload_bytes."""
    data = await upload.read(settings.max_upload_bytes + 1)
    if len(data) > settings.max_upload_bytes:
        raise ValidationError(f"Photo exceeds {settings.max_upload_bytes} bytes")
    if not data:
        raise ValidationError("Photo is empty")
    return data


@router.post(
    "/post",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERRORS,
)
async def create_post(
    photo: UploadFile = File(...),
    user_id: int = Form(...),
    caption: Optional[str] = Form(None),
    service: ContentService = Depends(get_content_service),
):
    data = await read_upload(photo)
    logger.debug("Creating post for user %s from %s", user_id, photo.filename)
    return await service.create_post(
        user_id=user_id,
        caption=caption,
        filename=photo.filename or "photo",
        data=data,
        content_type=photo.content_type,
    )


@router.get("/post/all", response_model=list[PostResponse], responses=ERRORS)
async def get_all_posts(service: ContentService = Depends(get_content_service)):
    return await service.list_posts()


@router.get("/post/user/{user_id}", response_model=list[PostResponse], responses=ERRORS)
async def get_user_posts(user_id: int, service: ContentService = Depends(get_content_service)):
    return await service.list_user_posts(user_id)


@router.get("/post/{post_id}", response_model=PostResponse, responses=ERRORS)
async def get_post(post_id: int, service: ContentService = Depends(get_content_service)):
    return await service.get_post(post_id)


@router.delete("/post/{post_id}", response_model=StatusResponse, responses=ERRORS)
async def delete_post(post_id: int, service: ContentService = Depends(get_content_service)):
    await service.delete_post(post_id)
    return StatusResponse(status=status.HTTP_200_OK)
