"""
Photo endpoints:
  POST /photo        — upload a profile picture (multipart: photo, id)
  GET  /photo/{key}  — raw photo bytes
"""
from fastapi import APIRouter, Depends, File, Form, Response, UploadFile

from photofeed.dependencies import get_photo_service
from photofeed.routers.errors import ERRORS
from photofeed.routers.posts import read_upload
from photofeed.schemas import PhotoUploadResponse
from photofeed.services.photo import PhotoService

router = APIRouter()


@router.post("/photo", response_model=PhotoUploadResponse, responses=ERRORS)
async def upload_photo(
    photo: UploadFile = File(...),
    user_id: int = Form(..., alias="id"),
    service: PhotoService = Depends(get_photo_service),
):
    data = await read_upload(photo)
    key = await service.upload_profile_pic(
        user_id, photo.filename or "photo", data, photo.content_type
    )
    return PhotoUploadResponse(filename=key)


@router.get(
    "/photo/{key}",
    response_class=Response,
    responses={200: {"content": {"application/octet-stream": {}}}, **ERRORS},
)
async def get_photo(key: str, service: PhotoService = Depends(get_photo_service)):
    data = await service.get_photo(key)
    return Response(content=data, media_type="application/octet-stream")
