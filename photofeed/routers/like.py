"""
Engagement endpoints:
  POST   /like           — like a post
  DELETE /like           — remove a like
  GET    /like/{post_id} — like count for a post
"""
from fastapi import APIRouter, Depends, status

from photofeed.dependencies import get_engagement_service
from photofeed.routers.errors import ERRORS
from photofeed.schemas import LikeCountResponse, LikeRequest, StatusResponse
from photofeed.services.like import EngagementService

router = APIRouter()


@router.post(
    "/like",
    response_model=StatusResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERRORS,
)
async def like_post(
    body: LikeRequest,
    service: EngagementService = Depends(get_engagement_service),
):
    await service.like(body)
    return StatusResponse(status=status.HTTP_201_CREATED)


@router.delete("/like", response_model=StatusResponse, responses=ERRORS)
async def unlike_post(
    body: LikeRequest,
    service: EngagementService = Depends(get_engagement_service),
):
    await service.unlike(body)
    return StatusResponse(status=status.HTTP_200_OK)


@router.get("/like/{post_id}", response_model=LikeCountResponse, responses=ERRORS)
async def get_likes(
    post_id: int,
    service: EngagementService = Depends(get_engagement_service),
):
    return await service.like_count(post_id)
