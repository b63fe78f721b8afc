"""
Social graph endpoints:
  POST   /follow   — follow another user
  DELETE /unfollow — remove a follow edge

Domain errors propagate to the handlers registered in main.py.
"""
from fastapi import APIRouter, Depends, status

from photofeed.dependencies import get_relationship_service
from photofeed.routers.errors import ERRORS
from photofeed.schemas import FollowRequest, StatusResponse
from photofeed.services.follow import RelationshipService

router = APIRouter()


@router.post(
    "/follow",
    response_model=StatusResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERRORS,
)
async def follow(
    body: FollowRequest,
    service: RelationshipService = Depends(get_relationship_service),
):
    """Create a follower → following edge and publish a 'follow' event."""
    await service.follow(body)
    return StatusResponse(status=status.HTTP_201_CREATED)


@router.delete(
    "/unfollow",
    response_model=StatusResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERRORS,
)
async def unfollow(
    body: FollowRequest,
    service: RelationshipService = Depends(get_relationship_service),
):
    """Remove a follow edge and publish an 'unfollow' event."""
    await service.unfollow(body)
    return StatusResponse(status=status.HTTP_201_CREATED)
