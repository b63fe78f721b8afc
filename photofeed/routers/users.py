"""
User management endpoints:
  POST   /user                 — register a user
  PUT    /user                 — update username / email / bio
  GET    /user/{id}            — fetch a user profile
  DELETE /user/{id}            — delete an account
  GET    /user/{id}/followers  — list followers
  GET    /user/{id}/following  — list followed users
"""
from fastapi import APIRouter, Depends, status

from photofeed.dependencies import get_relationship_service, get_user_service
from photofeed.routers.errors import ERRORS
from photofeed.schemas import (
    FollowerResponse,
    StatusResponse,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from photofeed.services.follow import RelationshipService
from photofeed.services.user import UserService

router = APIRouter()


@router.post(
    "/user",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERRORS,
)
async def register_user(body: UserCreate, service: UserService = Depends(get_user_service)):
    """
    Register a new user.

    The password is bcrypt-hashed before it is stored. A taken email or
    username is reported by the unique constraints as 409.
    """
    return await service.register(body)


@router.put("/user", response_model=UserResponse, responses=ERRORS)
async def update_user(body: UserUpdate, service: UserService = Depends(get_user_service)):
    return await service.update(body)


@router.get("/user/{user_id}", response_model=UserResponse, responses=ERRORS)
async def get_user(user_id: int, service: UserService = Depends(get_user_service)):
    return await service.get(user_id)


@router.delete("/user/{user_id}", response_model=StatusResponse, responses=ERRORS)
async def delete_user(user_id: int, service: UserService = Depends(get_user_service)):
    await service.delete(user_id)
    return StatusResponse(status=status.HTTP_200_OK)


@router.get(
    "/user/{user_id}/followers",
    response_model=list[FollowerResponse],
    responses=ERRORS,
)
async def list_followers(
    user_id: int,
    service: RelationshipService = Depends(get_relationship_service),
):
    return await service.followers(user_id)


@router.get(
    "/user/{user_id}/following",
    response_model=list[FollowerResponse],
    responses=ERRORS,
)
async def list_following(
    user_id: int,
    service: RelationshipService = Depends(get_relationship_service),
):
    return await service.following(user_id)
