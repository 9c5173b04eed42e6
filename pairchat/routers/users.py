"""
User endpoints
"""
from typing import List

from fastapi import APIRouter, Body, Depends, HTTPException

from pairchat.context import ChatContext
from pairchat.dependencies import get_context, get_user_service
from pairchat.schemas import RoomResponse, UserCreate, UserResponse
from pairchat.services import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    user: UserCreate = Body(...),
    users: UserService = Depends(get_user_service),
):
    """
        Create a new user
        Request body:
        {
            "username": "alice"
        }
    """
    return await users.create_user(user.username)


@router.get("", response_model=List[UserResponse])
async def list_users(users: UserService = Depends(get_user_service)):
    """Get list of all users"""
    return await users.get_all_users()


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, users: UserService = Depends(get_user_service)):
    """Get specific user"""
    user = await users.get_by_id(user_id)

    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    return user


@router.get("/{user_id}/rooms", response_model=List[RoomResponse])
async def get_user_rooms(user_id: str, context: ChatContext = Depends(get_context)):
    """Get the chat rooms a user takes part in"""
    if not await context.users.get_by_id(user_id):
        raise HTTPException(status_code=404, detail="User not found")

    return await context.rooms.list_for_user(user_id)
