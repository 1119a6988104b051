"""
Users router — the identity records accounts point at.

Endpoints:
  POST   /users            — Create a user
  GET    /users            — List users
  GET    /users/{user_id}  — Get a user
  PUT    /users/{user_id}  — Update username, email or password
  DELETE /users/{user_id}  — Remove a user (owned accounts are kept)

Passwords are hashed on the way in and never returned.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.database import get_db
from ledger.schemas.user import UserCreateRequest, UserResponse, UserUpdateRequest
from ledger.services import user_service

router = APIRouter()


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
)
async def create_user(
    request: UserCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Register a user. Username and email must both be unused (409 otherwise)."""
    return await user_service.create_user(
        db=db,
        username=request.username,
        email=request.email,
        password=request.password,
    )


@router.get("", response_model=list[UserResponse], summary="List users")
async def list_users(db: AsyncSession = Depends(get_db)):
    return await user_service.list_users(db)


@router.get("/{user_id}", response_model=UserResponse, summary="Get a user")
async def get_user(user_id: int, db: AsyncSession = Depends(get_db)):
    return await user_service.get_user(db, user_id)


@router.put("/{user_id}", response_model=UserResponse, summary="Update a user")
async def update_user(
    user_id: int,
    request: UserUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Update any subset of username, email and password."""
    return await user_service.update_user(
        db,
        user_id,
        username=request.username,
        email=request.email,
        password=request.password,
    )


@router.delete("/{user_id}", response_model=UserResponse, summary="Delete a user")
async def delete_user(user_id: int, db: AsyncSession = Depends(get_db)):
    """
    Delete a user and return the removed record.

    Accounts owned by the user are not deleted.
    """
    return await user_service.delete_user(db, user_id)
