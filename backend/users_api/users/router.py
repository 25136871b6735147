from fastapi import APIRouter, Depends, HTTPException
from pymongo import ReturnDocument
from pymongo.asynchronous.collection import AsyncCollection

from users_api.database import get_users_collection
from users_api.users.models import User, UserCreate, UserRead, UserUpdate
from users_api.users.repository import UserRepository

router = APIRouter(prefix="/users", tags=["users"])


def get_user_repository(
    collection: AsyncCollection = Depends(get_users_collection),
) -> UserRepository:
    return UserRepository(collection)


@router.post("/", response_model=UserRead, status_code=201)
async def create_user(
    user: UserCreate, repo: UserRepository = Depends(get_user_repository)
) -> User:
    """Create a new user."""
    return await repo.create_user(user.model_dump(by_alias=True, exclude_none=True))


@router.get("/", response_model=list[UserRead])
async def get_users(repo: UserRepository = Depends(get_user_repository)) -> list[User]:
    """List all users."""
    return await repo.list_users()


@router.get("/email/{email}", response_model=UserRead)
async def get_user_by_email(
    email: str, repo: UserRepository = Depends(get_user_repository)
) -> User:
    """Get a user by email."""
    user = await repo.get_user_by_email(email)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: str, repo: UserRepository = Depends(get_user_repository)
) -> User:
    """Get a user by ID."""
    user = await repo.get_user_by_id(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.patch("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: str,
    user_update: UserUpdate,
    repo: UserRepository = Depends(get_user_repository),
) -> User:
    """Update a user and return it with the changes applied."""
    user = await repo.update_user_by_id(
        user_id,
        user_update.model_dump(exclude_unset=True),
        return_document=ReturnDocument.AFTER,
    )
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: str, repo: UserRepository = Depends(get_user_repository)
) -> None:
    """Delete a user."""
    user = await repo.delete_user_by_id(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
