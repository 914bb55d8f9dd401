from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from rent_tracker.core.dependencies import get_current_user, get_db, get_session_epoch
from rent_tracker.core.security import SessionEpoch
from rent_tracker.schemas.user import AuthOut, PasswordChange, UserCreate, UserLogin, UserOut, UserRegister
from rent_tracker.services.user_queries import get_all_users
from rent_tracker.services.user_service import (
    change_password_service,
    create_user,
    login_user_service,
    register_user_service,
)

router = APIRouter()


@router.post("/register", response_model=AuthOut, status_code=status.HTTP_201_CREATED)
async def register(
    data: UserRegister,
    db: AsyncSession = Depends(get_db),
    epoch: SessionEpoch = Depends(get_session_epoch),
):
    user, token = await register_user_service(db, data, epoch)
    return {"message": "User registered successfully", "token": token, "user": user}


@router.post("/login", response_model=AuthOut)
async def login(
    data: UserLogin,
    db: AsyncSession = Depends(get_db),
    epoch: SessionEpoch = Depends(get_session_epoch),
):
    user, token = await login_user_service(db, data.email, data.password, epoch)
    return {"message": "Login successful", "token": token, "user": user}


@router.post("/logout")
async def logout(current_user = Depends(get_current_user)):
    # tokens are stateless; the client discards its copy
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserOut)
async def me(current_user = Depends(get_current_user)):
    return current_user


@router.put("/change-password")
async def change_password(
    data: PasswordChange,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user),
):
    return await change_password_service(db, current_user.id, data.current_password, data.new_password)


@router.get("/", response_model=List[UserOut])
async def all_users(db: AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    return await get_all_users(db)


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def add_user(
    data: UserCreate,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user),
):
    return await create_user(db, data)
