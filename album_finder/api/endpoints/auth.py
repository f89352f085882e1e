# ============================================================================
# FILE: album_finder/api/endpoints/auth.py
# ============================================================================
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from album_finder.db.session import get_db
from album_finder.api.dependencies import get_user_service, require_current_user
from album_finder.schemas.user import (
    UserCreate,
    UserLogin,
    ProfileUpdate,
    PasswordChange,
    AuthResponse,
    ProfileResponse,
    MessageResponse,
    TokenData,
)
from album_finder.services.user_service import UserService
import logging

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db),
    user_service: UserService = Depends(get_user_service)
):
    """
    Register a new user account
    Returns a JWT together with the new user
    """
    token, user = await user_service.register(db, user_data)
    return {"message": "User registered successfully", "token": token, "user": user}

@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db),
    user_service: UserService = Depends(get_user_service)
):
    """
    Login with email and password
    Returns a JWT together with the user
    """
    token, user = await user_service.login(db, credentials.email, credentials.password)
    return {"message": "Login successful", "token": token, "user": user}

@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    db: AsyncSession = Depends(get_db),
    user_service: UserService = Depends(get_user_service),
    current_user: TokenData = Depends(require_current_user)
):
    """
    Get current user information
    Requires authentication
    """
    user = await user_service.get_profile(db, current_user.id)
    return {"user": user}

@router.put("/profile", response_model=ProfileResponse)
async def update_profile(
    update_data: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    user_service: UserService = Depends(get_user_service),
    current_user: TokenData = Depends(require_current_user)
):
    """
    Change the current user's username
    Requires authentication
    """
    user = await user_service.update_profile(db, current_user.id, update_data.username)
    return {"message": "Profile updated successfully", "user": user}

@router.put("/change-password", response_model=MessageResponse)
async def change_password(
    passwords: PasswordChange,
    db: AsyncSession = Depends(get_db),
    user_service: UserService = Depends(get_user_service),
    current_user: TokenData = Depends(require_current_user)
):
    """
    Change the current user's password
    Requires authentication and the current password
    """
    await user_service.change_password(
        db, current_user.id, passwords.current_password, passwords.new_password
    )
    return {"message": "Password changed successfully"}
