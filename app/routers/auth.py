"""
Authentication endpoints: registration, login, profile and password reset
"""

from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
import logging

from app.config import JWT_EXPIRES_MINUTES
from app.database import get_db
from app.models.user import User
from app.schemas.user import (
    UserCreate, UserLogin, PasswordReset,
    UserResponse, TokenResponse, UserEnvelope, UserMessageResponse, MessageResponse
)
from app.services.user_service import UserService
from app.auth.auth_handler import auth_handler, get_current_user
from app.services.activity_logger import ActivityLogger
from app.utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/register", response_model=UserMessageResponse, status_code=201)
@limiter.limit("5/minute")  # Strict limit to prevent spam registrations
async def register(
    request: Request,
    user_data: UserCreate,
    db: Session = Depends(get_db)
):
    """Register a new account; it stays unusable until an admin approves it"""
    try:
        user_service = UserService(db)
        new_user = await user_service.create_user(user_data)

        await ActivityLogger(db).log_activity(
            "register", request, 201, user_id=new_user.id,
            details={"hospital": new_user.hospital, "role": new_user.role}
        )

        return UserMessageResponse(
            message="Registration successful! Awaiting admin approval.",
            user=UserResponse.model_validate(new_user)
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Registration failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error during registration"
        )

@router.post("/login", response_model=TokenResponse)
@limiter.limit("10/minute")  # Prevent brute force attacks
async def login(
    request: Request,
    login_data: UserLogin,
    db: Session = Depends(get_db)
):
    """Authenticate user and return a bearer token"""
    try:
        user_service = UserService(db)
        activity_logger = ActivityLogger(db)

        try:
            user = await user_service.authenticate_user(login_data)
        except HTTPException as e:
            await activity_logger.log_activity(
                "login_refused", request, e.status_code,
                details={"email": login_data.email, "reason": e.detail}
            )
            raise

        if not user:
            await activity_logger.log_activity(
                "login_failed", request, 400,
                details={"email": login_data.email}
            )
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid credentials"
            )

        access_token = auth_handler.create_user_token(user)

        await activity_logger.log_activity("login", request, 200, user_id=user.id)

        return TokenResponse(
            token=access_token,
            token_type="bearer",
            expires_in=JWT_EXPIRES_MINUTES * 60,
            user=UserResponse.model_validate(user)
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Login failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error during login"
        )

@router.get("/me", response_model=UserEnvelope)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information"""
    return UserEnvelope(user=UserResponse.model_validate(current_user))

@router.patch("/reset-password", response_model=MessageResponse)
@limiter.limit("5/minute")  # Strict limit for password changes
async def reset_password(
    request: Request,
    reset_data: PasswordReset,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Change your own password, or (admins) reset another user's password"""
    try:
        user_service = UserService(db)
        target = await user_service.reset_password(current_user, reset_data)

        await ActivityLogger(db).log_activity(
            "password_reset", request, 200, user_id=current_user.id,
            details={"target_user_id": target.id}
        )

        if target.id != current_user.id:
            return MessageResponse(message="Password reset successfully for target user")
        return MessageResponse(message="Password changed successfully")

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Password reset failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error while resetting password"
        )
