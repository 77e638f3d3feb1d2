"""
User administration endpoints (hospital and state admins)
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
import logging

from app.database import get_db
from app.models.user import User, HOSPITAL_ADMIN
from app.schemas.user import UserResponse, UserListResponse, UserMessageResponse, MessageResponse
from app.services.user_service import UserService
from app.services.activity_logger import ActivityLogger
from app.auth.auth_handler import user_admin_required, state_admin_required
from app.auth.permissions import user_scope_hospital

logger = logging.getLogger(__name__)

router = APIRouter()

def _user_list(users: list[User]) -> UserListResponse:
    return UserListResponse(users=[UserResponse.model_validate(user) for user in users])

@router.get("/pending", response_model=UserListResponse)
async def get_pending_users(
    current_user: User = Depends(user_admin_required),
    db: Session = Depends(get_db)
):
    """Accounts awaiting approval, limited to the admin's hospital for hospital admins"""
    users = await UserService(db).list_users(hospital=user_scope_hospital(current_user), approved=False)
    return _user_list(users)

@router.get("/hospital-admins", response_model=UserListResponse)
async def get_hospital_admins(
    current_user: User = Depends(state_admin_required),
    db: Session = Depends(get_db)
):
    """All hospital admins (state admin only)"""
    users = await UserService(db).list_users(role=HOSPITAL_ADMIN)
    return _user_list(users)

@router.get("", response_model=UserListResponse)
async def get_users(
    current_user: User = Depends(user_admin_required),
    db: Session = Depends(get_db)
):
    """All users visible to the admin"""
    users = await UserService(db).list_users(hospital=user_scope_hospital(current_user))
    return _user_list(users)

@router.patch("/{user_id}/approve", response_model=UserMessageResponse)
async def approve_user(
    request: Request,
    user_id: int,
    current_user: User = Depends(user_admin_required),
    db: Session = Depends(get_db)
):
    """Approve a pending account"""
    try:
        user = await UserService(db).approve_user(current_user, user_id)

        await ActivityLogger(db).log_activity(
            "user_approved", request, 200, user_id=current_user.id,
            details={"target_user_id": user_id}
        )

        return UserMessageResponse(
            message="User approved successfully",
            user=UserResponse.model_validate(user)
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to approve user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Server error approving user")

@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    request: Request,
    user_id: int,
    current_user: User = Depends(user_admin_required),
    db: Session = Depends(get_db)
):
    """Permanently delete an account"""
    try:
        await UserService(db).delete_user(current_user, user_id)

        await ActivityLogger(db).log_activity(
            "user_deleted", request, 200, user_id=current_user.id,
            details={"target_user_id": user_id}
        )

        return MessageResponse(message="User deleted successfully")

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Server error deleting user")
