"""
User service for registration, authentication and account administration
Handles all user-related business logic
"""

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from fastapi import HTTPException, status
from datetime import datetime
from typing import Optional
import logging

from app.models.user import User, ADMIN_ROLES
from app.models.hospital import Hospital
from app.models.report import DTPReport
from app.schemas.user import UserCreate, UserLogin, PasswordReset
from app.auth.auth_handler import AuthHandler
from app.auth.permissions import can_manage_user, ensure
from app.utils.error_handler import DatabaseError

logger = logging.getLogger(__name__)

class UserService:
    """Service for user management operations"""

    def __init__(self, db: Session):
        self.db = db
        self.auth_handler = AuthHandler()

    async def create_user(self, user_data: UserCreate) -> User:
        """Register a new, unapproved account"""
        existing_user = self.db.query(User).filter(User.email == user_data.email).first()
        if existing_user:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User already exists"
            )

        hospital = self.db.query(Hospital).filter(Hospital.name == user_data.hospital).first()
        if not hospital:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid hospital selection"
            )

        db_user = User(
            name=user_data.name,
            email=user_data.email,
            hashed_password=self.auth_handler.get_password_hash(user_data.password),
            hospital=user_data.hospital,
            phone=user_data.phone,
            registration_number=user_data.registration_number,
            role=user_data.role,
            approved=False
        )

        try:
            self.db.add(db_user)
            self.db.commit()
            self.db.refresh(db_user)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create user: {e}")
            raise DatabaseError(f"Failed to create user account: {str(e)}", e)

        logger.info(f"Registered user {db_user.email} ({db_user.role}) at {db_user.hospital}, awaiting approval")
        return db_user

    async def authenticate_user(self, login_data: UserLogin) -> Optional[User]:
        """Authenticate user credentials

        Returns None for an unknown email or a wrong password. Unapproved
        accounts are refused with 403 before the password is looked at.
        """
        user = await self.get_user_by_email(login_data.email)

        if not user:
            logger.warning(f"Login attempt with non-existent user: {login_data.email}")
            return None

        if not user.approved:
            logger.warning(f"Login attempt with unapproved user: {user.email}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Account not approved yet"
            )

        if not self.auth_handler.verify_password(login_data.password, user.hashed_password):
            logger.warning(f"Failed login attempt for user: {user.email}")
            return None

        try:
            user.last_login = datetime.utcnow()
            self.db.commit()
            self.db.refresh(user)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError(f"Failed to record login: {str(e)}", e)

        logger.info(f"Successful login for user: {user.email}")
        return user

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.lower()).first()

    async def reset_password(self, caller: User, reset_data: PasswordReset) -> Optional[User]:
        """Change the caller's own password, or an admin resets another account.

        Returns the user whose password changed.
        """
        if reset_data.user_id is not None:
            if caller.role not in ADMIN_ROLES:
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="Unauthorized to reset other users password"
                )
            target = await self.get_user_by_id(reset_data.user_id)
            if not target:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Target user not found"
                )
        else:
            target = caller
            if not reset_data.current_password:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Current password is required"
                )
            if not self.auth_handler.verify_password(reset_data.current_password, target.hashed_password):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Current password is incorrect"
                )

        try:
            target.hashed_password = self.auth_handler.get_password_hash(reset_data.new_password)
            target.updated_at = datetime.utcnow()
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to reset password for user {target.id}: {e}")
            raise DatabaseError(f"Failed to reset password: {str(e)}", e)

        logger.info(f"Password reset for user {target.email} by {caller.email}")
        return target

    async def list_users(
        self,
        hospital: Optional[str] = None,
        approved: Optional[bool] = None,
        role: Optional[str] = None
    ) -> list[User]:
        """List users newest first with optional filters"""
        query = self.db.query(User)

        if hospital:
            query = query.filter(User.hospital == hospital)
        if approved is not None:
            query = query.filter(User.approved == approved)
        if role:
            query = query.filter(User.role == role)

        return query.order_by(User.created_at.desc(), User.id.desc()).all()

    async def _get_managed_user(self, admin: User, user_id: int) -> User:
        user = await self.get_user_by_id(user_id)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )
        ensure(can_manage_user(admin, user))
        return user

    async def approve_user(self, admin: User, user_id: int) -> User:
        """Mark an account approved so it can log in"""
        user = await self._get_managed_user(admin, user_id)

        try:
            user.approved = True
            user.updated_at = datetime.utcnow()
            self.db.commit()
            self.db.refresh(user)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to approve user {user_id}: {e}")
            raise DatabaseError(f"Failed to approve user: {str(e)}", e)

        logger.info(f"Admin {admin.email} approved user {user.email}")
        return user

    async def delete_user(self, admin: User, user_id: int) -> bool:
        """Hard delete an account"""
        if admin.id == user_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete your own account"
            )

        user = await self._get_managed_user(admin, user_id)

        try:
            # Reports outlive their author and reviewer; detach them explicitly
            # since SQLite does not enforce ON DELETE SET NULL by default
            self.db.query(DTPReport).filter(DTPReport.pharmacist_id == user.id).update(
                {DTPReport.pharmacist_id: None}, synchronize_session=False
            )
            self.db.query(DTPReport).filter(DTPReport.reviewed_by_id == user.id).update(
                {DTPReport.reviewed_by_id: None}, synchronize_session=False
            )
            self.db.delete(user)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to delete user {user_id}: {e}")
            raise DatabaseError(f"Failed to delete user: {str(e)}", e)

        logger.info(f"Admin {admin.email} deleted user ID: {user_id}")
        return True
