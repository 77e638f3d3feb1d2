"""
Pydantic schemas for user operations
"""

from pydantic import BaseModel, Field, field_validator, EmailStr
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime

from app.models.user import USER_ROLES, PHARMACIST

MIN_PASSWORD_LENGTH = 6

def _validate_password_length(v: str) -> str:
    if len(v) < MIN_PASSWORD_LENGTH:
        raise ValueError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters')
    return v

class UserCreate(BaseModel):
    """Schema for registering a new account"""
    name: str = Field(..., min_length=1, max_length=100, description="Full name")
    email: EmailStr = Field(..., description="Valid email address")
    password: str = Field(..., min_length=1, max_length=128, description="Password (minimum 6 characters)")
    hospital: str = Field(..., min_length=1, max_length=150, description="Hospital name from the directory")
    role: str = Field(..., description=f"User role, usually {PHARMACIST}")
    registration_number: str = Field(..., min_length=1, max_length=50, description="Professional registration number")
    phone: str = Field(..., min_length=1, max_length=30, description="Phone number")

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        str_strip_whitespace = True

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.lower()

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        return _validate_password_length(v)

    @field_validator('role')
    @classmethod
    def validate_role(cls, v):
        if v not in USER_ROLES:
            raise ValueError(f'Role must be one of: {", ".join(USER_ROLES)}')
        return v

class UserLogin(BaseModel):
    """Schema for user login"""
    email: str = Field(..., min_length=1, description="Email address")
    password: str = Field(..., min_length=1, description="Password")

    class Config:
        str_strip_whitespace = True

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.lower()

class PasswordReset(BaseModel):
    """Schema for resetting a password

    Without ``user_id`` the caller changes their own password and must supply
    ``current_password``. With ``user_id`` an administrator sets the password
    of another account.
    """
    current_password: Optional[str] = Field(None, description="Current password (self service)")
    new_password: str = Field(..., description="New password")
    user_id: Optional[int] = Field(None, description="Target user (admin reset)")

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @field_validator('new_password')
    @classmethod
    def validate_new_password(cls, v):
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f'New password must be at least {MIN_PASSWORD_LENGTH} characters long')
        return v

class UserResponse(BaseModel):
    """Schema for user responses (excludes sensitive data)"""
    id: int
    name: str
    email: str
    hospital: str
    phone: Optional[str] = None
    registration_number: Optional[str] = None
    role: str
    approved: bool
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True

class TokenResponse(BaseModel):
    """Schema for authentication token response"""
    token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse

    class Config:
        alias_generator = to_camel
        populate_by_name = True

class UserEnvelope(BaseModel):
    user: UserResponse

class UserMessageResponse(BaseModel):
    message: str
    user: UserResponse

class UserListResponse(BaseModel):
    """Schema for user list responses"""
    users: list[UserResponse]

class MessageResponse(BaseModel):
    message: str
