"""
Authentication and authorization handler
Issues and verifies bearer tokens and gates routes by role
"""

from datetime import datetime, timedelta
from typing import Optional
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from passlib.context import CryptContext
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.config import SECRET_KEY, JWT_ALGORITHM, JWT_EXPIRES_MINUTES, BCRYPT_ROUNDS
from app.database import get_db
from app.models.user import User, HOSPITAL_ADMIN, NAFDAC_ADMIN, STATE_ADMIN

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)
security = HTTPBearer(auto_error=False)

class AuthHandler:
    """Handles password hashing and token issuing"""

    def __init__(self):
        self.pwd_context = pwd_context

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash"""
        return self.pwd_context.verify(plain_password, hashed_password)

    def get_password_hash(self, password: str) -> str:
        """Hash a password"""
        return self.pwd_context.hash(password)

    def create_access_token(self, data: dict, expires_delta: Optional[timedelta] = None):
        """Create a JWT access token"""
        to_encode = data.copy()
        if expires_delta:
            expire = datetime.utcnow() + expires_delta
        else:
            expire = datetime.utcnow() + timedelta(minutes=JWT_EXPIRES_MINUTES)

        to_encode.update({"exp": expire, "iat": datetime.utcnow()})
        encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=JWT_ALGORITHM)
        return encoded_jwt

    def create_user_token(self, user: User) -> str:
        """Token embedding the user's id, email and role"""
        return self.create_access_token({
            "sub": str(user.id),
            "email": user.email,
            "role": user.role,
        })

    def verify_token(self, token: str) -> dict:
        """Verify and decode a JWT token"""
        try:
            payload = jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
            return payload
        except JWTError:
            raise _credentials_exception("Token is not valid")

auth_handler = AuthHandler()

def _credentials_exception(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )

def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """Dependency resolving the bearer token to an existing user"""
    if credentials is None:
        raise _credentials_exception("No token, authorization denied")

    payload = auth_handler.verify_token(credentials.credentials)

    user_id = payload.get("sub")
    if user_id is None or not str(user_id).isdigit():
        raise _credentials_exception()

    user = db.query(User).filter(User.id == int(user_id)).first()
    if user is None:
        raise _credentials_exception("Token is not valid")

    return user

# Role-based access control
class RoleChecker:
    """Check user roles for authorization"""

    def __init__(self, allowed_roles: list):
        self.allowed_roles = allowed_roles

    def __call__(self, user: User = Depends(get_current_user)) -> User:
        if user.role not in self.allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied. Insufficient permissions."
            )
        return user

# Common role checkers
user_admin_required = RoleChecker([HOSPITAL_ADMIN, STATE_ADMIN])
report_reviewer_required = RoleChecker([HOSPITAL_ADMIN, STATE_ADMIN])
analytics_required = RoleChecker([HOSPITAL_ADMIN, NAFDAC_ADMIN, STATE_ADMIN])
state_admin_required = RoleChecker([STATE_ADMIN])
