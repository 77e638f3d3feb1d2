"""
User model for authentication and authorization
"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.sql import func
from app.database import Base

PHARMACIST = "pharmacist"
HOSPITAL_ADMIN = "hospital_admin"
NAFDAC_ADMIN = "nafdac_admin"
STATE_ADMIN = "state_admin"

USER_ROLES = (PHARMACIST, HOSPITAL_ADMIN, NAFDAC_ADMIN, STATE_ADMIN)
ADMIN_ROLES = (HOSPITAL_ADMIN, NAFDAC_ADMIN, STATE_ADMIN)

class User(Base):
    """Registered pharmacist or administrator"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    hospital = Column(String(150), index=True, nullable=False)
    phone = Column(String(30), nullable=True)
    registration_number = Column(String(50), nullable=True)
    role = Column(String(30), default=PHARMACIST, index=True, nullable=False)
    approved = Column(Boolean, default=False, nullable=False)
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}', approved={self.approved})>"
