"""
Hospital directory model
"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.sql import func
from app.database import Base

HOSPITAL_TYPES = ("Federal", "State", "General", "Private", "Teaching", "Specialist")

class Hospital(Base):
    """Reference data used for registration and report filtering"""
    __tablename__ = "hospitals"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), unique=True, index=True, nullable=False)
    location = Column(String(100), index=True, nullable=False)
    type = Column(String(20), nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Hospital(id={self.id}, name='{self.name}', type='{self.type}')>"
