"""
Pydantic schemas for DTP report operations
"""

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime

from app.models.report import REPORT_STATUSES

class PhotoResponse(BaseModel):
    """Hosted photo metadata"""
    url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    file_id: Optional[str] = None
    original_name: Optional[str] = None
    size: Optional[int] = None
    mime_type: Optional[str] = None
    upload_date: Optional[datetime] = None

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True

class ReportResponse(BaseModel):
    """Schema for report responses"""
    id: int
    pharmacist_id: Optional[int] = None
    pharmacist_name: str
    pharmacist_no: Optional[str] = None
    hospital_name: str
    ward: Optional[str] = None
    prescription_details: str
    dtp_category: str
    custom_category: Optional[str] = None
    severity: str
    prescribing_doctor: Optional[str] = None
    comments: Optional[str] = None
    photos: list[PhotoResponse] = []
    status: str
    feedback: Optional[str] = None
    reviewed_by_id: Optional[int] = None
    reviewer_name: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True

class ReportUpdate(BaseModel):
    """Schema for admin review of a report"""
    status: Optional[str] = Field(None, description="New status")
    feedback: Optional[str] = Field(None, description="Reviewer feedback")

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        if v is None:
            return v
        if v not in REPORT_STATUSES:
            raise ValueError(f'Status must be one of: {", ".join(REPORT_STATUSES)}')
        return v

    @field_validator('feedback')
    @classmethod
    def strip_feedback(cls, v):
        if v is None:
            return v
        return v.strip() or None

class ReportEnvelope(BaseModel):
    report: ReportResponse

class ReportMessageResponse(BaseModel):
    message: str
    report: ReportResponse

class Pagination(BaseModel):
    current: int
    pages: int
    total: int

class ReportListResponse(BaseModel):
    """Schema for paginated report list responses"""
    reports: list[ReportResponse]
    pagination: Pagination
