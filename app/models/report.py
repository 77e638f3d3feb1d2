"""
DTP report and photo attachment models
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base

DTP_CATEGORIES = (
    "Wrong drug",
    "Wrong dose",
    "Wrong frequency/duration",
    "Drug interaction",
    "Allergy/adverse reaction",
    "Monitoring needed",
    "Drug omission",
    "Other",
)
OTHER_CATEGORY = "Other"

SEVERITY_LEVELS = ("mild", "moderate", "severe")

STATUS_SUBMITTED = "submitted"
STATUS_REVIEWED = "reviewed"
STATUS_RESOLVED = "resolved"
REPORT_STATUSES = (STATUS_SUBMITTED, STATUS_REVIEWED, STATUS_RESOLVED)

class DTPReport(Base):
    """Drug therapy problem incident report"""
    __tablename__ = "dtp_reports"

    id = Column(Integer, primary_key=True, index=True)
    pharmacist_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), index=True, nullable=True)
    pharmacist_name = Column(String(100), nullable=False)
    pharmacist_no = Column(String(30), nullable=True)
    hospital_name = Column(String(150), index=True, nullable=False)
    ward = Column(String(100), nullable=True)
    prescription_details = Column(Text, nullable=False)
    dtp_category = Column(String(50), index=True, nullable=False)
    custom_category = Column(String(150), nullable=True)
    severity = Column(String(20), index=True, nullable=False)
    prescribing_doctor = Column(String(100), nullable=True)
    comments = Column(Text, nullable=True)
    status = Column(String(20), default=STATUS_SUBMITTED, index=True, nullable=False)
    feedback = Column(Text, nullable=True)
    reviewed_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    photos = relationship(
        "ReportPhoto",
        back_populates="report",
        cascade="all, delete-orphan",
        order_by="ReportPhoto.id",
        lazy="selectin",
    )
    reviewed_by = relationship("User", foreign_keys=[reviewed_by_id], lazy="joined")

    @property
    def reviewer_name(self):
        return self.reviewed_by.name if self.reviewed_by else None

    def __repr__(self):
        return f"<DTPReport(id={self.id}, hospital='{self.hospital_name}', status='{self.status}')>"

class ReportPhoto(Base):
    """Photo attached to a report, hosted on the external image service"""
    __tablename__ = "report_photos"

    id = Column(Integer, primary_key=True, index=True)
    report_id = Column(Integer, ForeignKey("dtp_reports.id", ondelete="CASCADE"), index=True, nullable=False)
    url = Column(String(500), nullable=True)
    thumbnail_url = Column(String(500), nullable=True)
    file_id = Column(String(100), nullable=True)
    original_name = Column(String(255), nullable=True)
    size = Column(Integer, nullable=True)
    mime_type = Column(String(100), nullable=True)
    upload_date = Column(DateTime(timezone=True), server_default=func.now())

    report = relationship("DTPReport", back_populates="photos")

    def __repr__(self):
        return f"<ReportPhoto(id={self.id}, report_id={self.report_id}, file_id='{self.file_id}')>"
