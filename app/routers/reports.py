"""
DTP report endpoints: submission, listing, review and analytics
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request, UploadFile, File, Form
from sqlalchemy.orm import Session
from typing import Optional
from datetime import datetime
import logging

from app.database import get_db
from app.models.user import User
from app.models.report import DTP_CATEGORIES, SEVERITY_LEVELS, REPORT_STATUSES
from app.schemas.report import (
    ReportResponse, ReportUpdate, ReportEnvelope, ReportMessageResponse,
    ReportListResponse, Pagination
)
from app.schemas.analytics import StatsResponse
from app.services.report_service import ReportService, ReportFilters, validate_filter_value
from app.services.analytics_service import AnalyticsService
from app.services.image_storage import get_image_storage
from app.services.photo_upload import read_photos, upload_photos, delete_uploaded_photos
from app.services.activity_logger import ActivityLogger
from app.auth.auth_handler import get_current_user, report_reviewer_required, analytics_required
from app.utils.error_handler import DatabaseError

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("", response_model=ReportMessageResponse, status_code=201)
async def create_report(
    hospital_name: Optional[str] = Form(None, alias="hospitalName"),
    ward: Optional[str] = Form(None),
    prescription_details: Optional[str] = Form(None, alias="prescriptionDetails"),
    dtp_category: Optional[str] = Form(None, alias="dtpCategory"),
    custom_category: Optional[str] = Form(None, alias="customCategory"),
    severity: Optional[str] = Form(None),
    prescribing_doctor: Optional[str] = Form(None, alias="prescribingDoctor"),
    comments: Optional[str] = Form(None),
    photos: Optional[list[UploadFile]] = File(None, description="Up to two image files"),
    current_user: User = Depends(get_current_user),
    storage=Depends(get_image_storage),
    db: Session = Depends(get_db)
):
    """Submit a DTP report with up to two photos"""
    report_service = ReportService(db)

    fields = report_service.validate_submission({
        "hospital_name": hospital_name,
        "ward": ward,
        "prescription_details": prescription_details,
        "dtp_category": dtp_category,
        "custom_category": custom_category,
        "severity": severity,
        "prescribing_doctor": prescribing_doctor,
        "comments": comments,
    })

    photo_files = await read_photos(photos)
    uploaded = await upload_photos(storage, photo_files)

    try:
        report = await report_service.create_report(current_user, fields, uploaded)
    except DatabaseError:
        await delete_uploaded_photos(storage, [meta["file_id"] for meta in uploaded])
        raise

    return ReportMessageResponse(
        message="DTP report submitted successfully",
        report=ReportResponse.model_validate(report)
    )

@router.get("", response_model=ReportListResponse)
async def get_reports(
    hospital: Optional[str] = Query(None, description="Filter by hospital name"),
    category: Optional[str] = Query(None, description="Filter by DTP category"),
    severity: Optional[str] = Query(None, description="Filter by severity"),
    status: Optional[str] = Query(None, description="Filter by status"),
    date_from: Optional[datetime] = Query(None, alias="dateFrom", description="Created on or after"),
    date_to: Optional[datetime] = Query(None, alias="dateTo", description="Created on or before"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(50, ge=1, le=100, description="Items per page"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Reports visible to the caller, newest first"""
    filters = ReportFilters(
        hospital=hospital,
        category=validate_filter_value(category, DTP_CATEGORIES, "Category"),
        severity=validate_filter_value(severity, SEVERITY_LEVELS, "Severity"),
        status=validate_filter_value(status, REPORT_STATUSES, "Status"),
        date_from=date_from,
        date_to=date_to
    )

    reports, total, pages = await ReportService(db).list_reports(current_user, filters, page, limit)

    return ReportListResponse(
        reports=[ReportResponse.model_validate(report) for report in reports],
        pagination=Pagination(current=page, pages=pages, total=total)
    )

@router.get("/analytics/stats", response_model=StatsResponse)
async def get_stats(
    current_user: User = Depends(analytics_required),
    db: Session = Depends(get_db)
):
    """Category, severity, monthly and (state-wide roles) hospital statistics"""
    try:
        return StatsResponse(**AnalyticsService(db).get_stats(current_user))
    except Exception as e:
        logger.error(f"Analytics failed for {current_user.email}: {e}")
        raise HTTPException(status_code=500, detail="Server error fetching analytics")

@router.get("/{report_id}", response_model=ReportEnvelope)
async def get_report(
    report_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a single report the caller is allowed to see"""
    report = await ReportService(db).get_report(current_user, report_id)
    return ReportEnvelope(report=ReportResponse.model_validate(report))

@router.patch("/{report_id}", response_model=ReportMessageResponse)
async def update_report(
    request: Request,
    report_id: int,
    report_update: ReportUpdate,
    current_user: User = Depends(report_reviewer_required),
    db: Session = Depends(get_db)
):
    """Update report status and/or feedback (hospital and state admins)"""
    try:
        report = await ReportService(db).update_report(current_user, report_id, report_update)

        await ActivityLogger(db).log_activity(
            "report_reviewed", request, 200, user_id=current_user.id,
            details={"report_id": report_id, "status": report.status}
        )

        return ReportMessageResponse(
            message="Report updated successfully",
            report=ReportResponse.model_validate(report)
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to update report {report_id}: {e}")
        raise HTTPException(status_code=500, detail="Server error updating report")
