"""
Report lifecycle: submission, role-scoped listing and admin review
"""

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from fastapi import HTTPException, status
from datetime import datetime
from typing import Optional
import logging
import math

from app.models.user import User
from app.models.report import (
    DTPReport, ReportPhoto, DTP_CATEGORIES, OTHER_CATEGORY, SEVERITY_LEVELS,
    STATUS_SUBMITTED, STATUS_REVIEWED,
)
from app.schemas.report import ReportUpdate
from app.auth.permissions import report_scope, can_view_report, ensure
from app.utils.error_handler import DatabaseError, REQUIRED_FIELDS_MESSAGE

logger = logging.getLogger(__name__)

REQUIRED_REPORT_FIELDS = ("hospital_name", "prescription_details", "dtp_category", "severity")

def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None

def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

class ReportFilters:
    """Optional narrowing filters applied after the role scope"""

    def __init__(
        self,
        hospital: Optional[str] = None,
        category: Optional[str] = None,
        severity: Optional[str] = None,
        status: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None
    ):
        self.hospital = hospital
        self.category = category
        self.severity = severity
        self.status = status
        self.date_from = date_from
        self.date_to = date_to

    def apply(self, query):
        if self.hospital:
            query = query.filter(DTPReport.hospital_name == self.hospital)
        if self.category:
            query = query.filter(DTPReport.dtp_category == self.category)
        if self.severity:
            query = query.filter(DTPReport.severity == self.severity)
        if self.status:
            query = query.filter(DTPReport.status == self.status)
        if self.date_from:
            query = query.filter(DTPReport.created_at >= self.date_from)
        if self.date_to:
            query = query.filter(DTPReport.created_at <= self.date_to)
        return query

class ReportService:
    """Service for DTP report operations"""

    def __init__(self, db: Session):
        self.db = db

    def validate_submission(self, fields: dict) -> dict:
        """Normalize submitted form fields, raising 400 on bad input"""
        cleaned = {key: _clean(value) for key, value in fields.items()}

        if any(not cleaned.get(name) for name in REQUIRED_REPORT_FIELDS):
            raise _bad_request(REQUIRED_FIELDS_MESSAGE)
        if cleaned["dtp_category"] not in DTP_CATEGORIES:
            raise _bad_request(f'DTP category must be one of: {", ".join(DTP_CATEGORIES)}')
        if cleaned["severity"] not in SEVERITY_LEVELS:
            raise _bad_request(f'Severity must be one of: {", ".join(SEVERITY_LEVELS)}')

        if cleaned["dtp_category"] != OTHER_CATEGORY:
            cleaned["custom_category"] = None

        return cleaned

    async def create_report(self, pharmacist: User, fields: dict, photos: list[dict]) -> DTPReport:
        """Persist a validated submission owned by ``pharmacist``"""
        db_report = DTPReport(
            pharmacist_id=pharmacist.id,
            pharmacist_name=pharmacist.name,
            pharmacist_no=pharmacist.phone,
            hospital_name=fields["hospital_name"],
            ward=fields.get("ward"),
            prescription_details=fields["prescription_details"],
            dtp_category=fields["dtp_category"],
            custom_category=fields.get("custom_category"),
            severity=fields["severity"],
            prescribing_doctor=fields.get("prescribing_doctor"),
            comments=fields.get("comments"),
            status=STATUS_SUBMITTED,
            photos=[ReportPhoto(**meta) for meta in photos]
        )

        try:
            self.db.add(db_report)
            self.db.commit()
            self.db.refresh(db_report)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create report: {e}")
            raise DatabaseError(f"Failed to create report: {str(e)}", e)

        logger.info(
            f"Report {db_report.id} submitted by {pharmacist.email} for {db_report.hospital_name} "
            f"({db_report.dtp_category}, {db_report.severity}, {len(db_report.photos)} photos)"
        )
        return db_report

    async def list_reports(
        self,
        user: User,
        filters: ReportFilters,
        page: int = 1,
        limit: int = 50
    ) -> tuple[list[DTPReport], int, int]:
        """Role-scoped, filtered, newest-first page of reports

        Returns the page, the total match count and the page count.
        """
        query = filters.apply(report_scope(self.db.query(DTPReport), user))

        total = query.count()

        offset = (page - 1) * limit
        reports = (
            query.order_by(DTPReport.created_at.desc(), DTPReport.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

        return reports, total, math.ceil(total / limit)

    async def get_report(self, user: User, report_id: int) -> DTPReport:
        report = self.db.query(DTPReport).filter(DTPReport.id == report_id).first()
        if not report:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found")

        ensure(can_view_report(user, report))
        return report

    async def update_report(self, reviewer: User, report_id: int, update: ReportUpdate) -> DTPReport:
        """Set status and/or feedback.

        Any status in REPORT_STATUSES is accepted, including moving backwards.
        Marking a report reviewed or leaving feedback records the reviewer.
        """
        report = await self.get_report(reviewer, report_id)

        if update.status:
            report.status = update.status
        if update.feedback:
            report.feedback = update.feedback

        if update.status == STATUS_REVIEWED or update.feedback:
            report.reviewed_by_id = reviewer.id
            report.reviewed_at = datetime.utcnow()

        try:
            self.db.commit()
            self.db.refresh(report)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to update report {report_id}: {e}")
            raise DatabaseError(f"Failed to update report: {str(e)}", e)

        logger.info(f"Report {report_id} updated by {reviewer.email}: status={report.status}")
        return report

def validate_filter_value(value: Optional[str], allowed: tuple, label: str) -> Optional[str]:
    if value and value not in allowed:
        raise _bad_request(f'{label} must be one of: {", ".join(allowed)}')
    return value
