"""
Aggregate statistics over DTP reports
"""

from datetime import date
import logging

from sqlalchemy import func, extract
from sqlalchemy.orm import Session

from app.models.user import User
from app.models.report import DTPReport
from app.auth.permissions import report_scope, UNSCOPED_ROLES

logger = logging.getLogger(__name__)

TOP_HOSPITALS = 10

class AnalyticsService:
    """Recomputes every aggregate per call over the caller's report scope"""

    def __init__(self, db: Session):
        self.db = db

    def _scoped(self, user: User, *columns):
        return report_scope(self.db.query(*columns), user)

    def category_stats(self, user: User) -> list[dict]:
        count = func.count(DTPReport.id)
        rows = (
            self._scoped(user, DTPReport.dtp_category, count)
            .group_by(DTPReport.dtp_category)
            .order_by(count.desc(), DTPReport.dtp_category)
            .all()
        )
        return [{"category": category, "count": total} for category, total in rows]

    def severity_stats(self, user: User) -> list[dict]:
        rows = (
            self._scoped(user, DTPReport.severity, func.count(DTPReport.id))
            .group_by(DTPReport.severity)
            .order_by(DTPReport.severity)
            .all()
        )
        return [{"severity": severity, "count": total} for severity, total in rows]

    def trend_stats(self, user: User) -> list[dict]:
        """Report counts per creation month, oldest first"""
        year = extract("year", DTPReport.created_at)
        month = extract("month", DTPReport.created_at)
        rows = (
            self._scoped(user, year, month, func.count(DTPReport.id))
            .group_by(year, month)
            .order_by(year, month)
            .all()
        )
        return [
            {"date": date(int(y), int(m), 1), "count": total}
            for y, m, total in rows
            if y is not None and m is not None
        ]

    def hospital_stats(self, user: User) -> list[dict]:
        """Top hospitals by report count, only for state-wide roles"""
        if user.role not in UNSCOPED_ROLES:
            return []

        count = func.count(DTPReport.id)
        rows = (
            self._scoped(user, DTPReport.hospital_name, count)
            .group_by(DTPReport.hospital_name)
            .order_by(count.desc(), DTPReport.hospital_name)
            .limit(TOP_HOSPITALS)
            .all()
        )
        return [{"hospital": hospital, "count": total} for hospital, total in rows]

    def get_stats(self, user: User) -> dict:
        stats = {
            "category_stats": self.category_stats(user),
            "severity_stats": self.severity_stats(user),
            "trend_stats": self.trend_stats(user),
            "hospital_stats": self.hospital_stats(user),
        }
        logger.info(f"Computed analytics for {user.email} ({user.role})")
        return stats
