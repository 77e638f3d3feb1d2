"""
Activity logging service for auditing authentication and admin actions
"""

from fastapi import Request
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from app.models.activity_log import ActivityLog
import json
import logging
from typing import Optional

logger = logging.getLogger(__name__)

class ActivityLogger:
    """Service for logging user activities"""

    def __init__(self, db: Session):
        self.db = db

    async def log_activity(
        self,
        action: str,
        request: Request,
        status_code: int,
        user_id: Optional[int] = None,
        details: Optional[dict] = None
    ) -> Optional[ActivityLog]:
        """Record an activity; failures are logged and never break the request"""

        details_str = None
        if details:
            try:
                details_str = json.dumps(details, default=str)
            except (TypeError, ValueError):
                details_str = str(details)

        activity_log = ActivityLog(
            action=action,
            endpoint=str(request.url.path),
            method=request.method,
            status_code=status_code,
            user_id=user_id,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
            details=details_str
        )

        try:
            self.db.add(activity_log)
            self.db.commit()
            self.db.refresh(activity_log)
            return activity_log
        except SQLAlchemyError as e:
            logger.error(f"Failed to log activity '{action}': {e}")
            self.db.rollback()
            return None

    def get_recent_activities(self, limit: int = 100, action: Optional[str] = None) -> list[ActivityLog]:
        """Get recent activities, newest first"""
        query = self.db.query(ActivityLog)
        if action:
            query = query.filter(ActivityLog.action == action)
        return query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc()).limit(limit).all()
