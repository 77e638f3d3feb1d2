"""
Row-level scope rules shared by the report, analytics and user routes
"""

from typing import Optional
from fastapi import HTTPException, status
from sqlalchemy import false
from sqlalchemy.orm import Query

from app.models.user import User, PHARMACIST, HOSPITAL_ADMIN, STATE_ADMIN, NAFDAC_ADMIN
from app.models.report import DTPReport

UNSCOPED_ROLES = (STATE_ADMIN, NAFDAC_ADMIN)

def report_scope(query: Query, user: User) -> Query:
    """Restrict a DTPReport query to the reports the user may see.

    Pharmacists see their own submissions, hospital admins see their
    hospital's reports, state and NAFDAC admins see everything. Unknown
    roles see nothing.
    """
    if user.role == PHARMACIST:
        return query.filter(DTPReport.pharmacist_id == user.id)
    if user.role == HOSPITAL_ADMIN:
        return query.filter(DTPReport.hospital_name == user.hospital)
    if user.role in UNSCOPED_ROLES:
        return query
    return query.filter(false())

def can_view_report(user: User, report: DTPReport) -> bool:
    if user.role == PHARMACIST:
        return report.pharmacist_id == user.id
    if user.role == HOSPITAL_ADMIN:
        return report.hospital_name == user.hospital
    return user.role in UNSCOPED_ROLES

def can_manage_user(admin: User, target: User) -> bool:
    """Hospital admins manage their own hospital's accounts only"""
    if admin.role == STATE_ADMIN:
        return True
    if admin.role == HOSPITAL_ADMIN:
        return target.hospital == admin.hospital
    return False

def user_scope_hospital(admin: User) -> Optional[str]:
    """Hospital filter for user listings, None when unrestricted"""
    if admin.role == HOSPITAL_ADMIN:
        return admin.hospital
    return None

def ensure(allowed: bool, detail: str = "Access denied"):
    if not allowed:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
