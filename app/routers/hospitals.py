"""
Hospital directory endpoint
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.hospital import Hospital
from app.schemas.hospital import HospitalResponse, HospitalListResponse

router = APIRouter()

@router.get("", response_model=HospitalListResponse)
async def get_hospitals(db: Session = Depends(get_db)):
    """Active hospitals sorted by name (public)"""
    hospitals = (
        db.query(Hospital)
        .filter(Hospital.active == True)
        .order_by(Hospital.name.asc())
        .all()
    )
    return HospitalListResponse(hospitals=[HospitalResponse.model_validate(h) for h in hospitals])
