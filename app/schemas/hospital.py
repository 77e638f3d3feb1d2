"""
Pydantic schemas for the hospital directory
"""

from pydantic import BaseModel

class HospitalResponse(BaseModel):
    id: int
    name: str
    location: str
    type: str

    class Config:
        from_attributes = True

class HospitalListResponse(BaseModel):
    hospitals: list[HospitalResponse]
