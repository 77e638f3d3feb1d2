"""
Pydantic schemas for report analytics
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel
import datetime

class CategoryCount(BaseModel):
    category: str
    count: int

class SeverityCount(BaseModel):
    severity: str
    count: int

class TrendPoint(BaseModel):
    date: datetime.date
    count: int

class HospitalCount(BaseModel):
    hospital: str
    count: int

class StatsResponse(BaseModel):
    """Aggregated statistics over the caller's report scope"""
    category_stats: list[CategoryCount]
    severity_stats: list[SeverityCount]
    trend_stats: list[TrendPoint]
    hospital_stats: list[HospitalCount]

    class Config:
        alias_generator = to_camel
        populate_by_name = True
