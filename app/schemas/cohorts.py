from pydantic import BaseModel
from datetime import date
from typing import Optional

from app.models.cohort import StudentStatus


class CohortResponse(BaseModel):
    """Cohort with its program label"""
    id: int
    cohort_number: int
    program_abbreviation: str
    display_name: str
    start_date: Optional[date] = None
    expected_end_date: Optional[date] = None
    is_active: bool

    class Config:
        from_attributes = True


class StudentResponse(BaseModel):
    """Roster entry"""
    id: int
    first_name: str
    last_name: str
    email: Optional[str] = None
    status: StudentStatus

    class Config:
        from_attributes = True
