from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.auth.dependencies import require_instructor
from app.models.user import User
from app.models.cohort import Cohort, Student, StudentStatus
from app.schemas.cohorts import CohortResponse, StudentResponse

router = APIRouter(prefix="/cohorts", tags=["cohorts"])


@router.get("", response_model=List[CohortResponse])
def list_cohorts(
    active_only: bool = True,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_instructor)
):
    """List cohorts, newest first (instructor or higher)"""
    query = db.query(Cohort)
    if active_only:
        query = query.filter(Cohort.is_active.is_(True))
    return query.order_by(Cohort.cohort_number.desc()).all()


@router.get("/{cohort_id}/students", response_model=List[StudentResponse])
def list_cohort_students(
    cohort_id: int,
    student_status: Optional[StudentStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_instructor)
):
    """
    Cohort roster ordered by last name.

    Args:
        status: Only students with this status (all statuses when omitted)
    """
    cohort = db.query(Cohort).filter(Cohort.id == cohort_id).first()
    if not cohort:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Cohort not found"
        )

    query = db.query(Student).filter(Student.cohort_id == cohort_id)
    if student_status:
        query = query.filter(Student.status == student_status)

    return query.order_by(Student.last_name, Student.first_name).all()
