import dataclasses
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.auth.dependencies import require_instructor
from app.models.user import User
from app.schemas.gradebook import GradebookResponse, GradeWeightsSchema
from app.services.grading import GradeWeights
from app.services.gradebook import (
    CohortNotFoundError,
    RowFilter,
    SortDirection,
    SortField,
    build_gradebook,
    export_filename,
    render_gradebook_csv,
    select_rows,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])


def gradebook_weights(
    w_scenarios: Optional[float] = Query(None, ge=0),
    w_skills: Optional[float] = Query(None, ge=0),
    w_clinical: Optional[float] = Query(None, ge=0),
    w_attendance: Optional[float] = Query(None, ge=0),
    w_peer_evals: Optional[float] = Query(None, ge=0),
) -> GradeWeights:
    """Configured weights with any per-request overrides applied"""
    overrides = {
        "scenarios": w_scenarios,
        "skills": w_skills,
        "clinical": w_clinical,
        "attendance": w_attendance,
        "peer_evals": w_peer_evals,
    }
    return dataclasses.replace(
        settings.grade_weights,
        **{k: v for k, v in overrides.items() if v is not None},
    )


def gradebook_view(
    row_filter: RowFilter = Query(RowFilter.ALL, alias="filter"),
    sort: SortField = Query(SortField.NAME),
    direction: Optional[SortDirection] = Query(None),
) -> dict:
    """Row filter and ordering requested for the student list"""
    return {"row_filter": row_filter, "sort_field": sort, "direction": direction}


def _load_gradebook(db: Session, cohort_id: int, weights: GradeWeights, view: dict) -> dict:
    try:
        report = build_gradebook(db, cohort_id, weights, settings.clinical_hours_required)
    except CohortNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Cohort not found"
        )
    except Exception:
        logger.exception("Failed to generate gradebook for cohort %s", cohort_id)
        raise

    # Summary always covers the whole cohort
    report["students"] = select_rows(report["students"], **view)
    return report


@router.get("/gradebook/weights", response_model=GradeWeightsSchema)
def get_default_weights(current_user: User = Depends(require_instructor)):
    """Default category weights applied when a request does not override them"""
    return settings.grade_weights.to_dict()


@router.get("/gradebook", response_model=GradebookResponse)
def get_gradebook(
    cohort_id: int,
    weights: GradeWeights = Depends(gradebook_weights),
    view: dict = Depends(gradebook_view),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_instructor)
):
    """
    Weighted gradebook for every active student in a cohort (instructor or higher).

    Categories a student has no data for (no scenario runs, no lab days,
    no peer evaluations) are left out of that student's overall percentage.
    """
    return _load_gradebook(db, cohort_id, weights, view)


@router.get("/gradebook/export")
def export_gradebook(
    cohort_id: int,
    weights: GradeWeights = Depends(gradebook_weights),
    view: dict = Depends(gradebook_view),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_instructor)
):
    """Download the cohort gradebook as CSV."""
    report = _load_gradebook(db, cohort_id, weights, view)
    now = datetime.now()
    content = render_gradebook_csv(report, generated_at=now)
    filename = export_filename(report["cohort"]["name"], now)

    logger.info("User %s exported gradebook for cohort %s", current_user.id, cohort_id)

    return StreamingResponse(
        iter([content]),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )
