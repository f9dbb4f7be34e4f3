from pydantic import BaseModel, Field
from typing import Optional, List, Literal


class GradeWeightsSchema(BaseModel):
    scenarios: float = Field(..., ge=0)
    skills: float = Field(..., ge=0)
    clinical: float = Field(..., ge=0)
    attendance: float = Field(..., ge=0)
    peer_evals: float = Field(..., ge=0)


class CohortMeta(BaseModel):
    id: int
    name: str
    program_abbreviation: str
    cohort_number: int


class GradebookSummary(BaseModel):
    total_students: int
    total_lab_days: int
    passing: int
    failing: int
    avg_overall: int


class GradebookRow(BaseModel):
    """One student's raw values, category percentages and composite grade"""
    id: int
    first_name: str
    last_name: str
    email: Optional[str] = None

    # Raw values
    scenario_avg_raw: Optional[float] = None
    scenario_count: int
    skill_count: int
    skill_total_required: int
    clinical_hours: float
    attendance_present: int
    attendance_total: int
    peer_avg_raw: Optional[float] = None
    peer_eval_count: int

    # Percentages (0-100), None when the category has no data
    scenario_pct: Optional[int] = None
    skill_pct: int
    clinical_pct: int
    attendance_pct: Optional[int] = None
    peer_pct: Optional[int] = None

    # Composite
    overall_pct: int
    grade: Literal["A", "B", "C", "D", "F"]
    below_passing: bool


class GradebookResponse(BaseModel):
    cohort: CohortMeta
    weights: GradeWeightsSchema
    summary: GradebookSummary
    students: List[GradebookRow]
