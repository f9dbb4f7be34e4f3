"""
Cohort gradebook: load raw counts from the database, compose grades, render exports.

The aggregation helpers work on plain row tuples so they can be exercised
without a database; load_cohort_metrics() wires them to the queries.
"""
import csv
import enum
import io
import logging
import re
from collections import defaultdict
from datetime import datetime
from typing import Optional, List, Dict, Any, Iterable, Tuple

from sqlalchemy.orm import Session

from app.models.cohort import Cohort, Student, StudentStatus
from app.models.lab_day import LabDay, LabDayAttendance, ATTENDED_STATUSES
from app.models.assessment import Skill, SkillSignoff, ScenarioAssessment, PeerEvaluation
from app.models.clinical import StudentClinicalHours
from app.services.grading import (
    GradeWeights,
    StudentRawMetrics,
    StudentGrade,
    compose_grade,
    summarize_grades,
)

logger = logging.getLogger(__name__)


class CohortNotFoundError(Exception):
    """Raised when a gradebook is requested for a cohort that does not exist"""

    def __init__(self, cohort_id: int):
        super().__init__(f"Cohort {cohort_id} not found")
        self.cohort_id = cohort_id


# ---------------------------------------------------------------------------
# Row aggregation
# ---------------------------------------------------------------------------

def aggregate_scenarios(rows: Iterable[Tuple[Optional[int], Optional[float]]]) -> Dict[int, Tuple[float, int]]:
    """(team_lead_id, overall_score) rows -> {student_id: (score_sum, count)}"""
    totals: Dict[int, List[float]] = defaultdict(lambda: [0.0, 0])
    for team_lead_id, overall_score in rows:
        if team_lead_id is None:
            continue
        entry = totals[team_lead_id]
        entry[0] += overall_score or 0.0
        entry[1] += 1
    return {sid: (s, int(c)) for sid, (s, c) in totals.items()}


def count_by_student(rows: Iterable[Tuple[int]]) -> Dict[int, int]:
    """(student_id,) rows -> {student_id: row count}"""
    counts: Dict[int, int] = defaultdict(int)
    for (student_id,) in rows:
        counts[student_id] += 1
    return dict(counts)


def aggregate_attendance(
    student_ids: Iterable[int],
    total_lab_days: int,
    rows: Iterable[Tuple[int, Any]],
) -> Dict[int, Tuple[int, int]]:
    """
    (student_id, status) rows -> {student_id: (days_attended, total_lab_days)}.

    Every student gets an entry, so a student with no marks is 0 of N.
    Late arrivals count as attended.
    """
    present = {sid: 0 for sid in student_ids}
    for student_id, status in rows:
        if student_id not in present:
            continue
        if status in ATTENDED_STATUSES:
            present[student_id] += 1
    return {sid: (count, total_lab_days) for sid, count in present.items()}


def aggregate_peer_evals(
    rows: Iterable[Tuple[int, Optional[float], Optional[float], Optional[float]]],
) -> Dict[int, Tuple[float, int]]:
    """
    (evaluated_id, communication, teamwork, leadership) rows ->
    {student_id: (sum of per-evaluation means, evaluation count)}.

    A missing score counts as 0 in that evaluation's mean.
    """
    totals: Dict[int, List[float]] = defaultdict(lambda: [0.0, 0])
    for evaluated_id, communication, teamwork, leadership in rows:
        mean = ((communication or 0) + (teamwork or 0) + (leadership or 0)) / 3
        entry = totals[evaluated_id]
        entry[0] += mean
        entry[1] += 1
    return {sid: (s, int(c)) for sid, (s, c) in totals.items()}


# ---------------------------------------------------------------------------
# Database loading
# ---------------------------------------------------------------------------

def load_cohort_metrics(
    db: Session,
    cohort: Cohort,
    clinical_hours_required: float,
) -> Tuple[List[Student], Dict[int, StudentRawMetrics], int]:
    """
    Fetch every input the gradebook needs for one cohort.

    Returns the active students (ordered by name), their raw metrics keyed by
    student id, and the number of lab days scheduled for the cohort.
    """
    students = (
        db.query(Student)
        .filter(Student.cohort_id == cohort.id, Student.status == StudentStatus.ACTIVE)
        .order_by(Student.last_name, Student.first_name)
        .all()
    )
    student_ids = [s.id for s in students]
    if not student_ids:
        return [], {}, 0

    scenario_rows = (
        db.query(ScenarioAssessment.team_lead_id, ScenarioAssessment.overall_score)
        .filter(
            ScenarioAssessment.cohort_id == cohort.id,
            ScenarioAssessment.team_lead_id.in_(student_ids),
        )
        .all()
    )
    signoff_rows = (
        db.query(SkillSignoff.student_id)
        .filter(SkillSignoff.student_id.in_(student_ids), SkillSignoff.revoked_at.is_(None))
        .all()
    )
    skill_total_required = db.query(Skill).filter(Skill.is_active.is_(True)).count()
    clinical_rows = (
        db.query(StudentClinicalHours.student_id, StudentClinicalHours.total_hours)
        .filter(StudentClinicalHours.student_id.in_(student_ids))
        .all()
    )
    lab_day_ids = [row[0] for row in db.query(LabDay.id).filter(LabDay.cohort_id == cohort.id).all()]
    attendance_rows = []
    if lab_day_ids:
        attendance_rows = (
            db.query(LabDayAttendance.student_id, LabDayAttendance.status)
            .filter(
                LabDayAttendance.lab_day_id.in_(lab_day_ids),
                LabDayAttendance.student_id.in_(student_ids),
            )
            .all()
        )
    peer_rows = (
        db.query(
            PeerEvaluation.evaluated_id,
            PeerEvaluation.communication_score,
            PeerEvaluation.teamwork_score,
            PeerEvaluation.leadership_score,
        )
        .filter(PeerEvaluation.evaluated_id.in_(student_ids), PeerEvaluation.is_self_eval.is_(False))
        .all()
    )

    total_lab_days = len(lab_day_ids)
    scenarios = aggregate_scenarios(scenario_rows)
    signoffs = count_by_student(signoff_rows)
    clinical = {student_id: hours or 0.0 for student_id, hours in clinical_rows}
    attendance = aggregate_attendance(student_ids, total_lab_days, attendance_rows)
    peers = aggregate_peer_evals(peer_rows)

    metrics: Dict[int, StudentRawMetrics] = {}
    for sid in student_ids:
        scenario_sum, scenario_count = scenarios.get(sid, (None, 0))
        peer_sum, peer_count = peers.get(sid, (None, 0))
        present, total = attendance[sid]
        metrics[sid] = StudentRawMetrics(
            scenario_score_sum=scenario_sum,
            scenario_count=scenario_count,
            skill_signoff_count=signoffs.get(sid, 0),
            skill_total_required=skill_total_required,
            clinical_hours=clinical.get(sid, 0.0),
            clinical_hours_required=clinical_hours_required,
            attendance_present=present,
            attendance_total=total,
            peer_eval_score_sum=peer_sum,
            peer_eval_count=peer_count,
        )

    logger.debug(
        "Loaded gradebook inputs for cohort %s: %d students, %d lab days, %d scenario runs",
        cohort.id, len(students), total_lab_days, len(scenario_rows),
    )
    return students, metrics, total_lab_days


# ---------------------------------------------------------------------------
# Report assembly
# ---------------------------------------------------------------------------

def cohort_meta(cohort: Cohort) -> Dict[str, Any]:
    return {
        "id": cohort.id,
        "name": cohort.display_name,
        "program_abbreviation": cohort.program_abbreviation,
        "cohort_number": cohort.cohort_number,
    }


def _average(score_sum: Optional[float], count: int) -> Optional[float]:
    if count <= 0:
        return None
    return (score_sum or 0.0) / count


def gradebook_row(student: Student, metrics: StudentRawMetrics, grade: StudentGrade) -> Dict[str, Any]:
    row = {
        "id": student.id,
        "first_name": student.first_name,
        "last_name": student.last_name,
        "email": student.email,
        "scenario_avg_raw": _average(metrics.scenario_score_sum, metrics.scenario_count),
        "scenario_count": metrics.scenario_count,
        "skill_count": metrics.skill_signoff_count,
        "skill_total_required": metrics.skill_total_required,
        "clinical_hours": metrics.clinical_hours,
        "attendance_present": metrics.attendance_present,
        "attendance_total": metrics.attendance_total,
        "peer_avg_raw": _average(metrics.peer_eval_score_sum, metrics.peer_eval_count),
        "peer_eval_count": metrics.peer_eval_count,
    }
    row.update(grade.to_dict())
    return row


def build_gradebook(
    db: Session,
    cohort_id: int,
    weights: GradeWeights,
    clinical_hours_required: float,
) -> Dict[str, Any]:
    """Assemble the gradebook report for every active student in a cohort."""
    cohort = db.query(Cohort).filter(Cohort.id == cohort_id).first()
    if not cohort:
        raise CohortNotFoundError(cohort_id)

    students, metrics, total_lab_days = load_cohort_metrics(db, cohort, clinical_hours_required)

    grades = [compose_grade(metrics[s.id], weights) for s in students]
    rows = [gradebook_row(s, metrics[s.id], grade) for s, grade in zip(students, grades)]
    summary = summarize_grades(grades)
    summary["total_lab_days"] = total_lab_days

    logger.info(
        "Gradebook for cohort %s: %d students, %d passing, avg %d%%",
        cohort_id, summary["total_students"], summary["passing"], summary["avg_overall"],
    )

    return {
        "cohort": cohort_meta(cohort),
        "weights": weights.to_dict(),
        "summary": summary,
        "students": rows,
    }


# ---------------------------------------------------------------------------
# Row selection
# ---------------------------------------------------------------------------

class RowFilter(str, enum.Enum):
    ALL = "all"
    PASSING = "passing"
    FAILING = "failing"


class SortField(str, enum.Enum):
    NAME = "name"
    SCENARIOS = "scenarios"
    SKILLS = "skills"
    CLINICAL = "clinical"
    ATTENDANCE = "attendance"
    PEER_EVALS = "peer_evals"
    OVERALL = "overall"
    GRADE = "grade"


class SortDirection(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


# Categories that can be missing rank below every real percentage
_SORT_KEYS = {
    SortField.NAME: lambda r: f"{r['last_name']} {r['first_name']}".lower(),
    SortField.SCENARIOS: lambda r: -1 if r["scenario_pct"] is None else r["scenario_pct"],
    SortField.SKILLS: lambda r: r["skill_pct"],
    SortField.CLINICAL: lambda r: r["clinical_pct"],
    SortField.ATTENDANCE: lambda r: -1 if r["attendance_pct"] is None else r["attendance_pct"],
    SortField.PEER_EVALS: lambda r: -1 if r["peer_pct"] is None else r["peer_pct"],
    SortField.OVERALL: lambda r: r["overall_pct"],
    SortField.GRADE: lambda r: r["grade"],
}


def select_rows(
    rows: List[Dict[str, Any]],
    row_filter: RowFilter = RowFilter.ALL,
    sort_field: SortField = SortField.NAME,
    direction: Optional[SortDirection] = None,
) -> List[Dict[str, Any]]:
    """
    Filter gradebook rows by pass/fail and sort them.

    Args:
        rows: Rows as produced by gradebook_row()
        row_filter: Keep all rows, only passing or only failing students
        sort_field: Column to sort on
        direction: Defaults to ascending for name and descending for everything else

    Returns:
        A new list; ties keep their incoming order
    """
    sort_field = SortField(sort_field)
    if direction is None:
        direction = SortDirection.ASC if sort_field == SortField.NAME else SortDirection.DESC

    if row_filter == RowFilter.PASSING:
        rows = [r for r in rows if not r["below_passing"]]
    elif row_filter == RowFilter.FAILING:
        rows = [r for r in rows if r["below_passing"]]

    return sorted(
        rows,
        key=_SORT_KEYS[sort_field],
        reverse=SortDirection(direction) == SortDirection.DESC,
    )


# ---------------------------------------------------------------------------
# CSV export
# ---------------------------------------------------------------------------

CSV_BOM = "\ufeff"


def _fmt_weight(value: float) -> str:
    return f"{value:g}"


def _fmt_hours(value: float) -> str:
    value = float(value)
    return str(int(value)) if value.is_integer() else repr(value)


def _blank_if_none(value: Any) -> Any:
    return "" if value is None else value


def _fmt_avg(value: Optional[float]) -> str:
    return "" if value is None else f"{value:.2f}"


def export_filename(cohort_name: str, when: datetime) -> str:
    slug = re.sub(r"\s+", "-", cohort_name.strip()).lower()
    return f"gradebook-{slug}-{when.strftime('%Y-%m-%d')}.csv"


def render_gradebook_csv(report: Dict[str, Any], generated_at: Optional[datetime] = None) -> str:
    """Render a gradebook report as a quoted CSV document with a metadata preamble."""
    generated_at = generated_at or datetime.now()
    w = {k: _fmt_weight(v) for k, v in report["weights"].items()}
    summary = report["summary"]

    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")

    writer.writerow(["Grade Book Report"])
    writer.writerow(["Cohort", report["cohort"]["name"]])
    writer.writerow(["Generated", generated_at.strftime("%Y-%m-%d %H:%M:%S")])
    writer.writerow([
        "Weights",
        f"Scenarios {w['scenarios']}% | Skills {w['skills']}% | Clinical {w['clinical']}% | "
        f"Attendance {w['attendance']}% | Peer Evals {w['peer_evals']}%",
    ])
    writer.writerow([
        "Students",
        f"{summary['total_students']} total | {summary['passing']} passing | "
        f"{summary['failing']} failing | Avg {summary['avg_overall']}%",
    ])
    output.write("\n")

    writer.writerow([
        "Last Name",
        "First Name",
        f"Scenarios ({w['scenarios']}%)",
        "Scenario Count",
        "Scenario Raw Avg",
        f"Skills ({w['skills']}%)",
        "Skill Signoffs",
        f"Clinical ({w['clinical']}%)",
        "Clinical Hours",
        f"Attendance ({w['attendance']}%)",
        "Days Present",
        "Total Lab Days",
        f"Peer Evals ({w['peer_evals']}%)",
        "Peer Eval Count",
        "Overall %",
        "Letter Grade",
    ])

    for s in report["students"]:
        writer.writerow([
            s["last_name"],
            s["first_name"],
            _blank_if_none(s["scenario_pct"]),
            s["scenario_count"],
            _fmt_avg(s["scenario_avg_raw"]),
            s["skill_pct"],
            s["skill_count"],
            s["clinical_pct"],
            _fmt_hours(s["clinical_hours"]),
            _blank_if_none(s["attendance_pct"]),
            s["attendance_present"],
            s["attendance_total"],
            _blank_if_none(s["peer_pct"]),
            s["peer_eval_count"],
            s["overall_pct"],
            s["grade"],
        ])

    return CSV_BOM + output.getvalue()
