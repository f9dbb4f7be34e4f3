"""Grade composition: raw per-category counts to percentages and a letter grade."""
import math
from dataclasses import dataclass, asdict
from typing import Optional, List, Dict, Any, Iterable, Tuple

PASSING_PCT = 70
SCENARIO_SCALE = 5.0
PEER_EVAL_SCALE = 5.0

# (lower bound inclusive, letter), evaluated top-down
GRADE_BOUNDARIES = (
    (90, "A"),
    (80, "B"),
    (70, "C"),
    (60, "D"),
)


@dataclass(frozen=True)
class GradeWeights:
    """Percentage weight of each gradebook category."""
    scenarios: float = 30
    skills: float = 25
    clinical: float = 20
    attendance: float = 15
    peer_evals: float = 10

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


DEFAULT_WEIGHTS = GradeWeights()


@dataclass
class StudentRawMetrics:
    """Raw counts for one student in one cohort."""
    scenario_score_sum: Optional[float] = None
    scenario_count: int = 0
    skill_signoff_count: int = 0
    skill_total_required: int = 0
    clinical_hours: float = 0.0
    clinical_hours_required: float = 290.0
    attendance_present: int = 0
    attendance_total: int = 0
    peer_eval_score_sum: Optional[float] = None
    peer_eval_count: int = 0


@dataclass
class StudentGrade:
    scenario_pct: Optional[int]
    skill_pct: int
    clinical_pct: int
    attendance_pct: Optional[int]
    peer_pct: Optional[int]
    overall_pct: int
    grade: str
    below_passing: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives, matching how report percentages display."""
    return int(math.floor(value + 0.5))


def _clamp_pct(value: float) -> int:
    return max(0, min(100, round_half_up(value)))


def _ratio_pct(numerator: float, denominator: float) -> Optional[int]:
    if denominator <= 0:
        return None
    return _clamp_pct(100.0 * numerator / denominator)


def _scale_avg_pct(score_sum: Optional[float], count: int, scale: float) -> Optional[int]:
    if count <= 0:
        return None
    average = (score_sum or 0.0) / count
    return _clamp_pct(100.0 * average / scale)


def letter_grade(pct: float) -> str:
    """Map an overall percentage to a letter grade."""
    for lower_bound, letter in GRADE_BOUNDARIES:
        if pct >= lower_bound:
            return letter
    return "F"


def weighted_average(pairs: Iterable[Tuple[Optional[int], float]]) -> int:
    """
    Weighted mean of (pct, weight) pairs, skipping pairs without a pct.

    The remaining weights are renormalised, so a category with no data
    neither helps nor hurts the result. Returns 0 when nothing is left.
    """
    included = [(pct, weight) for pct, weight in pairs if pct is not None]
    total_weight = sum(weight for _, weight in included)
    if total_weight <= 0:
        return 0
    weighted_sum = sum(pct * weight for pct, weight in included)
    return _clamp_pct(weighted_sum / total_weight)


def compose_grade(metrics: StudentRawMetrics, weights: GradeWeights = DEFAULT_WEIGHTS) -> StudentGrade:
    """
    Compute category percentages, the weighted overall percentage and letter grade.

    Scenarios, attendance and peer evaluations come back as None when the
    student has no observations and are left out of the overall. Skills and
    clinical hours are measured against program requirements and default
    to 0 instead.
    """
    scenario_pct = _scale_avg_pct(metrics.scenario_score_sum, metrics.scenario_count, SCENARIO_SCALE)
    skill_pct = _ratio_pct(metrics.skill_signoff_count, metrics.skill_total_required) or 0
    clinical_pct = _ratio_pct(metrics.clinical_hours, metrics.clinical_hours_required) or 0
    attendance_pct = _ratio_pct(metrics.attendance_present, metrics.attendance_total)
    peer_pct = _scale_avg_pct(metrics.peer_eval_score_sum, metrics.peer_eval_count, PEER_EVAL_SCALE)

    overall_pct = weighted_average([
        (scenario_pct, weights.scenarios),
        (skill_pct, weights.skills),
        (clinical_pct, weights.clinical),
        (attendance_pct, weights.attendance),
        (peer_pct, weights.peer_evals),
    ])

    return StudentGrade(
        scenario_pct=scenario_pct,
        skill_pct=skill_pct,
        clinical_pct=clinical_pct,
        attendance_pct=attendance_pct,
        peer_pct=peer_pct,
        overall_pct=overall_pct,
        grade=letter_grade(overall_pct),
        below_passing=overall_pct < PASSING_PCT,
    )


def compose_grades(
    metrics_list: Iterable[StudentRawMetrics],
    weights: GradeWeights = DEFAULT_WEIGHTS,
) -> List[StudentGrade]:
    """Compose grades for a batch of students, preserving input order."""
    return [compose_grade(metrics, weights) for metrics in metrics_list]


def summarize_grades(grades: List[StudentGrade]) -> Dict[str, int]:
    """Cohort-level passing/failing counts and the rounded mean overall."""
    total = len(grades)
    passing = sum(1 for g in grades if not g.below_passing)
    avg_overall = round_half_up(sum(g.overall_pct for g in grades) / total) if total else 0
    return {
        "total_students": total,
        "passing": passing,
        "failing": total - passing,
        "avg_overall": avg_overall,
    }
