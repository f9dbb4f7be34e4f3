"""Tests for the gradebook data loading, report assembly and CSV export."""
import pytest
from datetime import datetime
from unittest.mock import Mock, MagicMock, patch

from app.models.cohort import Cohort, Student
from app.models.lab_day import AttendanceStatus
from app.services.grading import DEFAULT_WEIGHTS, StudentRawMetrics
from app.services.gradebook import (
    CohortNotFoundError,
    RowFilter,
    SortDirection,
    SortField,
    aggregate_attendance,
    aggregate_peer_evals,
    aggregate_scenarios,
    build_gradebook,
    count_by_student,
    export_filename,
    load_cohort_metrics,
    render_gradebook_csv,
    select_rows,
)


def _student(id, first, last):
    student = Mock(spec=Student)
    student.id = id
    student.first_name = first
    student.last_name = last
    student.email = f"{first.lower()}@students.test"
    return student


def _cohort(id=7, name="PM Group 12", abbr="PM", number=12):
    cohort = Mock(spec=Cohort)
    cohort.id = id
    cohort.display_name = name
    cohort.program_abbreviation = abbr
    cohort.cohort_number = number
    return cohort


def _query(rows=None, count=None):
    """A query chain whose filter/order_by return itself and whose terminals return fixed values"""
    query = MagicMock()
    query.filter.return_value = query
    query.order_by.return_value = query
    query.all.return_value = rows or []
    query.count.return_value = count
    return query


# ---------------------------------------------------------------------------
# Row aggregation
# ---------------------------------------------------------------------------

class TestAggregation:
    def test_scenarios_sum_and_count(self):
        rows = [(1, 4.0), (1, 5.0), (2, None), (None, 3.0)]
        assert aggregate_scenarios(rows) == {1: (9.0, 2), 2: (0.0, 1)}

    def test_count_by_student(self):
        assert count_by_student([(1,), (1,), (3,)]) == {1: 2, 3: 1}

    def test_attendance_counts_late_as_present(self):
        rows = [
            (1, "present"),
            (1, AttendanceStatus.LATE),
            (1, "absent"),
            (2, AttendanceStatus.EXCUSED),
            (99, "present"),  # not on the roster
        ]
        assert aggregate_attendance([1, 2], 4, rows) == {1: (2, 4), 2: (0, 4)}

    def test_attendance_without_lab_days(self):
        assert aggregate_attendance([1], 0, []) == {1: (0, 0)}

    def test_peer_evals_average_three_scores(self):
        rows = [(1, 5, 4, 3), (1, 3, None, 3)]
        assert aggregate_peer_evals(rows) == {1: (6.0, 2)}


# ---------------------------------------------------------------------------
# Database loading
# ---------------------------------------------------------------------------

class TestLoadCohortMetrics:
    def test_empty_cohort_skips_other_queries(self):
        db = MagicMock()
        db.query.return_value = _query(rows=[])

        students, metrics, total_lab_days = load_cohort_metrics(db, _cohort(), 290)

        assert students == []
        assert metrics == {}
        assert total_lab_days == 0
        assert db.query.call_count == 1

    def test_builds_metrics_per_student(self):
        alice = _student(1, "Alice", "Adams")
        bob = _student(2, "Bob", "Baker")
        db = MagicMock()
        db.query.side_effect = [
            _query(rows=[alice, bob]),                                  # students
            _query(rows=[(1, 4.0), (1, 5.0)]),                          # scenario assessments
            _query(rows=[(1,), (1,), (2,)]),                            # skill signoffs
            _query(count=4),                                            # active skills
            _query(rows=[(1, 145.0)]),                                  # clinical hours
            _query(rows=[(10,), (11,)]),                                # lab days
            _query(rows=[(1, "present"), (1, "late"), (2, "absent")]),  # attendance
            _query(rows=[(2, 5, 5, 5)]),                                # peer evaluations
        ]

        students, metrics, total_lab_days = load_cohort_metrics(db, _cohort(), 290)

        assert students == [alice, bob]
        assert total_lab_days == 2
        assert metrics[1] == StudentRawMetrics(
            scenario_score_sum=9.0,
            scenario_count=2,
            skill_signoff_count=2,
            skill_total_required=4,
            clinical_hours=145.0,
            clinical_hours_required=290,
            attendance_present=2,
            attendance_total=2,
            peer_eval_score_sum=None,
            peer_eval_count=0,
        )
        assert metrics[2] == StudentRawMetrics(
            scenario_score_sum=None,
            scenario_count=0,
            skill_signoff_count=1,
            skill_total_required=4,
            clinical_hours=0.0,
            clinical_hours_required=290,
            attendance_present=0,
            attendance_total=2,
            peer_eval_score_sum=5.0,
            peer_eval_count=1,
        )

    def test_no_lab_days_skips_attendance_query(self):
        alice = _student(1, "Alice", "Adams")
        db = MagicMock()
        db.query.side_effect = [
            _query(rows=[alice]),
            _query(rows=[]),
            _query(rows=[]),
            _query(count=0),
            _query(rows=[]),
            _query(rows=[]),   # no lab days
            _query(rows=[]),   # peer evaluations
        ]

        _, metrics, total_lab_days = load_cohort_metrics(db, _cohort(), 290)

        assert total_lab_days == 0
        assert metrics[1].attendance_total == 0
        assert db.query.call_count == 7


# ---------------------------------------------------------------------------
# Report assembly
# ---------------------------------------------------------------------------

class TestBuildGradebook:
    def test_unknown_cohort(self):
        db = MagicMock()
        db.query.return_value.filter.return_value.first.return_value = None

        with pytest.raises(CohortNotFoundError):
            build_gradebook(db, 404, DEFAULT_WEIGHTS, 290)

    def test_report_shape(self):
        db = MagicMock()
        db.query.return_value.filter.return_value.first.return_value = _cohort()
        alice = _student(1, "Alice", "Adams")
        bob = _student(2, "Bob", "Baker")
        metrics = {
            1: StudentRawMetrics(
                scenario_score_sum=9.0, scenario_count=2,
                skill_signoff_count=2, skill_total_required=4,
                clinical_hours=145.0, clinical_hours_required=290,
                attendance_present=2, attendance_total=2,
            ),
            2: StudentRawMetrics(skill_total_required=4, attendance_total=2),
        }

        with patch("app.services.gradebook.load_cohort_metrics", return_value=([alice, bob], metrics, 2)):
            report = build_gradebook(db, 7, DEFAULT_WEIGHTS, 290)

        assert report["cohort"] == {
            "id": 7,
            "name": "PM Group 12",
            "program_abbreviation": "PM",
            "cohort_number": 12,
        }
        assert report["weights"] == DEFAULT_WEIGHTS.to_dict()

        first = report["students"][0]
        assert first["last_name"] == "Adams"
        assert first["scenario_avg_raw"] == 4.5
        assert first["scenario_pct"] == 90
        assert first["skill_pct"] == 50
        assert first["clinical_pct"] == 50
        assert first["attendance_pct"] == 100
        assert first["peer_pct"] is None
        assert first["peer_avg_raw"] is None
        # (30*90 + 25*50 + 20*50 + 15*100) / 90 = 71.67
        assert first["overall_pct"] == 72
        assert first["grade"] == "C"

        second = report["students"][1]
        assert second["overall_pct"] == 0
        assert second["below_passing"] is True

        assert report["summary"] == {
            "total_students": 2,
            "total_lab_days": 2,
            "passing": 1,
            "failing": 1,
            "avg_overall": 36,
        }

    def test_empty_cohort_summary(self):
        db = MagicMock()
        db.query.return_value.filter.return_value.first.return_value = _cohort()

        with patch("app.services.gradebook.load_cohort_metrics", return_value=([], {}, 0)):
            report = build_gradebook(db, 7, DEFAULT_WEIGHTS, 290)

        assert report["students"] == []
        assert report["summary"]["total_students"] == 0
        assert report["summary"]["avg_overall"] == 0


# ---------------------------------------------------------------------------
# CSV export
# ---------------------------------------------------------------------------

def _report():
    return {
        "cohort": {"id": 7, "name": "PM Group 12", "program_abbreviation": "PM", "cohort_number": 12},
        "weights": DEFAULT_WEIGHTS.to_dict(),
        "summary": {"total_students": 1, "total_lab_days": 10, "passing": 1, "failing": 0, "avg_overall": 86},
        "students": [{
            "id": 1,
            "first_name": "Alice",
            "last_name": "Adams",
            "email": "alice@students.test",
            "scenario_avg_raw": None,
            "scenario_count": 0,
            "skill_count": 18,
            "skill_total_required": 20,
            "clinical_hours": 145.0,
            "attendance_present": 9,
            "attendance_total": 10,
            "peer_avg_raw": 4.0,
            "peer_eval_count": 4,
            "scenario_pct": None,
            "skill_pct": 90,
            "clinical_pct": 50,
            "attendance_pct": 90,
            "peer_pct": 80,
            "overall_pct": 78,
            "grade": "C",
            "below_passing": False,
        }],
    }


class TestCsvExport:
    def test_layout(self):
        content = render_gradebook_csv(_report(), generated_at=datetime(2026, 3, 1, 9, 30))
        assert content.startswith("\ufeff")

        lines = content[1:].split("\n")
        assert lines[0] == '"Grade Book Report"'
        assert lines[1] == '"Cohort","PM Group 12"'
        assert lines[2] == '"Generated","2026-03-01 09:30:00"'
        assert lines[3] == (
            '"Weights","Scenarios 30% | Skills 25% | Clinical 20% | Attendance 15% | Peer Evals 10%"'
        )
        assert lines[4] == '"Students","1 total | 1 passing | 0 failing | Avg 86%"'
        assert lines[5] == ""
        assert lines[6].startswith('"Last Name","First Name","Scenarios (30%)","Scenario Count"')
        assert lines[6].endswith('"Overall %","Letter Grade"')
        assert lines[7] == (
            '"Adams","Alice","","0","","90","18","50","145","90","9","10","80","4","78","C"'
        )

    def test_filename(self):
        assert export_filename("PM Group 12", datetime(2026, 3, 1)) == "gradebook-pm-group-12-2026-03-01.csv"

    def test_clinical_hours_keep_full_precision(self):
        report = _report()
        report["students"][0]["clinical_hours"] = 1000.125
        content = render_gradebook_csv(report, generated_at=datetime(2026, 3, 1))
        row = content[1:].split("\n")[7]
        assert '"50","1000.125","90"' in row

    def test_rows_written_in_given_order(self):
        report = _report()
        second = dict(report["students"][0], first_name="Zed", last_name="Young")
        report["students"] = [second, report["students"][0]]
        lines = render_gradebook_csv(report, generated_at=datetime(2026, 3, 1))[1:].split("\n")
        assert lines[7].startswith('"Young","Zed"')
        assert lines[8].startswith('"Adams","Alice"')


# ---------------------------------------------------------------------------
# Row selection
# ---------------------------------------------------------------------------

def _row(last, first, overall, scenario=None, attendance=None, peer=None, grade="C"):
    return {
        "last_name": last,
        "first_name": first,
        "scenario_pct": scenario,
        "skill_pct": overall,
        "clinical_pct": overall,
        "attendance_pct": attendance,
        "peer_pct": peer,
        "overall_pct": overall,
        "grade": grade,
        "below_passing": overall < 70,
    }


@pytest.fixture
def rows():
    return [
        _row("Adams", "Alice", 92, scenario=0, grade="A"),
        _row("baker", "Bob", 65, scenario=None, attendance=80, grade="D"),
        _row("Clark", "Cara", 78, scenario=55, attendance=80, peer=90, grade="C"),
    ]


def _names(rows):
    return [r["last_name"] for r in rows]


class TestSelectRows:
    def test_defaults_sort_by_name_ascending(self, rows):
        assert _names(select_rows(list(reversed(rows)))) == ["Adams", "baker", "Clark"]

    def test_passing_filter(self, rows):
        assert _names(select_rows(rows, RowFilter.PASSING)) == ["Adams", "Clark"]

    def test_failing_filter(self, rows):
        assert _names(select_rows(rows, RowFilter.FAILING)) == ["baker"]

    def test_non_name_fields_default_descending(self, rows):
        assert _names(select_rows(rows, sort_field=SortField.OVERALL)) == ["Adams", "Clark", "baker"]

    def test_explicit_direction(self, rows):
        result = select_rows(rows, sort_field=SortField.OVERALL, direction=SortDirection.ASC)
        assert _names(result) == ["baker", "Clark", "Adams"]

    def test_missing_percentage_ranks_below_zero(self, rows):
        result = select_rows(rows, sort_field=SortField.SCENARIOS, direction=SortDirection.ASC)
        assert _names(result) == ["baker", "Adams", "Clark"]

    def test_ties_keep_incoming_order(self, rows):
        result = select_rows(rows, sort_field=SortField.ATTENDANCE)
        assert _names(result) == ["baker", "Clark", "Adams"]

    def test_grade_sort(self, rows):
        result = select_rows(rows, sort_field=SortField.GRADE, direction=SortDirection.ASC)
        assert [r["grade"] for r in result] == ["A", "C", "D"]

    def test_accepts_plain_strings(self, rows):
        assert _names(select_rows(rows, "failing", "peer_evals", "desc")) == ["baker"]

    def test_does_not_mutate_input(self, rows):
        select_rows(rows, RowFilter.PASSING, SortField.OVERALL)
        assert _names(rows) == ["Adams", "baker", "Clark"]
