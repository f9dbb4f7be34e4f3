# Database models
from .base import Base
from .user import User, UserRole, ROLE_LEVELS, has_min_role
from .cohort import Program, Cohort, Student, StudentStatus
from .lab_day import LabDay, LabDayAttendance, AttendanceStatus, ATTENDED_STATUSES
from .assessment import Skill, SkillSignoff, ScenarioAssessment, PeerEvaluation
from .clinical import StudentClinicalHours

__all__ = [
    "Base",
    "User",
    "UserRole",
    "ROLE_LEVELS",
    "has_min_role",
    "Program",
    "Cohort",
    "Student",
    "StudentStatus",
    "LabDay",
    "LabDayAttendance",
    "AttendanceStatus",
    "ATTENDED_STATUSES",
    "Skill",
    "SkillSignoff",
    "ScenarioAssessment",
    "PeerEvaluation",
    "StudentClinicalHours",
]
