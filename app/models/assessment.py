from sqlalchemy import Column, Integer, String, Boolean, Float, DateTime, ForeignKey
from sqlalchemy.sql import func

from .base import Base


class Skill(Base):
    """Skill checklist item students must be signed off on"""
    __tablename__ = "skills"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)


class SkillSignoff(Base):
    """Instructor signoff of a skill for a student; revoked signoffs keep revoked_at"""
    __tablename__ = "skill_signoffs"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    skill_id = Column(Integer, ForeignKey("skills.id"), nullable=False, index=True)
    signed_off_by = Column(Integer, ForeignKey("lab_users.id"), nullable=True)
    signed_off_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    revoked_at = Column(DateTime(timezone=True), nullable=True)


class ScenarioAssessment(Base):
    """Graded scenario run, credited to the student who led the team"""
    __tablename__ = "scenario_assessments"

    id = Column(Integer, primary_key=True, index=True)
    cohort_id = Column(Integer, ForeignKey("cohorts.id"), nullable=False, index=True)
    team_lead_id = Column(Integer, ForeignKey("students.id"), nullable=True, index=True)
    overall_score = Column(Float, nullable=True)  # 0-5
    assessed_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class PeerEvaluation(Base):
    """Peer evaluation of one student by another (scores on a 0-5 scale)"""
    __tablename__ = "peer_evaluations"

    id = Column(Integer, primary_key=True, index=True)
    evaluator_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    evaluated_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    communication_score = Column(Float, nullable=True)
    teamwork_score = Column(Float, nullable=True)
    leadership_score = Column(Float, nullable=True)
    is_self_eval = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
