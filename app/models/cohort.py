import enum
from sqlalchemy import Column, Integer, String, Boolean, Date, ForeignKey, Index, Enum
from sqlalchemy.orm import relationship

from .base import Base


class StudentStatus(str, enum.Enum):
    ACTIVE = "active"
    GRADUATED = "graduated"
    WITHDRAWN = "withdrawn"
    ON_HOLD = "on_hold"


class Program(Base):
    """Training program (e.g. Paramedic, EMT)"""
    __tablename__ = "programs"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    abbreviation = Column(String(32), nullable=False)

    cohorts = relationship("Cohort", back_populates="program")


class Cohort(Base):
    """Group of students moving through a program together"""
    __tablename__ = "cohorts"

    id = Column(Integer, primary_key=True, index=True)
    program_id = Column(Integer, ForeignKey("programs.id"), nullable=True, index=True)
    cohort_number = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=True)
    expected_end_date = Column(Date, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    program = relationship("Program", back_populates="cohorts")
    students = relationship("Student", back_populates="cohort")
    lab_days = relationship("LabDay", back_populates="cohort")

    @property
    def program_abbreviation(self) -> str:
        return self.program.abbreviation if self.program else "Unknown"

    @property
    def display_name(self) -> str:
        return f"{self.program_abbreviation} Group {self.cohort_number}"


class Student(Base):
    """Student enrolled in a cohort"""
    __tablename__ = "students"
    __table_args__ = (
        Index('ix_students_cohort_status', 'cohort_id', 'status'),
    )

    id = Column(Integer, primary_key=True, index=True)
    cohort_id = Column(Integer, ForeignKey("cohorts.id"), nullable=False, index=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    status = Column(Enum(StudentStatus), nullable=False, default=StudentStatus.ACTIVE)

    cohort = relationship("Cohort", back_populates="students")
