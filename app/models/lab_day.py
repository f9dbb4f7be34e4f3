import enum
from sqlalchemy import Column, Integer, String, Date, ForeignKey, UniqueConstraint, Enum
from sqlalchemy.orm import relationship

from .base import Base


class AttendanceStatus(str, enum.Enum):
    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"
    EXCUSED = "excused"


# Statuses that count toward a student's attended days
ATTENDED_STATUSES = (AttendanceStatus.PRESENT, AttendanceStatus.LATE)


class LabDay(Base):
    """Scheduled lab day for a cohort"""
    __tablename__ = "lab_days"

    id = Column(Integer, primary_key=True, index=True)
    cohort_id = Column(Integer, ForeignKey("cohorts.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    title = Column(String(255), nullable=True)

    cohort = relationship("Cohort", back_populates="lab_days")
    attendance = relationship("LabDayAttendance", back_populates="lab_day")


class LabDayAttendance(Base):
    """Attendance mark for one student on one lab day"""
    __tablename__ = "lab_day_attendance"
    __table_args__ = (
        UniqueConstraint('lab_day_id', 'student_id', name='uq_lab_day_student'),
    )

    id = Column(Integer, primary_key=True, index=True)
    lab_day_id = Column(Integer, ForeignKey("lab_days.id"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    status = Column(Enum(AttendanceStatus), nullable=False)

    lab_day = relationship("LabDay", back_populates="attendance")
