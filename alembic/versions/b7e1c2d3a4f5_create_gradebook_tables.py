"""Create lab users, cohorts and gradebook source tables

Revision ID: b7e1c2d3a4f5
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'b7e1c2d3a4f5'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# SQLAlchemy stores Enum(...) columns by member name
user_role = sa.Enum('SUPERADMIN', 'ADMIN', 'LEAD_INSTRUCTOR', 'INSTRUCTOR', 'GUEST', name='userrole')
student_status = sa.Enum('ACTIVE', 'GRADUATED', 'WITHDRAWN', 'ON_HOLD', name='studentstatus')
attendance_status = sa.Enum('PRESENT', 'LATE', 'ABSENT', 'EXCUSED', name='attendancestatus')


def upgrade() -> None:
    op.create_table(
        'lab_users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('role', user_role, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_lab_users_id'), 'lab_users', ['id'], unique=False)
    op.create_index(op.f('ix_lab_users_email'), 'lab_users', ['email'], unique=True)

    op.create_table(
        'programs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('abbreviation', sa.String(length=32), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_programs_id'), 'programs', ['id'], unique=False)

    op.create_table(
        'cohorts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('program_id', sa.Integer(), nullable=True),
        sa.Column('cohort_number', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('expected_end_date', sa.Date(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.ForeignKeyConstraint(['program_id'], ['programs.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_cohorts_id'), 'cohorts', ['id'], unique=False)
    op.create_index(op.f('ix_cohorts_program_id'), 'cohorts', ['program_id'], unique=False)

    op.create_table(
        'students',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('cohort_id', sa.Integer(), nullable=False),
        sa.Column('first_name', sa.String(length=255), nullable=False),
        sa.Column('last_name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('status', student_status, nullable=False),
        sa.ForeignKeyConstraint(['cohort_id'], ['cohorts.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_students_id'), 'students', ['id'], unique=False)
    op.create_index(op.f('ix_students_cohort_id'), 'students', ['cohort_id'], unique=False)
    op.create_index('ix_students_cohort_status', 'students', ['cohort_id', 'status'], unique=False)

    op.create_table(
        'skills',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_skills_id'), 'skills', ['id'], unique=False)

    op.create_table(
        'skill_signoffs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('student_id', sa.Integer(), nullable=False),
        sa.Column('skill_id', sa.Integer(), nullable=False),
        sa.Column('signed_off_by', sa.Integer(), nullable=True),
        sa.Column('signed_off_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['student_id'], ['students.id']),
        sa.ForeignKeyConstraint(['skill_id'], ['skills.id']),
        sa.ForeignKeyConstraint(['signed_off_by'], ['lab_users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_skill_signoffs_id'), 'skill_signoffs', ['id'], unique=False)
    op.create_index(op.f('ix_skill_signoffs_student_id'), 'skill_signoffs', ['student_id'], unique=False)
    op.create_index(op.f('ix_skill_signoffs_skill_id'), 'skill_signoffs', ['skill_id'], unique=False)

    op.create_table(
        'scenario_assessments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('cohort_id', sa.Integer(), nullable=False),
        sa.Column('team_lead_id', sa.Integer(), nullable=True),
        sa.Column('overall_score', sa.Float(), nullable=True),
        sa.Column('assessed_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['cohort_id'], ['cohorts.id']),
        sa.ForeignKeyConstraint(['team_lead_id'], ['students.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_scenario_assessments_id'), 'scenario_assessments', ['id'], unique=False)
    op.create_index(op.f('ix_scenario_assessments_cohort_id'), 'scenario_assessments', ['cohort_id'], unique=False)
    op.create_index(op.f('ix_scenario_assessments_team_lead_id'), 'scenario_assessments', ['team_lead_id'], unique=False)

    op.create_table(
        'peer_evaluations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('evaluator_id', sa.Integer(), nullable=False),
        sa.Column('evaluated_id', sa.Integer(), nullable=False),
        sa.Column('communication_score', sa.Float(), nullable=True),
        sa.Column('teamwork_score', sa.Float(), nullable=True),
        sa.Column('leadership_score', sa.Float(), nullable=True),
        sa.Column('is_self_eval', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['evaluator_id'], ['students.id']),
        sa.ForeignKeyConstraint(['evaluated_id'], ['students.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_peer_evaluations_id'), 'peer_evaluations', ['id'], unique=False)
    op.create_index(op.f('ix_peer_evaluations_evaluator_id'), 'peer_evaluations', ['evaluator_id'], unique=False)
    op.create_index(op.f('ix_peer_evaluations_evaluated_id'), 'peer_evaluations', ['evaluated_id'], unique=False)

    op.create_table(
        'student_clinical_hours',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('student_id', sa.Integer(), nullable=False),
        sa.Column('total_hours', sa.Float(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['student_id'], ['students.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_student_clinical_hours_id'), 'student_clinical_hours', ['id'], unique=False)
    op.create_index(op.f('ix_student_clinical_hours_student_id'), 'student_clinical_hours', ['student_id'], unique=True)

    op.create_table(
        'lab_days',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('cohort_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=True),
        sa.ForeignKeyConstraint(['cohort_id'], ['cohorts.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_lab_days_id'), 'lab_days', ['id'], unique=False)
    op.create_index(op.f('ix_lab_days_cohort_id'), 'lab_days', ['cohort_id'], unique=False)

    op.create_table(
        'lab_day_attendance',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('lab_day_id', sa.Integer(), nullable=False),
        sa.Column('student_id', sa.Integer(), nullable=False),
        sa.Column('status', attendance_status, nullable=False),
        sa.ForeignKeyConstraint(['lab_day_id'], ['lab_days.id']),
        sa.ForeignKeyConstraint(['student_id'], ['students.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('lab_day_id', 'student_id', name='uq_lab_day_student'),
    )
    op.create_index(op.f('ix_lab_day_attendance_id'), 'lab_day_attendance', ['id'], unique=False)
    op.create_index(op.f('ix_lab_day_attendance_lab_day_id'), 'lab_day_attendance', ['lab_day_id'], unique=False)
    op.create_index(op.f('ix_lab_day_attendance_student_id'), 'lab_day_attendance', ['student_id'], unique=False)


def downgrade() -> None:
    for table in (
        'lab_day_attendance',
        'lab_days',
        'student_clinical_hours',
        'peer_evaluations',
        'scenario_assessments',
        'skill_signoffs',
        'skills',
        'students',
        'cohorts',
        'programs',
        'lab_users',
    ):
        op.drop_table(table)
    attendance_status.drop(op.get_bind(), checkfirst=True)
    student_status.drop(op.get_bind(), checkfirst=True)
    user_role.drop(op.get_bind(), checkfirst=True)
