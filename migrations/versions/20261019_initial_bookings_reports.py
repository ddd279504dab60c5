"""Initial migration: bookings, reports

Revision ID: 20261019
Revises:
Create Date: 2026-10-19 10:00:00

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from core.enums import ACTIONS_TAKEN, BOOKING_STATUSES, REPORT_PRIORITIES, REPORT_STATUSES, REPORT_TYPES, sql_in

# revision identifiers, used by Alembic.
revision: str = '20261019'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # Create bookings table
    op.create_table('bookings',
    sa.Column('id', sa.BigInteger().with_variant(sa.Integer(), 'sqlite'), autoincrement=True, nullable=False),
    sa.Column('space', sa.String(length=64), nullable=False),
    sa.Column('guest', sa.String(length=64), nullable=False),
    sa.Column('start_time', sa.DateTime(), nullable=False),
    sa.Column('end_time', sa.DateTime(), nullable=False),
    sa.Column('status', sa.String(length=16), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.Column('updated_at', sa.DateTime(), nullable=False),
    sa.CheckConstraint(f'status IN ({sql_in(BOOKING_STATUSES)})', name='chk_booking_status'),
    sa.CheckConstraint('end_time > start_time', name='chk_booking_window'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_bookings_guest'), 'bookings', ['guest'], unique=False)
    # Overlap lookups (not unique: overlap is guarded by the write path)
    op.create_index('idx_bookings_space_window', 'bookings', ['space', 'start_time', 'end_time'], unique=False)
    op.create_index('idx_bookings_space_status', 'bookings', ['space', 'status'], unique=False)

    # Create reports table
    op.create_table('reports',
    sa.Column('id', sa.BigInteger().with_variant(sa.Integer(), 'sqlite'), autoincrement=True, nullable=False),
    sa.Column('reporter_id', sa.String(length=64), nullable=False),
    sa.Column('reported_space_id', sa.String(length=64), nullable=True),
    sa.Column('reported_user_id', sa.String(length=64), nullable=True),
    sa.Column('type', sa.String(length=32), nullable=False),
    sa.Column('reason', sa.String(length=500), nullable=False),
    sa.Column('description', sa.Text(), nullable=False),
    sa.Column('evidence', sa.JSON(), nullable=False),
    sa.Column('status', sa.String(length=16), nullable=False),
    sa.Column('priority', sa.String(length=16), nullable=False),
    sa.Column('priority_explicit', sa.Boolean(), nullable=False),
    sa.Column('admin_notes', sa.Text(), nullable=True),
    sa.Column('action_taken', sa.String(length=32), nullable=True),
    sa.Column('resolved_by', sa.String(length=64), nullable=True),
    sa.Column('resolved_at', sa.DateTime(), nullable=True),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.Column('updated_at', sa.DateTime(), nullable=False),
    sa.CheckConstraint('(reported_space_id IS NULL) <> (reported_user_id IS NULL)', name='chk_report_single_target'),
    sa.CheckConstraint(f'type IN ({sql_in(REPORT_TYPES)})', name='chk_report_type'),
    sa.CheckConstraint(f'status IN ({sql_in(REPORT_STATUSES)})', name='chk_report_status'),
    sa.CheckConstraint(f'priority IN ({sql_in(REPORT_PRIORITIES)})', name='chk_report_priority'),
    sa.CheckConstraint(
        f'action_taken IS NULL OR action_taken IN ({sql_in(ACTIONS_TAKEN)})', name='chk_report_action_taken'
    ),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_reports_reporter_id'), 'reports', ['reporter_id'], unique=False)
    op.create_index(op.f('ix_reports_reported_space_id'), 'reports', ['reported_space_id'], unique=False)
    op.create_index(op.f('ix_reports_reported_user_id'), 'reports', ['reported_user_id'], unique=False)
    # Admin triage queue
    op.create_index('idx_reports_status_priority', 'reports', ['status', 'priority'], unique=False)
    op.create_index('idx_reports_type_created', 'reports', ['type', 'created_at'], unique=False)
    op.create_index('idx_reports_created_at', 'reports', ['created_at'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_reports_created_at', table_name='reports')
    op.drop_index('idx_reports_type_created', table_name='reports')
    op.drop_index('idx_reports_status_priority', table_name='reports')
    op.drop_index(op.f('ix_reports_reported_user_id'), table_name='reports')
    op.drop_index(op.f('ix_reports_reported_space_id'), table_name='reports')
    op.drop_index(op.f('ix_reports_reporter_id'), table_name='reports')
    op.drop_table('reports')

    op.drop_index('idx_bookings_space_status', table_name='bookings')
    op.drop_index('idx_bookings_space_window', table_name='bookings')
    op.drop_index(op.f('ix_bookings_guest'), table_name='bookings')
    op.drop_table('bookings')
