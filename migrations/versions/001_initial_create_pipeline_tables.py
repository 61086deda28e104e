"""create reports, detection, deterrent settings, analytics and activity tables

Revision ID: 001_initial
Revises: 
Create Date: 2026-10-19 10:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _base_columns() -> list[sa.Column]:
    return [
        sa.Column('uid', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table('reports',
    *_base_columns(),
    sa.Column('image_url', sa.Text(), nullable=False),
    sa.Column('language', sa.String(length=10), nullable=True),
    sa.Column('status', sa.String(length=20), nullable=False),
    sa.Column('severity', sa.String(length=20), nullable=True),
    sa.Column('crop_type', sa.String(length=255), nullable=False),
    sa.Column('analysis', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
    sa.PrimaryKeyConstraint('uid')
    )
    op.create_index(op.f('ix_reports_created_at'), 'reports', ['created_at'], unique=False)
    op.create_index(op.f('ix_reports_status'), 'reports', ['status'], unique=False)

    op.create_table('animal_detections',
    *_base_columns(),
    sa.Column('animal_type', sa.String(length=100), nullable=False),
    sa.Column('distance', sa.Float(), nullable=True),
    sa.Column('confidence', sa.Float(), nullable=False),
    sa.Column('status', sa.String(length=20), nullable=False),
    sa.Column('deterrent_activated', sa.Boolean(), nullable=False),
    sa.Column('latitude', sa.Float(), nullable=True),
    sa.Column('longitude', sa.Float(), nullable=True),
    sa.Column('source', sa.String(length=20), nullable=False),
    sa.Column('report_id', sa.String(), nullable=True),
    sa.PrimaryKeyConstraint('uid')
    )
    op.create_index(op.f('ix_animal_detections_created_at'), 'animal_detections', ['created_at'], unique=False)
    op.create_index(op.f('ix_animal_detections_animal_type'), 'animal_detections', ['animal_type'], unique=False)
    op.create_index(op.f('ix_animal_detections_report_id'), 'animal_detections', ['report_id'], unique=False)

    op.create_table('deterrent_settings',
    *_base_columns(),
    sa.Column('is_enabled', sa.Boolean(), nullable=False),
    sa.Column('auto_activate', sa.Boolean(), nullable=False),
    sa.Column('volume', sa.Integer(), nullable=False),
    sa.Column('sound_type', sa.String(length=50), nullable=False),
    sa.Column('activation_distance', sa.Float(), nullable=False),
    sa.PrimaryKeyConstraint('uid')
    )
    op.create_index(op.f('ix_deterrent_settings_created_at'), 'deterrent_settings', ['created_at'], unique=False)

    op.create_table('scan_analytics',
    *_base_columns(),
    sa.Column('report_id', sa.String(), nullable=False),
    sa.Column('category', sa.String(length=20), nullable=False),
    sa.Column('detection_name', sa.String(length=255), nullable=False),
    sa.Column('confidence', sa.Float(), nullable=False),
    sa.Column('processing_time_ms', sa.Integer(), nullable=False),
    sa.PrimaryKeyConstraint('uid')
    )
    op.create_index(op.f('ix_scan_analytics_created_at'), 'scan_analytics', ['created_at'], unique=False)
    op.create_index(op.f('ix_scan_analytics_report_id'), 'scan_analytics', ['report_id'], unique=False)

    op.create_table('activity_logs',
    *_base_columns(),
    sa.Column('action', sa.String(length=20), nullable=False),
    sa.Column('details', sa.Text(), nullable=False),
    sa.Column('meta', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
    sa.PrimaryKeyConstraint('uid')
    )
    op.create_index(op.f('ix_activity_logs_created_at'), 'activity_logs', ['created_at'], unique=False)
    op.create_index(op.f('ix_activity_logs_action'), 'activity_logs', ['action'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_activity_logs_action'), table_name='activity_logs')
    op.drop_index(op.f('ix_activity_logs_created_at'), table_name='activity_logs')
    op.drop_table('activity_logs')
    op.drop_index(op.f('ix_scan_analytics_report_id'), table_name='scan_analytics')
    op.drop_index(op.f('ix_scan_analytics_created_at'), table_name='scan_analytics')
    op.drop_table('scan_analytics')
    op.drop_index(op.f('ix_deterrent_settings_created_at'), table_name='deterrent_settings')
    op.drop_table('deterrent_settings')
    op.drop_index(op.f('ix_animal_detections_report_id'), table_name='animal_detections')
    op.drop_index(op.f('ix_animal_detections_animal_type'), table_name='animal_detections')
    op.drop_index(op.f('ix_animal_detections_created_at'), table_name='animal_detections')
    op.drop_table('animal_detections')
    op.drop_index(op.f('ix_reports_status'), table_name='reports')
    op.drop_index(op.f('ix_reports_created_at'), table_name='reports')
    op.drop_table('reports')
