"""create campaign and scheduling tables

Revision ID: c001_create_campaign_tables
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = 'c001_create_campaign_tables'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ENUM_VALUES = {
    'platform': ('TWITTER', 'INSTAGRAM', 'FACEBOOK', 'LINKEDIN', 'TIKTOK', 'EMAIL', 'LINK_IN_BIO'),
    'post_type': ('POST', 'STORY', 'REEL', 'THREAD', 'ARTICLE'),
    'campaign_status': ('GENERATING', 'READY', 'FAILED'),
    'asset_type': ('SOCIAL_POST', 'EMAIL', 'PAGE_VARIANT'),
    'asset_status': ('DRAFT', 'SCHEDULED', 'PUBLISHED', 'ARCHIVED'),
    'schedule_status': ('PENDING', 'PROCESSING', 'PUBLISHED', 'FAILED', 'CANCELLED'),
    'engagement_event_type': ('VIEW', 'CLICK'),
    'analysis_job_status': ('PENDING', 'RUNNING', 'COMPLETED', 'FAILED'),
}


def _enum(name):
    # Types are created once up front; tables must not try again.
    values = ENUM_VALUES[name]
    return sa.Enum(*values, name=name).with_variant(
        postgresql.ENUM(*values, name=name, create_type=False), 'postgresql'
    )


def _ts(name, nullable=False):
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def upgrade() -> None:
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        for name, values in ENUM_VALUES.items():
            postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)

    op.create_table(
        'campaigns',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('product_id', sa.String(), nullable=True),
        sa.Column('block_id', sa.String(), nullable=True),
        sa.Column('custom_content', sa.JSON(), nullable=True),
        sa.Column('name', sa.String(300), nullable=False),
        sa.Column('goal', sa.String(30), nullable=True),
        sa.Column('target_audience', sa.Text(), nullable=True),
        sa.Column('status', _enum('campaign_status'), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True),
        _ts('created_at'),
        _ts('updated_at'),
    )
    op.create_index('ix_campaigns_user_id', 'campaigns', ['user_id'])
    op.create_index('ix_campaigns_product_id', 'campaigns', ['product_id'])
    op.create_index('ix_campaigns_block_id', 'campaigns', ['block_id'])
    op.create_index('idx_campaigns_user_created', 'campaigns', ['user_id', 'created_at'])

    op.create_table(
        'campaign_assets',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column(
            'campaign_id', sa.String(),
            sa.ForeignKey('campaigns.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('type', _enum('asset_type'), nullable=False),
        sa.Column('platform', _enum('platform'), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('media_url', sa.String(1000), nullable=True),
        sa.Column('status', _enum('asset_status'), nullable=False),
        _ts('scheduled_at', nullable=True),
        _ts('published_at', nullable=True),
        sa.Column('views', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('clicks', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('conversions', sa.Integer(), nullable=False, server_default=sa.text('0')),
        _ts('created_at'),
        _ts('updated_at'),
    )
    op.create_index('ix_campaign_assets_campaign_id', 'campaign_assets', ['campaign_id'])

    op.create_table(
        'scheduled_posts',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('media_urls', sa.JSON(), nullable=False),
        sa.Column('platform', _enum('platform'), nullable=False),
        sa.Column('post_type', _enum('post_type'), nullable=False),
        _ts('scheduled_for'),
        sa.Column('timezone', sa.String(64), nullable=False),
        sa.Column('auto_post', sa.Boolean(), nullable=False),
        sa.Column('status', _enum('schedule_status'), nullable=False),
        sa.Column(
            'campaign_asset_id', sa.String(),
            sa.ForeignKey('campaign_assets.id', ondelete='SET NULL'), nullable=True,
        ),
        sa.Column('batch_id', sa.String(), nullable=True),
        sa.Column('attempts', sa.Integer(), nullable=False),
        sa.Column('last_error', sa.Text(), nullable=True),
        _ts('published_at', nullable=True),
        sa.Column('external_url', sa.String(1000), nullable=True),
        _ts('created_at'),
        _ts('updated_at'),
    )
    op.create_index('ix_scheduled_posts_user_id', 'scheduled_posts', ['user_id'])
    op.create_index('ix_scheduled_posts_batch_id', 'scheduled_posts', ['batch_id'])
    op.create_index('idx_scheduled_posts_user_scheduled', 'scheduled_posts', ['user_id', 'scheduled_for'])
    op.create_index('idx_scheduled_posts_status_scheduled', 'scheduled_posts', ['status', 'scheduled_for'])

    op.create_table(
        'optimal_time_slots',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('job_id', sa.String(), nullable=True),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('hour_of_day', sa.Integer(), nullable=False),
        sa.Column('platform', _enum('platform'), nullable=True),
        sa.Column('avg_engagement_rate', sa.Float(), nullable=False),
        sa.Column('total_views', sa.Integer(), nullable=False),
        sa.Column('total_clicks', sa.Integer(), nullable=False),
        sa.Column('sample_size', sa.Integer(), nullable=False),
        sa.Column('confidence', sa.Float(), nullable=False),
        sa.Column('rank', sa.Integer(), nullable=False),
        _ts('analyzed_from'),
        _ts('analyzed_to'),
        _ts('created_at'),
    )
    op.create_index('ix_optimal_time_slots_user_id', 'optimal_time_slots', ['user_id'])
    op.create_index(
        'idx_optimal_time_slots_user_rank', 'optimal_time_slots', ['user_id', 'rank'], unique=True
    )

    op.create_table(
        'engagement_events',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('page_id', sa.String(), nullable=True),
        sa.Column('block_id', sa.String(), nullable=True),
        sa.Column('event_type', _enum('engagement_event_type'), nullable=False),
        sa.Column('platform', _enum('platform'), nullable=True),
        _ts('occurred_at'),
    )
    op.create_index(
        'idx_engagement_events_user_type_time', 'engagement_events',
        ['user_id', 'event_type', 'occurred_at'],
    )

    op.create_table(
        'analysis_jobs',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('status', _enum('analysis_job_status'), nullable=False),
        sa.Column('events_considered', sa.Integer(), nullable=False),
        sa.Column('slots_produced', sa.Integer(), nullable=False),
        sa.Column('partial', sa.Boolean(), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True),
        _ts('created_at'),
        _ts('started_at', nullable=True),
        _ts('completed_at', nullable=True),
    )
    op.create_index('ix_analysis_jobs_user_id', 'analysis_jobs', ['user_id'])

    op.create_table(
        'scheduling_preferences',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=False, unique=True),
        sa.Column('min_hours_between', sa.Float(), nullable=True),
        sa.Column('max_posts_per_day', sa.Integer(), nullable=True),
        sa.Column('timezone', sa.String(64), nullable=False),
        _ts('updated_at'),
    )


def downgrade() -> None:
    op.drop_table('scheduling_preferences')
    op.drop_table('analysis_jobs')
    op.drop_table('engagement_events')
    op.drop_table('optimal_time_slots')
    op.drop_table('scheduled_posts')
    op.drop_table('campaign_assets')
    op.drop_table('campaigns')

    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        for name in ENUM_VALUES:
            postgresql.ENUM(name=name).drop(bind, checkfirst=True)
