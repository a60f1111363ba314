"""Alert engine baseline: CRM entities read by checks plus alert bookkeeping.

Revision ID: 0001_alert_engine_baseline
Revises:
Create Date: 2026-10-19

Creates:
- users, user_quotas
- deals, leads, activities, tasks
- marketing_tasks
- alert_configs, global_alert_settings, user_alert_exclusions
- quota_alerts (dedup ledger), alert_email_logs (audit)
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '0001_alert_engine_baseline'
down_revision = None
branch_labels = None
depends_on = None

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), 'postgresql')


def _id_column() -> sa.Column:
    return sa.Column('id', sa.Uuid(), nullable=False)


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=nullable)


def _user_fk(name: str = 'user_id', ondelete: str = 'CASCADE', nullable: bool = False) -> list:
    return [
        sa.Column(name, sa.Uuid(), nullable=nullable),
        sa.ForeignKeyConstraint([name], ['users.id'], ondelete=ondelete),
    ]


def upgrade() -> None:
    # ==========================================================================
    # users
    # ==========================================================================
    op.create_table(
        'users',
        _id_column(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('role', sa.String(30), server_default=sa.text("'sales_rep'"), nullable=False),
        sa.Column('monthly_quota', sa.Numeric(12, 2), nullable=True),
        sa.Column('hired_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('exclude_from_reporting', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        _timestamp('created_at'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    op.create_table(
        'user_quotas',
        _id_column(),
        *_user_fk(),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('target_amount', sa.Numeric(12, 2), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'year', 'month', name='uq_user_quotas_user_month'),
    )

    # ==========================================================================
    # pipeline
    # ==========================================================================
    op.create_table(
        'deals',
        _id_column(),
        *_user_fk('owner_id'),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('stage', sa.String(30), server_default=sa.text("'prospecting'"), nullable=False),
        sa.Column('amount_total', sa.Numeric(12, 2), server_default=sa.text('0'), nullable=False),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_deals_owner_stage', 'deals', ['owner_id', 'stage'])

    op.create_table(
        'leads',
        _id_column(),
        *_user_fk('owner_id'),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('status', sa.String(30), server_default=sa.text("'new'"), nullable=False),
        sa.Column('is_converted', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_leads_owner_status', 'leads', ['owner_id', 'status'])

    op.create_table(
        'activities',
        _id_column(),
        *_user_fk(),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('subject', sa.String(255), nullable=True),
        _timestamp('created_at'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_activities_user_created', 'activities', ['user_id', 'created_at'])

    op.create_table(
        'tasks',
        _id_column(),
        *_user_fk(),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        _timestamp('created_at'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_tasks_user_due', 'tasks', ['user_id', 'completed', 'due_date'])

    # ==========================================================================
    # marketing_tasks
    # ==========================================================================
    op.create_table(
        'marketing_tasks',
        _id_column(),
        *_user_fk(),
        sa.Column('type', sa.String(30), nullable=False),
        sa.Column('title', sa.String(255), nullable=True),
        sa.Column('status', sa.String(20), server_default=sa.text("'in_progress'"), nullable=False),
        _timestamp('task_date'),
        sa.Column('likes', sa.Integer(), nullable=True),
        sa.Column('comments', sa.Integer(), nullable=True),
        sa.Column('shares', sa.Integer(), nullable=True),
        sa.Column('views', sa.Integer(), nullable=True),
        sa.Column('sent', sa.Integer(), nullable=True),
        sa.Column('opens', sa.Integer(), nullable=True),
        sa.Column('replies', sa.Integer(), nullable=True),
        sa.Column('attendees', sa.Integer(), nullable=True),
        sa.Column('meetings_booked', sa.Integer(), nullable=True),
        sa.Column('icp_engagement', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('leads_generated_count', sa.Integer(), server_default=sa.text('0'), nullable=False),
        sa.Column('response_type', sa.String(20), nullable=True),
        sa.Column('connection_accepted', sa.Boolean(), nullable=True),
        sa.Column('outcome', sa.String(20), nullable=True),
        sa.Column('outcome_override', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('override_reason', sa.Text(), nullable=True),
        sa.Column('is_template', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('template_id', sa.Uuid(), nullable=True),
        sa.Column('template_name', sa.String(255), nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.ForeignKeyConstraint(['template_id'], ['marketing_tasks.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_marketing_tasks_user_date', 'marketing_tasks', ['user_id', 'task_date'])
    op.create_index('idx_marketing_tasks_status', 'marketing_tasks', ['status', 'outcome'])

    # ==========================================================================
    # alert configuration
    # ==========================================================================
    op.create_table(
        'alert_configs',
        _id_column(),
        sa.Column('alert_category', sa.String(30), nullable=False),
        sa.Column('enabled', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('schedule', sa.String(100), server_default=sa.text("'0 9 * * 1-5'"), nullable=False),
        sa.Column('red_threshold', sa.Integer(), nullable=False),
        sa.Column('yellow_threshold', sa.Integer(), nullable=False),
        sa.Column('green_threshold', sa.Integer(), nullable=False),
        sa.Column('cc_recipients', JSON_TYPE, nullable=False),
        sa.Column('bcc_admin', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('test_mode', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('alert_category'),
    )

    op.create_table(
        'global_alert_settings',
        _id_column(),
        sa.Column('from_email', sa.String(255), nullable=False),
        sa.Column('bcc_all_to_admin', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('admin_email', sa.String(255), nullable=False),
        sa.Column('test_mode', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        _timestamp('updated_at'),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'user_alert_exclusions',
        _id_column(),
        *_user_fk(),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        _timestamp('created_at'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'idx_alert_exclusions_user_range',
        'user_alert_exclusions',
        ['user_id', 'start_date', 'end_date'],
    )

    # ==========================================================================
    # ledger + audit
    # ==========================================================================
    op.create_table(
        'quota_alerts',
        _id_column(),
        *_user_fk(),
        sa.Column('alert_type', sa.String(50), nullable=False),
        sa.Column('severity', sa.String(10), nullable=False),
        sa.Column('period', sa.String(30), nullable=False),
        _timestamp('sent_at'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'alert_type', 'period', name='uq_quota_alerts_user_type_period'),
    )

    op.create_table(
        'alert_email_logs',
        _id_column(),
        sa.Column('alert_type', sa.String(50), nullable=False),
        sa.Column('severity', sa.String(10), nullable=False),
        *_user_fk(ondelete='SET NULL', nullable=True),
        sa.Column('recipient_to', sa.String(255), nullable=False),
        sa.Column('recipients_cc', JSON_TYPE, nullable=False),
        sa.Column('recipients_bcc', JSON_TYPE, nullable=False),
        sa.Column('subject', sa.String(500), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('ses_message_id', sa.String(255), nullable=True),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('quota_target', sa.Numeric(12, 2), nullable=True),
        sa.Column('quota_actual', sa.Numeric(12, 2), nullable=True),
        sa.Column('period', sa.String(30), nullable=False),
        _timestamp('sent_at'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_alert_email_logs_sent', 'alert_email_logs', ['sent_at'])
    op.create_index('idx_alert_email_logs_user', 'alert_email_logs', ['user_id', 'alert_type'])


def downgrade() -> None:
    op.drop_index('idx_alert_email_logs_user', table_name='alert_email_logs')
    op.drop_index('idx_alert_email_logs_sent', table_name='alert_email_logs')
    op.drop_table('alert_email_logs')
    op.drop_table('quota_alerts')
    op.drop_index('idx_alert_exclusions_user_range', table_name='user_alert_exclusions')
    op.drop_table('user_alert_exclusions')
    op.drop_table('global_alert_settings')
    op.drop_table('alert_configs')
    op.drop_index('idx_marketing_tasks_status', table_name='marketing_tasks')
    op.drop_index('idx_marketing_tasks_user_date', table_name='marketing_tasks')
    op.drop_table('marketing_tasks')
    op.drop_index('idx_tasks_user_due', table_name='tasks')
    op.drop_table('tasks')
    op.drop_index('idx_activities_user_created', table_name='activities')
    op.drop_table('activities')
    op.drop_index('idx_leads_owner_status', table_name='leads')
    op.drop_table('leads')
    op.drop_index('idx_deals_owner_stage', table_name='deals')
    op.drop_table('deals')
    op.drop_table('user_quotas')
    op.drop_table('users')
