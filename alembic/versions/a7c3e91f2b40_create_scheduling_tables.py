"""create_scheduling_tables

Revision ID: a7c3e91f2b40
Revises:
Create Date: 2024-01-02 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a7c3e91f2b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'polls',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('modality', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_by', sa.String(length=254), nullable=True),
        sa.Column('selected_slot_id', sa.Integer(), nullable=True),
        sa.Column('video_join_url', sa.String(length=500), nullable=True),
        sa.Column('video_meeting_id', sa.String(length=100), nullable=True),
        sa.Column('calendar_event_id', sa.String(length=200), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('finalized_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('draft', 'active', 'completed', 'cancelled', 'expired')",
            name='ck_polls_status',
        ),
        sa.CheckConstraint('duration_minutes > 0', name='ck_polls_duration'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_polls_status', 'polls', ['status'])

    op.create_table(
        'time_slots',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('poll_id', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('available_count', sa.Integer(), nullable=False),
        sa.Column('total_responses', sa.Integer(), nullable=False),
        sa.CheckConstraint('end_time > start_time', name='ck_time_slots_range'),
        sa.ForeignKeyConstraint(['poll_id'], ['polls.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_time_slots_poll_start', 'time_slots', ['poll_id', 'start_time'])

    op.create_table(
        'participants',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('poll_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('token', sa.String(length=64), nullable=False),
        sa.Column('has_responded', sa.Boolean(), nullable=False),
        sa.Column('responded_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['poll_id'], ['polls.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('token'),
        sa.UniqueConstraint('poll_id', 'email', name='uq_poll_participant_email'),
    )
    op.create_index('idx_participants_poll', 'participants', ['poll_id'])

    op.create_table(
        'slot_responses',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('poll_id', sa.Integer(), nullable=False),
        sa.Column('participant_id', sa.Integer(), nullable=False),
        sa.Column('slot_id', sa.Integer(), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['poll_id'], ['polls.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['participant_id'], ['participants.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['slot_id'], ['time_slots.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('participant_id', 'slot_id', name='uq_participant_slot'),
    )
    op.create_index('idx_slot_responses_slot', 'slot_responses', ['slot_id'])
    op.create_index('idx_slot_responses_poll', 'slot_responses', ['poll_id'])

    op.create_table(
        'email_log',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('poll_id', sa.Integer(), nullable=False),
        sa.Column('participant_id', sa.Integer(), nullable=True),
        sa.Column('email_type', sa.String(length=20), nullable=False),
        sa.Column('to_email', sa.String(length=254), nullable=False),
        sa.Column('subject', sa.String(length=300), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['poll_id'], ['polls.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['participant_id'], ['participants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_email_log_poll', 'email_log', ['poll_id'])


def downgrade():
    op.drop_index('idx_email_log_poll', table_name='email_log')
    op.drop_table('email_log')
    op.drop_index('idx_slot_responses_poll', table_name='slot_responses')
    op.drop_index('idx_slot_responses_slot', table_name='slot_responses')
    op.drop_table('slot_responses')
    op.drop_index('idx_participants_poll', table_name='participants')
    op.drop_table('participants')
    op.drop_index('idx_time_slots_poll_start', table_name='time_slots')
    op.drop_table('time_slots')
    op.drop_index('ix_polls_status', table_name='polls')
    op.drop_table('polls')
