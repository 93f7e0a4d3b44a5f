"""create recall and showing tables

Revision ID: 3f1c9a7d2b64
Revises:
Create Date: 2026-10-18 09:12:31.402118

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '3f1c9a7d2b64'
down_revision = None
branch_labels = None
depends_on = None

feedback_status = sa.Enum('INTERESTED', 'MAYBE', 'NOT_FOR_US', name='feedbackstatus')


def upgrade() -> None:
    op.create_table(
        'recall_cases',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('client_name', sa.String(length=100), nullable=True),
        sa.Column('location_text', sa.String(length=200), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_recall_cases_id', 'recall_cases', ['id'])
    op.create_index('ix_recall_cases_owner_id', 'recall_cases', ['owner_id'])
    op.create_index('ix_recall_cases_created_at', 'recall_cases', ['created_at'])
    op.create_index('ix_recall_cases_deleted_at', 'recall_cases', ['deleted_at'])

    op.create_table(
        'recall_logs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('case_id', sa.Uuid(), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('log_type', sa.String(length=32), nullable=False),
        sa.Column('note', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['case_id'], ['recall_cases.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_recall_logs_id', 'recall_logs', ['id'])
    op.create_index('ix_recall_logs_case_id', 'recall_logs', ['case_id'])
    op.create_index('ix_recall_logs_owner_id', 'recall_logs', ['owner_id'])
    op.create_index('ix_recall_logs_created_at', 'recall_logs', ['created_at'])

    op.create_table(
        'recall_photos',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('log_id', sa.Uuid(), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('storage_path', sa.String(length=512), nullable=True),
        sa.Column('original_filename', sa.String(length=255), nullable=True),
        sa.Column('file_size', sa.BigInteger(), nullable=True),
        sa.Column('mime_type', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['log_id'], ['recall_logs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_recall_photos_id', 'recall_photos', ['id'])
    op.create_index('ix_recall_photos_log_id', 'recall_photos', ['log_id'])
    op.create_index('ix_recall_photos_owner_id', 'recall_photos', ['owner_id'])
    op.create_index('ix_recall_photos_storage_path', 'recall_photos', ['storage_path'], unique=True)
    op.create_index('ix_recall_photos_created_at', 'recall_photos', ['created_at'])

    op.create_table(
        'showings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('agent_id', sa.Uuid(), nullable=False),
        sa.Column('public_token', sa.String(length=64), nullable=False),
        sa.Column('buyer_name', sa.String(length=255), nullable=False),
        sa.Column('buyer_phone', sa.String(length=20), nullable=False),
        sa.Column('buyer_email', sa.String(length=255), nullable=True),
        sa.Column('address', sa.String(length=255), nullable=False),
        sa.Column('city', sa.String(length=100), nullable=False),
        sa.Column('state', sa.String(length=2), nullable=False),
        sa.Column('zip', sa.String(length=10), nullable=False),
        sa.Column('showing_datetime', sa.DateTime(), nullable=False),
        sa.Column('feedback_status', feedback_status, nullable=True),
        sa.Column('feedback_note', sa.String(length=280), nullable=True),
        sa.Column('feedback_submitted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_showings_id', 'showings', ['id'])
    op.create_index('ix_showings_agent_id', 'showings', ['agent_id'])
    op.create_index('ix_showings_public_token', 'showings', ['public_token'], unique=True)
    op.create_index('ix_showings_created_at', 'showings', ['created_at'])
    op.create_index('ix_showings_deleted_at', 'showings', ['deleted_at'])

    op.create_table(
        'showing_photos',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('showing_id', sa.Uuid(), nullable=False),
        sa.Column('storage_path', sa.String(length=512), nullable=True),
        sa.Column('original_name', sa.String(length=255), nullable=False),
        sa.Column('file_size', sa.BigInteger(), nullable=True),
        sa.Column('mime_type', sa.String(length=100), nullable=True),
        sa.Column('uploaded_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['showing_id'], ['showings.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_showing_photos_id', 'showing_photos', ['id'])
    op.create_index('ix_showing_photos_showing_id', 'showing_photos', ['showing_id'])
    op.create_index('ix_showing_photos_storage_path', 'showing_photos', ['storage_path'], unique=True)


def downgrade() -> None:
    op.drop_table('showing_photos')
    op.drop_table('showings')
    op.drop_table('recall_photos')
    op.drop_table('recall_logs')
    op.drop_table('recall_cases')
    feedback_status.drop(op.get_bind(), checkfirst=True)
