"""create complaints and activities tables

Revision ID: 0001
Revises:
"""

from alembic import op
import sqlalchemy as sa

revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'complaints',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('phone_number', sa.String(), nullable=False),
        sa.Column('category', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('location', sa.String(), nullable=False, server_default=''),
        # Plain text rather than an ENUM: status updates are not restricted
        sa.Column('status', sa.String(), nullable=False, server_default='pending'),
        sa.Column('image_before', sa.String(), nullable=True),
        sa.Column('image_before_key', sa.String(), nullable=True),
        sa.Column('image_after', sa.String(), nullable=True),
        sa.Column('image_after_key', sa.String(), nullable=True),
        sa.Column('image_type', sa.String(), nullable=True, server_default='image/jpeg'),
        sa.Column('file_size', sa.Integer(), nullable=True),
        sa.Column('resolved_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True, server_default=sa.func.now()),
    )
    op.create_index('ix_complaints_phone_number', 'complaints', ['phone_number'])
    op.create_index('ix_complaints_status', 'complaints', ['status'])
    op.create_index('ix_complaints_created_at', 'complaints', ['created_at'])

    op.create_table(
        'activities',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=True, server_default=sa.func.now()),
    )
    op.create_index('ix_activities_date', 'activities', ['date'])


def downgrade():
    op.drop_index('ix_activities_date', table_name='activities')
    op.drop_table('activities')
    op.drop_index('ix_complaints_created_at', table_name='complaints')
    op.drop_index('ix_complaints_status', table_name='complaints')
    op.drop_index('ix_complaints_phone_number', table_name='complaints')
    op.drop_table('complaints')
