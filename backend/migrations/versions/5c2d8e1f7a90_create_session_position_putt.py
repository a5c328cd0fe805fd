"""create practice_session, position and putt tables

Revision ID: 5c2d8e1f7a90
Revises:
Create Date: 2026-10-19 09:30:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2d8e1f7a90'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    # Tables may already exist when the database was bootstrapped with `flask db-reset`
    if 'practice_session' not in existing_tables:
        op.create_table(
            'practice_session',
            sa.Column('session_id', sa.String(length=64), primary_key=True),
            sa.Column('start_time', sa.BigInteger(), nullable=False),
            sa.Column('end_time', sa.BigInteger(), nullable=True),
            sa.Column('penalty_mode', sa.Boolean(), nullable=False),
            sa.Column('current_position_number', sa.Integer(), nullable=False),
            sa.Column('final_score', sa.Integer(), nullable=True),
            sa.Column('session_summary', sa.Text(), nullable=True),
            sa.Column('created_at', sa.BigInteger(), nullable=False),
        )
        op.create_index('ix_practice_session_start_time', 'practice_session', ['start_time'])
        op.create_index('ix_practice_session_created_at', 'practice_session', ['created_at'])

    if 'position' not in existing_tables:
        op.create_table(
            'position',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('session_id', sa.String(length=64),
                      sa.ForeignKey('practice_session.session_id', ondelete='CASCADE'), nullable=False),
            sa.Column('position_number', sa.Integer(), nullable=False),
            sa.Column('base_attempts_allocated', sa.Integer(), nullable=False),
            sa.Column('attempts_carried_over', sa.Integer(), nullable=False),
            sa.Column('total_attempts_available', sa.Integer(), nullable=False),
            sa.Column('attempts_used', sa.Integer(), nullable=False),
            sa.Column('putts_in_sunk', sa.Integer(), nullable=False),
            sa.Column('position_score', sa.Integer(), nullable=False),
            sa.Column('accuracy_rate', sa.Integer(), nullable=False),
            sa.Column('status', sa.String(length=32), nullable=False),
            sa.Column('completed', sa.Boolean(), nullable=False),
        )
        op.create_index('ix_position_session_id', 'position', ['session_id'])

    if 'putt' not in existing_tables:
        op.create_table(
            'putt',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('position_id', sa.Integer(),
                      sa.ForeignKey('position.id', ondelete='CASCADE'), nullable=False),
            sa.Column('sequence', sa.Integer(), nullable=False),
            sa.Column('result', sa.String(length=8), nullable=False),
            sa.Column('timestamp', sa.BigInteger(), nullable=False),
            sa.CheckConstraint("result IN ('sink', 'miss')", name='ck_putt_result'),
        )
        op.create_index('ix_putt_position_id', 'putt', ['position_id'])


def downgrade():
    op.drop_index('ix_putt_position_id', table_name='putt')
    op.drop_table('putt')
    op.drop_index('ix_position_session_id', table_name='position')
    op.drop_table('position')
    op.drop_index('ix_practice_session_created_at', table_name='practice_session')
    op.drop_index('ix_practice_session_start_time', table_name='practice_session')
    op.drop_table('practice_session')
