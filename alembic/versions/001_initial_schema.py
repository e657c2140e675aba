"""initial schema: user, exercise, history

Revision ID: 001
Revises:
Create Date: 2025-01-06 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'user',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('username', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.UniqueConstraint('username', name='uq_user_username'),
        sa.UniqueConstraint('email', name='uq_user_email'),
    )

    # Deleting a user removes its exercises.
    op.create_table(
        'exercise',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), server_default='10', nullable=False),
        sa.Column('current_bpm_record', sa.Integer(), server_default='0', nullable=False),
        sa.Column('user_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
        sa.CheckConstraint('duration_minutes >= 1', name='ck_exercise_duration_positive'),
        sa.CheckConstraint('current_bpm_record >= 0', name='ck_exercise_bpm_record_non_negative'),
    )
    op.create_index('ix_exercise_user_id', 'exercise', ['user_id'])

    # Deleting an exercise removes its history.
    op.create_table(
        'history',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('bpm', sa.Integer(), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('exercise_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.ForeignKeyConstraint(['exercise_id'], ['exercise.id'], ondelete='CASCADE'),
        sa.CheckConstraint('bpm >= 0', name='ck_history_bpm_non_negative'),
    )
    op.create_index('ix_history_exercise_id_date', 'history', ['exercise_id', 'date'])


def downgrade() -> None:
    op.drop_index('ix_history_exercise_id_date', table_name='history')
    op.drop_table('history')
    op.drop_index('ix_exercise_user_id', table_name='exercise')
    op.drop_table('exercise')
    op.drop_table('user')
