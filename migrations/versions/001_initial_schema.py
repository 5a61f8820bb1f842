"""initial schema

Revision ID: 001
Revises: 
Create Date: 2026-10-18 09:00:00.000000

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
    # --- users ---
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('avatar', sa.String(length=512), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('hashed_password', sa.String(length=255), nullable=True),
        sa.Column('role', sa.String(length=16), server_default='STUDENT', nullable=False),
        sa.Column('status', sa.String(length=32), server_default='PENDING_VERIFICATION', nullable=False),
        sa.Column('email_verified', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('phone_verified', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
        sa.UniqueConstraint('email', name='uq_users_email')
    )

    # --- categories ---
    op.create_table(
        'categories',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('slug', sa.String(length=128), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_categories'),
        sa.UniqueConstraint('slug', name='uq_categories_slug')
    )

    # --- courses ---
    op.create_table(
        'courses',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category_id', sa.String(length=64), nullable=False),
        sa.Column('instructor_id', sa.String(length=64), nullable=False),
        sa.Column('level', sa.String(length=16), server_default='BEGINNER', nullable=False),
        sa.Column('language', sa.String(length=16), server_default='ENGLISH', nullable=False),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('original_price', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('is_free', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('estimated_hours', sa.Integer(), nullable=True),
        sa.Column('thumbnail', sa.String(length=512), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('is_published', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], name='fk_courses_category_id_categories'),
        sa.ForeignKeyConstraint(['instructor_id'], ['users.id'], name='fk_courses_instructor_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_courses'),
        sa.UniqueConstraint('slug', name='uq_courses_slug')
    )
    op.create_index('idx_courses_published_created', 'courses', ['is_published', 'created_at'], unique=False)
    op.create_index('idx_courses_instructor', 'courses', ['instructor_id'], unique=False)

    # --- live_classes ---
    op.create_table(
        'live_classes',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('subject', sa.String(length=128), nullable=True),
        sa.Column('instructor_id', sa.String(length=64), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('max_attendees', sa.Integer(), nullable=True),
        sa.Column('is_public', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('status', sa.String(length=16), server_default='SCHEDULED', nullable=False),
        sa.Column('meeting_url', sa.String(length=512), nullable=True),
        sa.Column('meeting_id', sa.String(length=128), nullable=True),
        sa.Column('meeting_password', sa.String(length=128), nullable=True),
        sa.Column('recording_enabled', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['instructor_id'], ['users.id'], name='fk_live_classes_instructor_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_live_classes')
    )
    op.create_index('idx_live_classes_instructor_start', 'live_classes', ['instructor_id', 'start_time'], unique=False)
    op.create_index('idx_live_classes_status_start', 'live_classes', ['status', 'start_time'], unique=False)

    # --- live_class_attendances ---
    op.create_table(
        'live_class_attendances',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('live_class_id', sa.String(length=64), nullable=False),
        sa.Column('joined_at', sa.DateTime(), nullable=False),
        sa.Column('left_at', sa.DateTime(), nullable=True),
        sa.Column('duration', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_live_class_attendances_user_id_users'),
        sa.ForeignKeyConstraint(['live_class_id'], ['live_classes.id'], name='fk_live_class_attendances_live_class_id_live_classes'),
        sa.PrimaryKeyConstraint('id', name='pk_live_class_attendances'),
        sa.UniqueConstraint('user_id', 'live_class_id', name='uq_attendance_user_class')
    )
    op.create_index('idx_attendance_class', 'live_class_attendances', ['live_class_id'], unique=False)


def downgrade() -> None:
    op.drop_table('live_class_attendances')
    op.drop_table('live_classes')
    op.drop_table('courses')
    op.drop_table('categories')
    op.drop_table('users')
