"""plan schema

Revision ID: 3f1a9c2d7b10
Revises: 
Create Date: 2026-10-18 10:12:44.208113

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a9c2d7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'tbl_users',
        sa.Column('user_id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('first_name', sa.Text(), nullable=True),
        sa.Column('last_name', sa.Text(), nullable=True),
        sa.Column('email', sa.String(255), nullable=True, unique=True),
        sa.Column('role', sa.String(12), nullable=False, server_default=sa.text("'student'")),
    )

    op.create_table(
        'tbl_courses',
        sa.Column('course_id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('course_code', sa.String(20), nullable=False, unique=True),
        sa.Column('title', sa.Text(), nullable=True),
        sa.Column('credits', sa.Integer(), nullable=False),
        sa.Column('restriction', sa.SmallInteger(), nullable=False, server_default=sa.text('0')),
        sa.CheckConstraint('credits > 0', name='ck_courses_credits_positive'),
        sa.CheckConstraint('restriction >= 0', name='ck_courses_restriction_non_negative'),
    )

    op.create_table(
        'tbl_plans',
        sa.Column('plan_id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('tbl_users.user_id', ondelete='CASCADE'), nullable=False),
        sa.Column('plan_name', sa.String(50), nullable=False),
        sa.Column('status', sa.SmallInteger(), nullable=False, server_default=sa.text('2')),
        sa.Column('created', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('last_updated', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('status BETWEEN 0 AND 4', name='ck_plans_status_range'),
    )
    op.create_index('ix_plans_student', 'tbl_plans', ['student_id'])
    op.create_index('ix_plans_status', 'tbl_plans', ['status'])

    op.create_table(
        'tbl_selected_courses',
        sa.Column('plan_id', sa.Integer(), sa.ForeignKey('tbl_plans.plan_id', ondelete='CASCADE'), primary_key=True),
        sa.Column('course_id', sa.Integer(), sa.ForeignKey('tbl_courses.course_id', ondelete='CASCADE'), primary_key=True),
    )

    op.create_table(
        'tbl_plan_reviews',
        sa.Column('review_id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('plan_id', sa.Integer(), sa.ForeignKey('tbl_plans.plan_id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('tbl_users.user_id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', sa.SmallInteger(), nullable=False),
        sa.Column('time', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_plan_reviews_plan_time', 'tbl_plan_reviews', ['plan_id', 'time'])

    op.create_table(
        'tbl_comments',
        sa.Column('comment_id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('plan_id', sa.Integer(), sa.ForeignKey('tbl_plans.plan_id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('tbl_users.user_id', ondelete='CASCADE'), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('time', sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_comments_plan_time', 'tbl_comments', ['plan_id', 'time'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_comments_plan_time', table_name='tbl_comments')
    op.drop_table('tbl_comments')
    op.drop_index('ix_plan_reviews_plan_time', table_name='tbl_plan_reviews')
    op.drop_table('tbl_plan_reviews')
    op.drop_table('tbl_selected_courses')
    op.drop_index('ix_plans_status', table_name='tbl_plans')
    op.drop_index('ix_plans_student', table_name='tbl_plans')
    op.drop_table('tbl_plans')
    op.drop_table('tbl_courses')
    op.drop_table('tbl_users')
