"""Initial migration - create all tables

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

Creates the tables of the student-records backend:
- roles: role catalog (admin, teacher, student)
- users: core identity rows, including status audit columns
- user_profiles: one profile per student user (PK = FK to users)
- classes: class catalog with comma-separated assigned sections
- sections: global section catalog
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── Roles Table ───────────────────────────────────────────
    op.create_table(
        'roles',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(50), nullable=False, unique=True),
    )

    # ── Users Table ───────────────────────────────────────────
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(100), nullable=False, unique=True),
        sa.Column('role_id', sa.Integer(), sa.ForeignKey('roles.id'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('reporter_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status_last_reviewed_dt', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status_last_reviewer_id', sa.Integer(),
                  sa.ForeignKey('users.id'), nullable=True),
    )
    op.create_index('ix_users_role_id', 'users', ['role_id'])

    # ── User Profiles Table ───────────────────────────────────
    op.create_table(
        'user_profiles',
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), primary_key=True),
        sa.Column('gender', sa.String(10), nullable=False),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('dob', sa.Date(), nullable=False),
        sa.Column('admission_date', sa.Date(), nullable=True),
        sa.Column('class_name', sa.String(50), nullable=False),
        sa.Column('section_name', sa.String(50), nullable=False),
        sa.Column('roll', sa.Integer(), nullable=False),
        sa.Column('current_address', sa.String(255), nullable=False),
        sa.Column('permanent_address', sa.String(255), nullable=False),
        sa.Column('father_name', sa.String(100), nullable=False),
        sa.Column('father_phone', sa.String(20), nullable=True),
        sa.Column('mother_name', sa.String(100), nullable=True),
        sa.Column('mother_phone', sa.String(20), nullable=True),
        sa.Column('guardian_name', sa.String(100), nullable=False),
        sa.Column('guardian_phone', sa.String(20), nullable=False),
        sa.Column('relation_of_guardian', sa.String(30), nullable=False),
    )
    op.create_index('ix_user_profiles_class_section', 'user_profiles',
                    ['class_name', 'section_name'])

    # ── Reference Catalogs ────────────────────────────────────
    op.create_table(
        'classes',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(50), nullable=False, unique=True),
        sa.Column('sections', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
    )
    op.create_table(
        'sections',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(50), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table('sections')
    op.drop_table('classes')
    op.drop_index('ix_user_profiles_class_section', table_name='user_profiles')
    op.drop_table('user_profiles')
    op.drop_index('ix_users_role_id', table_name='users')
    op.drop_table('users')
    op.drop_table('roles')
