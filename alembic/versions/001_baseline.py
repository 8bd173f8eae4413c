"""Baseline migration - tables of every service.

Revision ID: 001_baseline
Revises: None
Create Date: 2026-10-19

In a split deployment each service's database only needs its own tables;
the baseline creates all of them for the single-database setup.
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_baseline"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _address() -> list[sa.Column]:
    return [
        sa.Column("country", sa.String(100), nullable=False),
        sa.Column("state", sa.String(100), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("street", sa.String(255), nullable=False),
        sa.Column("house_number", sa.Integer(), nullable=False),
    ]


def upgrade() -> None:
    # client-service
    op.create_table(
        "clients",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("sex", sa.Enum("MALE", "FEMALE", name="client_sex"), nullable=False),
        sa.Column("phone_number", sa.String(50), nullable=False),
        sa.Column("country", sa.String(100), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("street", sa.String(255), nullable=False),
        sa.Column("house_number", sa.Integer(), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False),
        *_timestamps(),
    )

    # clinic-service
    op.create_table("departments", sa.Column("id", sa.Integer(), primary_key=True), *_address(), *_timestamps())
    op.create_table(
        "facilities",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        *_timestamps(),
    )
    op.create_table(
        "department_facility",
        sa.Column("department_id", sa.Integer(), sa.ForeignKey("departments.id"), primary_key=True),
        sa.Column("facility_id", sa.Integer(), sa.ForeignKey("facilities.id"), primary_key=True),
    )

    # employee-service
    op.create_table(
        "employees",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("role", sa.String(20), nullable=False, index=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False),
        sa.Column("department_id", sa.Integer(), nullable=True, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=False),
        sa.Column("salary", sa.Numeric(12, 2), nullable=False),
        sa.Column("hire_date", sa.Date(), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("sex", sa.String(10), nullable=False),
        *_address(),
        sa.Column("specialty", sa.String(100), nullable=True, index=True),
        sa.Column("practice_beginning_date", sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "team_members",
        sa.Column("manager_id", sa.Integer(), sa.ForeignKey("employees.id"), primary_key=True),
        sa.Column("doctor_id", sa.Integer(), sa.ForeignKey("employees.id"), primary_key=True),
    )

    # registration-service
    op.create_table(
        "duties",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("needed_specialty", sa.String(100), nullable=False, index=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "registrations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("duty_id", sa.Integer(), sa.ForeignKey("duties.id"), nullable=True, index=True),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("doctor_id", sa.Integer(), nullable=False, index=True),
        sa.Column("client_id", sa.Integer(), nullable=False, index=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )

    # results-service
    op.create_table(
        "results",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("data", sa.Text(), nullable=False),
        sa.Column("duty_id", sa.Integer(), nullable=False, index=True),
        sa.Column("client_id", sa.Integer(), nullable=False, index=True),
        sa.Column("doctor_id", sa.Integer(), nullable=False, index=True),
        *_timestamps(),
    )


def downgrade() -> None:
    for table in (
        "results",
        "registrations",
        "duties",
        "team_members",
        "employees",
        "department_facility",
        "facilities",
        "departments",
        "clients",
    ):
        op.drop_table(table)
    sa.Enum(name="client_sex").drop(op.get_bind(), checkfirst=True)
