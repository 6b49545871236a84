"""designation, organization and contact tables

Revision ID: 202610190001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "202610190001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _timestamp_indexes(table: str) -> None:
    op.create_index(f"ix_{table}_created_at", table, ["created_at"])
    op.create_index(f"ix_{table}_updated_at", table, ["updated_at"])


def upgrade() -> None:
    op.create_table(
        "designations",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("parent_id", sa.String(), nullable=True),
        sa.Column("level", sa.Integer(), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["parent_id"], ["designations.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_designations_name", "designations", ["name"])
    op.create_index("ix_designations_parent_id", "designations", ["parent_id"])
    op.create_index("ix_designations_level", "designations", ["level"])
    op.create_index("ix_designations_parent_order", "designations", ["parent_id", "order"])
    _timestamp_indexes("designations")

    op.create_table(
        "departments",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_departments_name", "departments", ["name"])
    op.create_index("ix_departments_order", "departments", ["order"])
    _timestamp_indexes("departments")

    for table, parent_key, parent_table in (
        ("institutes", "department_id", "departments"),
        ("subdivisions", "institute_id", "institutes"),
        ("units", "subdivision_id", "subdivisions"),
    ):
        op.create_table(
            table,
            sa.Column("id", sa.String(), nullable=False),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column(parent_key, sa.String(), nullable=False),
            sa.Column("order", sa.Integer(), nullable=False),
            *_timestamps(),
            sa.ForeignKeyConstraint([parent_key], [f"{parent_table}.id"], ondelete="RESTRICT"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(f"ix_{table}_name", table, ["name"])
        op.create_index(f"ix_{table}_{parent_key}", table, [parent_key])
        op.create_index(
            f"ix_{table}_{parent_key.removesuffix('_id')}_order",
            table,
            [parent_key, "order"],
        )
        _timestamp_indexes(table)

    op.create_table(
        "contacts",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("type", sa.Enum("PERSON", "BUILDING", name="contacttype"), nullable=False),
        sa.Column("full_name", sa.String(), nullable=False),
        sa.Column("department_id", sa.String(), nullable=True),
        sa.Column("institute_id", sa.String(), nullable=True),
        sa.Column("subdivision_id", sa.String(), nullable=True),
        sa.Column("unit_id", sa.String(), nullable=True),
        sa.Column("office_no_1", sa.String(), nullable=True),
        sa.Column("office_no_2", sa.String(), nullable=True),
        sa.Column("whatsapp_no", sa.String(), nullable=True),
        sa.Column("fax_no_1", sa.String(), nullable=True),
        sa.Column("fax_no_2", sa.String(), nullable=True),
        sa.Column("official_email", sa.String(), nullable=True),
        sa.Column("office_address", sa.String(), nullable=True),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("profile_picture_url", sa.String(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["department_id"], ["departments.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["institute_id"], ["institutes.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["subdivision_id"], ["subdivisions.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_contacts_type", "contacts", ["type"])
    op.create_index("ix_contacts_full_name", "contacts", ["full_name"])
    for key in ("department_id", "institute_id", "subdivision_id", "unit_id"):
        op.create_index(f"ix_contacts_{key}", "contacts", [key])
    _timestamp_indexes("contacts")

    op.create_table(
        "person_details",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("contact_id", sa.String(), nullable=False),
        sa.Column(
            "title",
            sa.Enum("MR", "MRS", "MISS", "MS", "DR", "PROF", "ENG", name="persontitle"),
            nullable=False,
        ),
        sa.Column("designation_id", sa.String(), nullable=True),
        sa.Column("mobile_no_1", sa.String(), nullable=True),
        sa.Column("mobile_no_2", sa.String(), nullable=True),
        sa.Column("personal_email", sa.String(), nullable=True),
        sa.Column(
            "status",
            sa.Enum("ON_DUTY", "OFF_DUTY", "RETIRED", name="personstatus"),
            nullable=False,
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(["contact_id"], ["contacts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["designation_id"], ["designations.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_person_details_contact_id", "person_details", ["contact_id"], unique=True)
    op.create_index("ix_person_details_designation_id", "person_details", ["designation_id"])
    op.create_index("ix_person_details_status", "person_details", ["status"])
    _timestamp_indexes("person_details")

    op.create_table(
        "building_details",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("contact_id", sa.String(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("OPERATIONAL", "NON_OPERATIONAL", name="buildingstatus"),
            nullable=False,
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(["contact_id"], ["contacts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_building_details_contact_id", "building_details", ["contact_id"], unique=True)
    op.create_index("ix_building_details_status", "building_details", ["status"])
    _timestamp_indexes("building_details")


def downgrade() -> None:
    for table in (
        "building_details",
        "person_details",
        "contacts",
        "units",
        "subdivisions",
        "institutes",
        "departments",
        "designations",
    ):
        op.drop_table(table)
    for enum_name in ("buildingstatus", "personstatus", "persontitle", "contacttype"):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
