"""Initial schema: storytellers, content items and stored links.

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

_ENTITY_TYPES = ("STORYTELLER", "STORY", "QUOTE", "THEME", "MEDIA_ASSET")
_LINK_METHODS = ("DIRECT_REFERENCE", "MEMBERSHIP_ARRAY", "EMAIL_MATCH", "NAME_MATCH")
_CONFIDENCES = ("HIGH", "MEDIUM", "LOW")


def upgrade() -> None:
    op.create_table(
        "storyteller",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("display_name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("organisation", sa.String(), nullable=True),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("profile_image_url", sa.String(), nullable=True),
        sa.Column("consent_given", sa.Boolean(), nullable=False),
        sa.Column("public_display", sa.Boolean(), nullable=False),
        sa.Column("show_photo", sa.Boolean(), nullable=False),
        sa.Column("show_location", sa.Boolean(), nullable=False),
        sa.Column("show_organisation", sa.Boolean(), nullable=False),
        sa.Column("consent_recorded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_storyteller")),
    )

    op.create_table(
        "content_item",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "content_type",
            sa.Enum(*_ENTITY_TYPES, name="entitytype", native_enum=False),
            nullable=False,
        ),
        sa.Column("title", sa.String(), nullable=True),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("owner_ref", sa.String(), nullable=True),
        sa.Column("member_refs", sa.Text(), nullable=True),
        sa.Column("attribution", sa.Text(), nullable=True),
        sa.Column("source_media_id", sa.Uuid(), nullable=True),
        sa.Column("media_type", sa.String(), nullable=True),
        sa.Column("url", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_content_item")),
    )
    op.create_index("ix_content_item_owner_ref", "content_item", ["owner_ref"])

    op.create_table(
        "content_link",
        sa.Column("content_id", sa.Uuid(), nullable=False),
        sa.Column("storyteller_id", sa.Uuid(), nullable=False),
        sa.Column(
            "content_type",
            sa.Enum(*_ENTITY_TYPES, name="entitytype", native_enum=False),
            nullable=False,
        ),
        sa.Column(
            "method",
            sa.Enum(*_LINK_METHODS, name="linkmethod", native_enum=False),
            nullable=False,
        ),
        sa.Column(
            "confidence",
            sa.Enum(*_CONFIDENCES, name="confidence", native_enum=False),
            nullable=False,
        ),
        sa.Column("applied_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["content_id"],
            ["content_item.id"],
            name=op.f("fk_content_link_content_id_content_item"),
        ),
        sa.ForeignKeyConstraint(
            ["storyteller_id"],
            ["storyteller.id"],
            name=op.f("fk_content_link_storyteller_id_storyteller"),
        ),
        sa.PrimaryKeyConstraint("content_id", "storyteller_id", name=op.f("pk_content_link")),
    )
    op.create_index("ix_content_link_storyteller_id", "content_link", ["storyteller_id"])


def downgrade() -> None:
    op.drop_index("ix_content_link_storyteller_id", table_name="content_link")
    op.drop_table("content_link")
    op.drop_index("ix_content_item_owner_ref", table_name="content_item")
    op.drop_table("content_item")
    op.drop_table("storyteller")
