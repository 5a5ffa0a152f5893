"""Create the CityGuide tables

Revision ID: 001
Revises: None
Create Date: 2026-10-18

Creates:
    users              accounts, roles and the ban flag
    places             reviewable places with derived rating statistics
    reviews            per-place reviews, one per (place, author)
    favorites          per-user bookmarks, one per (user, place)
    place_submissions  user-proposed places awaiting moderation
    place_updates      owner-proposed edits awaiting moderation
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, comment="Lower-cased"),
        sa.Column("password_hash", sa.String(255), nullable=False, comment="bcrypt hash"),
        sa.Column("role", sa.String(20), nullable=False, server_default="user"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("uq_users_email", "users", ["email"], unique=True)

    op.create_table(
        "places",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("category", sa.String(60), nullable=False),
        sa.Column("city", sa.String(120), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("image", sa.String(500), nullable=False),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("contact_number", sa.String(40), nullable=True),
        sa.Column("website", sa.String(500), nullable=True),
        sa.Column("owner_id", sa.Uuid(), nullable=True, comment="NULL for seeded places"),
        sa.Column("total_reviews", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("average_rating", sa.Float(), nullable=False, server_default="0"),
        sa.Column("rating", sa.Float(), nullable=False, server_default="0",
                  comment="Mirror of average_rating"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_places_city_rating", "places", ["city", "rating"])
    op.create_index("idx_places_owner", "places", ["owner_id"])

    op.create_table(
        "reviews",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "place_id",
            sa.Uuid(),
            sa.ForeignKey("places.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("user_name", sa.String(120), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("owner_reply", sa.Text(), nullable=True),
        sa.Column("owner_reply_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("place_id", "user_id", name="uq_reviews_place_user"),
    )

    op.create_table(
        "favorites",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column(
            "place_id",
            sa.Uuid(),
            sa.ForeignKey("places.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("user_id", "place_id", name="uq_favorites_user_place"),
    )
    op.create_index("idx_favorites_user", "favorites", ["user_id"])

    op.create_table(
        "place_submissions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("category", sa.String(60), nullable=False),
        sa.Column("city", sa.String(120), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("address", sa.String(500), nullable=False),
        sa.Column("image", sa.String(500), nullable=False),
        sa.Column("contact_number", sa.String(40), nullable=True),
        sa.Column("website", sa.String(500), nullable=True),
        sa.Column("note_for_admin", sa.Text(), nullable=True),
        sa.Column("submitted_by", sa.Uuid(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("admin_notes", sa.Text(), nullable=False, server_default=""),
        sa.Column("reviewed_by", sa.Uuid(), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("place_id", sa.Uuid(), nullable=True,
                  comment="Place created on approval"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_submissions_submitter", "place_submissions", ["submitted_by"])
    op.create_index("idx_submissions_status", "place_submissions", ["status"])

    op.create_table(
        "place_updates",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("place_id", sa.Uuid(), nullable=False),
        sa.Column("place_name", sa.String(200), nullable=False),
        sa.Column("submitted_by", sa.Uuid(), nullable=False),
        sa.Column("updates", sa.JSON(), nullable=False,
                  comment="Proposed values keyed by API field name"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("admin_notes", sa.Text(), nullable=False, server_default=""),
        sa.Column("reviewed_by", sa.Uuid(), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("applied", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_place_updates_submitter", "place_updates", ["submitted_by"])
    op.create_index("idx_place_updates_status", "place_updates", ["status"])


def downgrade() -> None:
    op.drop_index("idx_place_updates_status", table_name="place_updates")
    op.drop_index("idx_place_updates_submitter", table_name="place_updates")
    op.drop_table("place_updates")
    op.drop_index("idx_submissions_status", table_name="place_submissions")
    op.drop_index("idx_submissions_submitter", table_name="place_submissions")
    op.drop_table("place_submissions")
    op.drop_index("idx_favorites_user", table_name="favorites")
    op.drop_table("favorites")
    op.drop_table("reviews")
    op.drop_index("idx_places_owner", table_name="places")
    op.drop_index("idx_places_city_rating", table_name="places")
    op.drop_table("places")
    op.drop_index("uq_users_email", table_name="users")
    op.drop_table("users")
