"""User profile preferences and saved cities

Revision ID: 002
Revises: 001
Create Date: 2026-10-18

Adds:
- user.avatar_url, user.language, user.currency, user.updated_at
- saved_city
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: str | None = "001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Add profile columns and the saved_city table."""
    # Batch mode recreates the table on SQLite, which cannot add non-constant defaults
    with op.batch_alter_table("user") as batch:
        batch.add_column(sa.Column("avatar_url", sa.Text(), nullable=True))
        batch.add_column(sa.Column("language", sa.Text(), nullable=False, server_default="en"))
        batch.add_column(sa.Column("currency", sa.Text(), nullable=False, server_default="USD"))
        batch.add_column(
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now(),
            )
        )

    op.create_table(
        "saved_city",
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("city_id", sa.Uuid(), nullable=False),
        sa.Column("saved_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user.user_id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["city_id"], ["city.city_id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "city_id"),
    )
    op.create_index("idx_saved_city_user_saved", "saved_city", ["user_id", "saved_at"])


def downgrade() -> None:
    """Drop saved_city and the profile columns."""
    op.drop_index("idx_saved_city_user_saved", table_name="saved_city")
    op.drop_table("saved_city")

    with op.batch_alter_table("user") as batch:
        batch.drop_column("updated_at")
        batch.drop_column("currency")
        batch.drop_column("language")
        batch.drop_column("avatar_url")
