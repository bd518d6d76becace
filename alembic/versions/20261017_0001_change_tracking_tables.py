"""Change tracking tables: tracked properties, history, sources, scrape runs.

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17 09:00:00
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261017_0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table(
        "tracked_property",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("address_line", sa.Text(), nullable=False),
        sa.Column("city", sa.String(), nullable=False),
        sa.Column("postal_code", sa.String(), nullable=False),
        sa.Column("state_abbr", sa.String(), nullable=True),
        sa.Column("county_name", sa.String(), nullable=True),
        sa.Column("address_key", sa.Text(), nullable=False),
        sa.Column("status", sa.String(), nullable=True),
        sa.Column("list_price", sa.BigInteger(), nullable=True),
        sa.Column("sold_price", sa.BigInteger(), nullable=True),
        sa.Column("sold_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_pending", sa.Boolean(), nullable=True),
        sa.Column("is_contingent", sa.Boolean(), nullable=True),
        sa.Column("is_new_listing", sa.Boolean(), nullable=True),
        sa.Column("is_foreclosure", sa.Boolean(), nullable=True),
        sa.Column("is_price_reduced", sa.Boolean(), nullable=True),
        sa.Column("is_coming_soon", sa.Boolean(), nullable=True),
        sa.Column(
            "first_seen_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "last_seen_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_tracked_property"),
        sa.UniqueConstraint(
            "address_line",
            "city",
            "postal_code",
            name="uq_tracked_property_address",
        ),
    )
    op.create_index(
        "idx_tracked_property_address_key",
        "tracked_property",
        ["address_key"],
        unique=False,
    )
    op.create_index(
        "idx_tracked_property_region",
        "tracked_property",
        ["state_abbr", "county_name"],
        unique=False,
    )

    op.create_table(
        "property_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("observed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("field_name", sa.String(), nullable=False),
        sa.Column("previous_value", sa.Text(), nullable=True),
        sa.Column("current_value", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(
            ["property_id"],
            ["tracked_property.id"],
            name="fk_property_history_property_id_tracked_property",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_property_history"),
    )
    op.create_index(
        "idx_property_history_property",
        "property_history",
        ["property_id"],
        unique=False,
    )
    op.create_index(
        "idx_property_history_observed",
        "property_history",
        ["observed_at"],
        unique=False,
    )
    op.create_index(
        "idx_property_history_field",
        "property_history",
        ["field_name", "observed_at"],
        unique=False,
    )

    op.create_table(
        "property_source",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("source_name", sa.String(), nullable=False),
        sa.Column("source_listing_id", sa.String(), nullable=False),
        sa.Column(
            "first_seen_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "last_seen_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(
            ["property_id"],
            ["tracked_property.id"],
            name="fk_property_source_property_id_tracked_property",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_property_source"),
        sa.UniqueConstraint(
            "source_name",
            "source_listing_id",
            name="uq_property_source_source_listing",
        ),
    )
    op.create_index(
        "idx_property_source_property",
        "property_source",
        ["property_id"],
        unique=False,
    )

    op.create_table(
        "scrape_run",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("target", sa.String(), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("pages_fetched", sa.Integer(), nullable=True),
        sa.Column("properties_seen", sa.Integer(), nullable=True),
        sa.Column(
            "success", sa.Boolean(), server_default=sa.text("false"), nullable=False
        ),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_scrape_run"),
    )
    op.create_index(
        "idx_scrape_run_started", "scrape_run", ["started_at"], unique=False
    )


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_index("idx_scrape_run_started", table_name="scrape_run")
    op.drop_table("scrape_run")

    op.drop_index("idx_property_source_property", table_name="property_source")
    op.drop_table("property_source")

    op.drop_index("idx_property_history_field", table_name="property_history")
    op.drop_index("idx_property_history_observed", table_name="property_history")
    op.drop_index("idx_property_history_property", table_name="property_history")
    op.drop_table("property_history")

    op.drop_index("idx_tracked_property_region", table_name="tracked_property")
    op.drop_index("idx_tracked_property_address_key", table_name="tracked_property")
    op.drop_table("tracked_property")
