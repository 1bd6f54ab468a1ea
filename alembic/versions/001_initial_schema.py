"""Initial schema: components, source_lines and permissions tables.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

revision: str = "001"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "components",
        sa.Column("uuid", sa.Text, primary_key=True),
        sa.Column("key", sa.Text, nullable=False, unique=True),
        sa.Column("project_key", sa.Text, nullable=True),
        sa.Column("path", sa.Text, nullable=True),
        sa.Column("qualifier", sa.Text, nullable=False, server_default="FIL"),
        schema="public",
    )
    op.create_table(
        "source_lines",
        sa.Column("file_uuid", sa.Text, nullable=False),
        sa.Column("line", sa.Integer, nullable=False),
        sa.Column("source", sa.Text, nullable=False, server_default=""),
        sa.Column("highlighting", sa.Text, nullable=False, server_default=""),
        sa.Column("symbols", sa.Text, nullable=False, server_default=""),
        sa.Column("scm_author", sa.Text, nullable=True),
        sa.Column("scm_revision", sa.Text, nullable=True),
        sa.Column("scm_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("line_hits", sa.Integer, nullable=True),
        sa.Column("conditions", sa.Integer, nullable=True),
        sa.Column("covered_conditions", sa.Integer, nullable=True),
        sa.Column("duplications", postgresql.ARRAY(sa.Integer), nullable=False, server_default="{}"),
        sa.PrimaryKeyConstraint("file_uuid", "line"),
        schema="public",
    )
    op.create_table(
        "permissions",
        sa.Column("grantee", sa.Text, nullable=False),
        sa.Column("capability", sa.Text, nullable=False),
        sa.Column("component_key", sa.Text, nullable=False),
        sa.PrimaryKeyConstraint("component_key", "capability", "grantee"),
        schema="public",
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("permissions", schema="public")
    op.drop_table("source_lines", schema="public")
    op.drop_table("components", schema="public")
