"""Initial migration - create users and issues.

Revision ID: 001
Revises: None
Create Date: 2024-02-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

STATUS_VALUES = ("Open", "In Progress", "Resolved", "Closed")
PRIORITY_VALUES = ("Low", "Medium", "High", "Critical")
SEVERITY_VALUES = ("Minor", "Major", "Critical")

UPDATED_AT_FUNCTION = """
CREATE OR REPLACE FUNCTION update_updated_at_column()
RETURNS TRIGGER AS $$
BEGIN
    NEW.updated_at = CURRENT_TIMESTAMP;
    RETURN NEW;
END;
$$ LANGUAGE plpgsql;
"""


def upgrade() -> None:
    """Create all database tables."""
    bind = op.get_bind()

    # Create enums
    postgresql.ENUM(*STATUS_VALUES, name="issue_status").create(bind, checkfirst=True)
    postgresql.ENUM(*PRIORITY_VALUES, name="issue_priority").create(bind, checkfirst=True)
    postgresql.ENUM(*SEVERITY_VALUES, name="issue_severity").create(bind, checkfirst=True)

    # Create users table
    op.create_table(
        "users",
        sa.Column("user_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("is_enabled", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("user_id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_users_email", "users", ["email"])
    op.create_index("ix_users_is_enabled", "users", ["is_enabled"])

    # Create issues table
    op.create_table(
        "issues",
        sa.Column("issue_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "status",
            postgresql.ENUM(*STATUS_VALUES, name="issue_status", create_type=False),
            server_default="Open",
            nullable=False,
        ),
        sa.Column(
            "priority",
            postgresql.ENUM(*PRIORITY_VALUES, name="issue_priority", create_type=False),
            server_default="Medium",
            nullable=False,
        ),
        sa.Column(
            "severity",
            postgresql.ENUM(*SEVERITY_VALUES, name="issue_severity", create_type=False),
            server_default="Minor",
            nullable=False,
        ),
        sa.Column("created_by", sa.Integer(), nullable=False),
        sa.Column("assigned_to", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("issue_id"),
        sa.ForeignKeyConstraint(
            ["created_by"], ["users.user_id"],
            name="fk_issues_created_by",
            ondelete="RESTRICT",
        ),
        sa.ForeignKeyConstraint(
            ["assigned_to"], ["users.user_id"],
            name="fk_issues_assigned_to",
            ondelete="SET NULL",
        ),
    )
    op.create_index("ix_issues_status", "issues", ["status"])
    op.create_index("ix_issues_priority", "issues", ["priority"])
    op.create_index("ix_issues_severity", "issues", ["severity"])
    op.create_index("ix_issues_created_by", "issues", ["created_by"])
    op.create_index("ix_issues_assigned_to", "issues", ["assigned_to"])
    op.create_index("ix_issues_created_at", "issues", ["created_at"])

    # Keep updated_at current for writes made outside the application
    op.execute(UPDATED_AT_FUNCTION)
    for table in ("users", "issues"):
        op.execute(
            f"CREATE TRIGGER update_{table}_updated_at "
            f"BEFORE UPDATE ON {table} "
            "FOR EACH ROW EXECUTE FUNCTION update_updated_at_column()"
        )


def downgrade() -> None:
    """Drop all database tables."""
    for table in ("issues", "users"):
        op.execute(f"DROP TRIGGER IF EXISTS update_{table}_updated_at ON {table}")
    op.execute("DROP FUNCTION IF EXISTS update_updated_at_column()")

    op.drop_table("issues")
    op.drop_table("users")

    # Drop enums
    bind = op.get_bind()
    postgresql.ENUM(name="issue_severity").drop(bind, checkfirst=True)
    postgresql.ENUM(name="issue_priority").drop(bind, checkfirst=True)
    postgresql.ENUM(name="issue_status").drop(bind, checkfirst=True)
