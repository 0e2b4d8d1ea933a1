"""create contents

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None

STAGES = ("Idea", "Planning", "Recording", "Editing", "Published")
CONTENT_TYPES = ("Short", "Long")


def upgrade() -> None:
    op.create_table(
        "contents",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("script", sa.Text(), nullable=True),
        sa.Column("thumbnail_idea", sa.Text(), nullable=True),
        sa.Column("resources_links", sa.Text(), nullable=True),
        sa.Column(
            "stage",
            sa.Enum(*STAGES, name="content_stage", native_enum=False, length=20, create_constraint=True),
            nullable=False,
            server_default="Idea",
        ),
        sa.Column(
            "content_type",
            sa.Enum(*CONTENT_TYPES, name="content_type", native_enum=False, length=10, create_constraint=True),
            nullable=False,
        ),
        sa.Column("planned_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("youtube_live_link", sa.Text(), nullable=True),
        sa.Column("instagram_live_link", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=True),
    )
    op.create_index("ix_contents_stage", "contents", ["stage"], unique=False)
    op.create_index("ix_contents_user_id", "contents", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_contents_user_id", table_name="contents")
    op.drop_index("ix_contents_stage", table_name="contents")
    op.drop_table("contents")
