"""initial dashboard schema

Revision ID: 7c1e2f9a4b30
Revises:
Create Date: 2026-10-19 09:12:41.305118

"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '7c1e2f9a4b30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SUBMISSION_TABLES = ("bug_submissions", "enhancements", "brainstorm_maps", "presentations", "projects")


def _submission_columns() -> list:
    return [
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("team_id", sa.Integer(), sa.ForeignKey("teams.id", ondelete="CASCADE"), nullable=False),
        sa.Column("author_name", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("stage", sa.String(length=100), nullable=True),
        sa.Column("penalty", sa.Boolean(), nullable=False),
        sa.Column("idempotency_key", sa.String(length=100), nullable=True),
    ]


def _create_submission_table(name: str, *columns) -> None:
    op.create_table(
        name,
        *_submission_columns(),
        *columns,
        sa.UniqueConstraint("team_id", "idempotency_key", name=f"uq_{name}_team_idempotency"),
    )
    op.create_index(f"ix_{name}_id", name, ["id"])
    op.create_index(f"ix_{name}_team_id", name, ["team_id"])


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "teams",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("team_name", sa.String(length=255), nullable=False, unique=True),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("teacher_name", sa.String(length=255), nullable=True),
        sa.Column("teacher_email", sa.String(length=255), nullable=False),
    )
    op.create_index("ix_teams_id", "teams", ["id"])
    op.create_index("ix_teams_category", "teams", ["category"])
    op.create_index("ix_teams_teacher_email", "teams", ["teacher_email"])

    op.create_table(
        "team_members",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("team_id", sa.Integer(), sa.ForeignKey("teams.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("parent_email", sa.String(length=255), nullable=False),
    )
    op.create_index("ix_team_members_id", "team_members", ["id"])
    op.create_index("ix_team_members_team_id", "team_members", ["team_id"])
    op.create_index("ix_team_members_parent_email", "team_members", ["parent_email"])

    op.create_table(
        "team_groupings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("team_id", sa.Integer(), sa.ForeignKey("teams.id", ondelete="CASCADE"), nullable=False),
        sa.Column("grouping", sa.String(length=100), nullable=False),
        sa.UniqueConstraint("team_id", "grouping", name="uq_team_grouping"),
    )
    op.create_index("ix_team_groupings_id", "team_groupings", ["id"])
    op.create_index("ix_team_groupings_team_id", "team_groupings", ["team_id"])
    op.create_index("ix_team_groupings_grouping", "team_groupings", ["grouping"])

    op.create_table(
        "grouping_status",
        sa.Column("grouping", sa.String(length=100), primary_key=True),
        sa.Column("status", sa.String(length=50), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("target_seconds", sa.Integer(), nullable=True),
        sa.Column("penalty", sa.Boolean(), nullable=False),
    )

    op.create_table(
        "stages",
        sa.Column("stage_id", sa.Integer(), primary_key=True),
        sa.Column("stage_name", sa.String(length=100), nullable=False),
    )
    op.create_index("ix_stages_stage_id", "stages", ["stage_id"])
    op.create_index("ix_stages_stage_name", "stages", ["stage_name"], unique=True)

    op.create_table(
        "bugs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("stage_id", sa.Integer(), sa.ForeignKey("stages.stage_id", ondelete="CASCADE"), nullable=False),
        sa.Column("bug_number", sa.Integer(), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("bug_image_path", sa.String(length=500), nullable=True),
        sa.Column("expected_behavior_path", sa.String(length=500), nullable=True),
        sa.UniqueConstraint("stage_id", "bug_number", "category", name="uq_bug_stage_number_category"),
    )
    op.create_index("ix_bugs_id", "bugs", ["id"])
    op.create_index("ix_bugs_stage_id", "bugs", ["stage_id"])

    for name, description in (("mission_packs", None), ("updates", sa.String(length=255))):
        columns = [
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("stage_id", sa.Integer(), sa.ForeignKey("stages.stage_id", ondelete="CASCADE"), nullable=False),
            sa.Column("category", sa.String(length=100), nullable=False),
        ]
        if description is not None:
            columns.append(sa.Column("description", description, nullable=True))
        columns.append(sa.Column("content", sa.Text(), nullable=False))
        op.create_table(name, *columns)
        op.create_index(f"ix_{name}_id", name, ["id"])
        op.create_index(f"ix_{name}_stage_id", name, ["stage_id"])

    _create_submission_table(
        "bug_submissions",
        sa.Column("bug_number", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("screenshots", sa.JSON(), nullable=False),
    )
    _create_submission_table(
        "enhancements",
        sa.Column("enhancement_type", sa.String(length=20), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("justification", sa.Text(), nullable=False),
        sa.Column("screenshots", sa.JSON(), nullable=False),
    )
    _create_submission_table(
        "brainstorm_maps",
        sa.Column("file_url", sa.String(length=1000), nullable=False),
    )
    _create_submission_table(
        "presentations",
        sa.Column("youtube_link", sa.String(length=1000), nullable=False),
    )
    _create_submission_table(
        "projects",
        sa.Column("project_link", sa.String(length=1000), nullable=True),
        sa.Column("file_url", sa.String(length=1000), nullable=True),
    )


def downgrade() -> None:
    """Downgrade schema."""
    for name in SUBMISSION_TABLES:
        op.drop_table(name)
    for name in ("updates", "mission_packs", "bugs", "stages", "grouping_status", "team_groupings", "team_members", "teams"):
        op.drop_table(name)
