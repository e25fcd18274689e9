from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from bugcrusher.db.base_class import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SubmissionMixin:
    """Columns every submission variant shares. Rows are insert-only; deletes are hard deletes."""

    kind = None  # discriminator used by schemas and routes

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    team_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True
    )
    author_name: Mapped[str | None] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    # active grouping at submission time (null when none was active)
    stage: Mapped[str | None] = mapped_column(String(100))
    penalty: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    idempotency_key: Mapped[str | None] = mapped_column(String(100))

    @declared_attr.directive
    def __table_args__(cls):
        return (
            UniqueConstraint(
                "team_id", "idempotency_key", name=f"uq_{cls.__tablename__}_team_idempotency"
            ),
        )


class BugSubmission(SubmissionMixin, Base):
    __tablename__ = "bug_submissions"
    kind = "bug"

    bug_number: Mapped[int] = mapped_column(nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    screenshots: Mapped[list] = mapped_column(JSON, nullable=False, default=list)


class Enhancement(SubmissionMixin, Base):
    __tablename__ = "enhancements"
    kind = "enhancement"

    enhancement_type: Mapped[str] = mapped_column(String(20), nullable=False)  # basic | advanced
    description: Mapped[str] = mapped_column(Text, nullable=False)
    justification: Mapped[str] = mapped_column(Text, nullable=False)
    screenshots: Mapped[list] = mapped_column(JSON, nullable=False, default=list)


class BrainstormMap(SubmissionMixin, Base):
    __tablename__ = "brainstorm_maps"
    kind = "brainstorm_map"

    file_url: Mapped[str] = mapped_column(String(1000), nullable=False)


class Presentation(SubmissionMixin, Base):
    __tablename__ = "presentations"
    kind = "presentation"

    youtube_link: Mapped[str] = mapped_column(String(1000), nullable=False)


class Project(SubmissionMixin, Base):
    __tablename__ = "projects"
    kind = "project"

    # exactly one of these is set
    project_link: Mapped[str | None] = mapped_column(String(1000))
    file_url: Mapped[str | None] = mapped_column(String(1000))


SUBMISSION_MODELS = {
    model.kind: model
    for model in (BugSubmission, Enhancement, BrainstormMap, Presentation, Project)
}
