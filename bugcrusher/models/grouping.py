from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import relationship

from bugcrusher.db.base_class import Base

ACTIVE = "active"
INACTIVE = "inactive"


class TeamGrouping(Base):
    """A team's membership in a grouping. Provisioned outside the dashboard."""

    __tablename__ = "team_groupings"

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    grouping = Column(String(100), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("team_id", "grouping", name="uq_team_grouping"),
    )

    team = relationship("Team", back_populates="groupings")


class GroupingStatus(Base):
    """Open/closed state of a grouping. Flipped by the competition operators, read-only here."""

    __tablename__ = "grouping_status"

    grouping = Column(String(100), primary_key=True)
    status = Column(String(50), nullable=False, default=INACTIVE)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # seconds the session runs for, counted from updated_at
    target_seconds = Column(Integer, nullable=True)

    # submissions still accepted but flagged for a scoring penalty
    penalty = Column(Boolean, nullable=False, default=False)
