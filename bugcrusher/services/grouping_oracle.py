import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from sqlalchemy.orm import Session

from bugcrusher.core.config import DISPLAY_OFFSET
from bugcrusher.models.grouping import ACTIVE, GroupingStatus, TeamGrouping

logger = logging.getLogger(__name__)

DISPLAY_TZ = timezone(DISPLAY_OFFSET)


@dataclass(frozen=True)
class ActiveStatus:
    """The grouping whose activation anchors the team's current session."""

    grouping: str
    updated_at: datetime
    target_seconds: int | None
    penalty: bool


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything in the store is UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_display_time(value: datetime) -> datetime:
    """The same instant expressed in the fixed +8h regional zone that teams read times in."""
    return as_utc(value).astimezone(DISPLAY_TZ)


def select_anchor(records: Iterable[GroupingStatus]) -> ActiveStatus | None:
    """
    Pick the session anchor among status records.

    Only records whose status is exactly "active" count. The earliest
    updated_at wins; equal timestamps fall back to the grouping name so the
    result does not depend on the order the store returned rows in.
    """
    active = [r for r in records if r.status == ACTIVE]
    if not active:
        return None

    anchor = min(active, key=lambda r: (as_utc(r.updated_at), r.grouping))
    return ActiveStatus(
        grouping=anchor.grouping,
        updated_at=as_utc(anchor.updated_at),
        target_seconds=anchor.target_seconds,
        penalty=bool(anchor.penalty),
    )


def get_team_groupings(db: Session, team_id: int) -> list[str]:
    rows = (
        db.query(TeamGrouping.grouping)
        .filter(TeamGrouping.team_id == team_id)
        .order_by(TeamGrouping.grouping.asc())
        .all()
    )
    return [r.grouping for r in rows]


def get_active_status(db: Session, grouping_names: Iterable[str]) -> ActiveStatus | None:
    names = set(grouping_names)
    if not names:
        return None

    records = (
        db.query(GroupingStatus)
        .filter(
            GroupingStatus.grouping.in_(names),
            GroupingStatus.status == ACTIVE,
        )
        .all()
    )

    status = select_anchor(records)
    if status is None:
        logger.info("no active grouping among %s", sorted(names))
    else:
        logger.info(
            "active grouping %s anchored at %s (penalty=%s)",
            status.grouping,
            status.updated_at.isoformat(),
            status.penalty,
        )
    return status


def get_team_active_status(db: Session, team_id: int) -> ActiveStatus | None:
    return get_active_status(db, get_team_groupings(db, team_id))


@dataclass(frozen=True)
class GatingState:
    """One snapshot of a team's groupings and active session, shared by a whole request."""

    team_id: int
    groupings: list[str]
    active: ActiveStatus | None

    @property
    def is_active(self) -> bool:
        return self.active is not None


def load_gating_state(db: Session, team_id: int) -> GatingState:
    groupings = get_team_groupings(db, team_id)
    return GatingState(
        team_id=team_id,
        groupings=groupings,
        active=get_active_status(db, groupings),
    )
