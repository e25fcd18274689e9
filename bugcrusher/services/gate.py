import logging
from typing import Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bugcrusher.core.errors import SubmissionBlocked, WriteError
from bugcrusher.services.grouping_oracle import ActiveStatus, get_team_active_status
from bugcrusher.services.identity import TeamDetails

logger = logging.getLogger(__name__)

T = TypeVar("T")


def guarded_write(
    db: Session,
    team: TeamDetails,
    write_fn: Callable[[ActiveStatus], T],
) -> T:
    """
    Run `write_fn` only if one of the team's groupings is active right now.

    The status is queried fresh on every call, never taken from what the
    client saw at page load, since the window may have closed in between.
    `write_fn` receives that snapshot (stage name and penalty flag).
    """
    status = get_team_active_status(db, team.team_id)
    if status is None:
        logger.warning("write blocked for team %s: no active grouping", team.team_name)
        raise SubmissionBlocked()

    try:
        return write_fn(status)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("write failed for team %s: %s", team.team_name, exc)
        raise WriteError(str(exc.orig) if getattr(exc, "orig", None) else str(exc)) from exc
