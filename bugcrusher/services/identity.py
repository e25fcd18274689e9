import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bugcrusher.models.team import Team, TeamMember

logger = logging.getLogger(__name__)

TEACHER = "teacher"
MEMBER = "member"


@dataclass(frozen=True)
class TeamDetails:
    team_id: int
    team_name: str
    category: str
    author_name: str | None
    role: str


def resolve_team(db: Session, email: str) -> TeamDetails | None:
    """
    Map a signed-in email to its team.

    Teacher contact is tried first, then member (parent) contacts. First match
    wins; an email bound to several teams is not detected. A store failure is
    logged and reported as "no team", same as a genuine miss.
    """
    try:
        team = db.query(Team).filter(Team.teacher_email == email).first()
        if team:
            logger.info("%s is the teacher of team %s", email, team.team_name)
            return TeamDetails(
                team_id=team.id,
                team_name=team.team_name,
                category=team.category,
                author_name=team.teacher_name,
                role=TEACHER,
            )

        row = (
            db.query(TeamMember, Team)
            .join(Team, Team.id == TeamMember.team_id)
            .filter(TeamMember.parent_email == email)
            .order_by(TeamMember.team_id.asc(), TeamMember.position.asc())
            .first()
        )
    except SQLAlchemyError:
        logger.exception("team lookup failed for %s", email)
        return None

    if row is None:
        logger.warning("no team found for %s", email)
        return None

    member, team = row
    logger.info("%s is a member of team %s", email, team.team_name)
    return TeamDetails(
        team_id=team.id,
        team_name=team.team_name,
        category=team.category,
        author_name=member.name,
        role=MEMBER,
    )
