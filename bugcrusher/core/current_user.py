import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from bugcrusher.core.config import COMPETITION_CATEGORY
from bugcrusher.core.security import InvalidTokenError, decode_email_claim
from bugcrusher.db.session import get_db
from bugcrusher.services.identity import TeamDetails, resolve_team

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthenticated() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="User not authenticated.",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_email(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    if credentials is None:
        raise _unauthenticated()
    try:
        return decode_email_claim(credentials.credentials)
    except InvalidTokenError as exc:
        logger.info("rejected token: %s", exc)
        raise _unauthenticated()


def get_current_team(
    email: str = Depends(get_current_email),
    db: Session = Depends(get_db),
) -> TeamDetails:
    team = resolve_team(db, email)
    if team is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No team found for this email (neither as teacher nor parent)",
        )

    if team.category != COMPETITION_CATEGORY:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Wrong category. Only {COMPETITION_CATEGORY} category is allowed.",
        )
    return team
