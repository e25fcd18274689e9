from fastapi import APIRouter, Depends

from bugcrusher.core.current_user import get_current_team
from bugcrusher.schemas.team import TeamRead
from bugcrusher.services.identity import TeamDetails

router = APIRouter()


@router.get("/ping")
def ping():
    return {"msg": "auth ok"}


@router.get(
    "/me",
    response_model=TeamRead,
    responses={
        401: {"description": "User not authenticated"},
        403: {"description": "Team is in another competition category"},
        404: {"description": "No team found for this email"},
    },
)
def me(team: TeamDetails = Depends(get_current_team)):
    return team
