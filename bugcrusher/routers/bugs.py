from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from bugcrusher.core.config import BUG_COUNT, COMPETITION_CATEGORY
from bugcrusher.core.current_user import get_current_team
from bugcrusher.core.deps import get_db, get_gating_state, get_storage
from bugcrusher.core.errors import NotFoundError
from bugcrusher.schemas.dashboard import BugDetailsRead
from bugcrusher.services.content import bug_details
from bugcrusher.services.grouping_oracle import GatingState
from bugcrusher.services.identity import TeamDetails
from bugcrusher.services.storage import StorageClient

router = APIRouter()


@router.get("", response_model=list[int])
def list_bug_numbers(team: TeamDetails = Depends(get_current_team)):
    return list(range(1, BUG_COUNT + 1))


@router.get(
    "/{bug_number}",
    response_model=BugDetailsRead,
    responses={404: {"description": "No active stage, or bug not in this category"}},
)
def get_bug(
    bug_number: int = Path(ge=1, le=BUG_COUNT),
    db: Session = Depends(get_db),
    state: GatingState = Depends(get_gating_state),
    storage: StorageClient = Depends(get_storage),
):
    if state.active is None:
        raise NotFoundError("No active grouping found.")

    stage = state.active.grouping
    bug = bug_details(db, stage, bug_number, COMPETITION_CATEGORY)
    if bug is None:
        raise NotFoundError(
            f"Bug not found or does not belong to {COMPETITION_CATEGORY} category."
        )

    return BugDetailsRead(
        bug_number=bug.bug_number,
        stage=stage,
        description=bug.description,
        bug_image_url=storage.object_url(bug.bug_image_path) if bug.bug_image_path else None,
        expected_behavior_url=(
            storage.object_url(bug.expected_behavior_path) if bug.expected_behavior_path else None
        ),
    )
