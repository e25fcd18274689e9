from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from bugcrusher.core.config import COMPETITION_CATEGORY
from bugcrusher.core.deps import get_db, get_gating_state
from bugcrusher.schemas.dashboard import (
    ActiveGroupingRead,
    CountdownRead,
    GatingStateRead,
    MissionPackRead,
    UpdateRead,
)
from bugcrusher.services.content import mission_pack_content, stage_updates
from bugcrusher.services.countdown import ZERO, CountdownClock, TimeLeft, compute_deadline, tick
from bugcrusher.services.grouping_oracle import GatingState

router = APIRouter()


def _deadline(state: GatingState) -> datetime | None:
    if state.active is None:
        return None
    return compute_deadline(state.active.updated_at, state.active.target_seconds)


def _countdown(deadline: datetime, left: TimeLeft | None) -> CountdownRead:
    left = left or ZERO
    return CountdownRead(
        active=True,
        deadline=deadline,
        hours=left.hours,
        minutes=left.minutes,
        seconds=left.seconds,
        expired=left.total_seconds == 0,
        display=str(left),
    )


@router.get("/status", response_model=GatingStateRead)
def gating_status(state: GatingState = Depends(get_gating_state)):
    return GatingStateRead(
        groupings=state.groupings,
        is_active=state.is_active,
        active=ActiveGroupingRead.model_validate(state.active) if state.active else None,
        deadline=_deadline(state),
    )


@router.get("/countdown", response_model=CountdownRead)
def countdown(state: GatingState = Depends(get_gating_state)):
    deadline = _deadline(state)
    if deadline is None:
        return CountdownRead(active=False)
    return _countdown(deadline, tick(deadline, datetime.now(timezone.utc)))


@router.get("/countdown/stream")
def countdown_stream(state: GatingState = Depends(get_gating_state)):
    """
    Server-sent events, one per second, ending with a single expired event.

    The generator is cancelled when the client disconnects.
    """
    deadline = _deadline(state)

    async def events():
        if deadline is None:
            yield f"data: {CountdownRead(active=False).model_dump_json()}\n\n"
            return

        async for left in CountdownClock(deadline).ticks():
            yield f"data: {_countdown(deadline, left).model_dump_json()}\n\n"

    return StreamingResponse(
        events(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )


@router.get("/updates", response_model=list[UpdateRead])
def updates(
    db: Session = Depends(get_db),
    state: GatingState = Depends(get_gating_state),
):
    # shown whether or not a grouping is active; missing stages just mean no updates
    return [
        UpdateRead(
            stage_name=stage_name,
            description=update.description,
            content=update.content,
            category=update.category,
        )
        for update, stage_name in stage_updates(db, state.groupings, COMPETITION_CATEGORY)
    ]


@router.get("/mission-pack", response_model=MissionPackRead)
def mission_pack(
    db: Session = Depends(get_db),
    state: GatingState = Depends(get_gating_state),
):
    if state.active is None:
        return MissionPackRead()

    stage = state.active.grouping
    return MissionPackRead(
        stage=stage,
        content=mission_pack_content(db, stage, COMPETITION_CATEGORY),
    )
