from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from bugcrusher.core.config import STORAGE_PUBLIC_BASE_URL, STORAGE_ROOT
from bugcrusher.core.current_user import get_current_team
from bugcrusher.db.session import get_db
from bugcrusher.services.grouping_oracle import GatingState, load_gating_state
from bugcrusher.services.identity import TeamDetails
from bugcrusher.services.storage import StorageClient

__all__ = ["get_db", "get_storage", "get_gating_state"]


@lru_cache
def get_storage() -> StorageClient:
    return StorageClient(STORAGE_ROOT, STORAGE_PUBLIC_BASE_URL)


# FastAPI resolves this once per request, so every consumer in a request sees the same snapshot.
def get_gating_state(
    db: Session = Depends(get_db),
    team: TeamDetails = Depends(get_current_team),
) -> GatingState:
    return load_gating_state(db, team.team_id)
