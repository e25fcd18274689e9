from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class ActiveGroupingRead(BaseModel):
    grouping: str
    updated_at: datetime
    target_seconds: Optional[int] = None
    penalty: bool = False

    class Config:
        from_attributes = True


class GatingStateRead(BaseModel):
    groupings: list[str]
    is_active: bool
    active: Optional[ActiveGroupingRead] = None
    deadline: Optional[datetime] = None


class CountdownRead(BaseModel):
    active: bool
    deadline: Optional[datetime] = None
    hours: int = 0
    minutes: int = 0
    seconds: int = 0
    expired: bool = False
    display: str = "00:00:00"


class UpdateRead(BaseModel):
    stage_name: str
    description: Optional[str] = None
    content: str
    category: str


class MissionPackRead(BaseModel):
    stage: Optional[str] = None
    content: Optional[str] = None


class BugDetailsRead(BaseModel):
    bug_number: int
    stage: str
    description: str
    bug_image_url: Optional[str] = None
    expected_behavior_url: Optional[str] = None
