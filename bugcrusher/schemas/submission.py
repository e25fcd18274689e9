from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, computed_field

from bugcrusher.services.history import youtube_embed_url


class SubmissionBase(BaseModel):
    id: int
    team_id: int
    author_name: Optional[str] = None
    created_at: datetime
    stage: Optional[str] = None
    penalty: bool = False

    class Config:
        from_attributes = True


class BugSubmissionRead(SubmissionBase):
    kind: Literal["bug"] = "bug"
    bug_number: int
    description: str
    screenshots: list[str]


class EnhancementRead(SubmissionBase):
    kind: Literal["enhancement"] = "enhancement"
    enhancement_type: Literal["basic", "advanced"]
    description: str
    justification: str
    screenshots: list[str]


class BrainstormMapRead(SubmissionBase):
    kind: Literal["brainstorm_map"] = "brainstorm_map"
    file_url: str


class PresentationRead(SubmissionBase):
    kind: Literal["presentation"] = "presentation"
    youtube_link: str

    @computed_field
    @property
    def embed_url(self) -> str:
        return youtube_embed_url(self.youtube_link)


class ProjectRead(SubmissionBase):
    kind: Literal["project"] = "project"
    project_link: Optional[str] = None
    file_url: Optional[str] = None


SubmissionRead = Annotated[
    Union[BugSubmissionRead, EnhancementRead, BrainstormMapRead, PresentationRead, ProjectRead],
    Field(discriminator="kind"),
]


READ_SCHEMAS = {
    "bug": BugSubmissionRead,
    "enhancement": EnhancementRead,
    "brainstorm_map": BrainstormMapRead,
    "presentation": PresentationRead,
    "project": ProjectRead,
}


def to_read(row) -> SubmissionBase:
    return READ_SCHEMAS[row.kind].model_validate(row)


class PresentationCreate(BaseModel):
    youtube_link: str = Field(min_length=1, max_length=1000)


class HistoryRow(BaseModel):
    type: str
    submitted_by: Optional[str] = None
    submission_date: datetime  # carries the +08:00 offset
    stage: Optional[str] = None
    submission: SubmissionRead
