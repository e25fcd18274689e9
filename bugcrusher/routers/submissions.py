from typing import Literal, Optional

from fastapi import APIRouter, Depends, File, Form, Header, Path, Query, Response, UploadFile, status
from sqlalchemy.orm import Session

from bugcrusher.core.config import BUG_COUNT, MAX_FILE_SIZE, MAX_PROJECT_FILE_SIZE
from bugcrusher.core.current_user import get_current_team
from bugcrusher.core.deps import get_db, get_storage
from bugcrusher.schemas.submission import (
    BrainstormMapRead,
    BugSubmissionRead,
    EnhancementRead,
    HistoryRow,
    PresentationCreate,
    PresentationRead,
    ProjectRead,
    to_read,
)
from bugcrusher.services import writer
from bugcrusher.services.attachments import Attachment, read_upload
from bugcrusher.services.grouping_oracle import to_display_time
from bugcrusher.services.history import submission_label, team_history
from bugcrusher.services.identity import TeamDetails
from bugcrusher.services.storage import StorageClient

router = APIRouter()

SubmissionKind = Literal["bug", "enhancement", "brainstorm_map", "presentation", "project"]

WRITE_RESPONSES = {
    409: {"description": "No grouping is active; the client should reload"},
    422: {"description": "Missing field or attachment outside the limits"},
    502: {"description": "A file could not be uploaded"},
}


def _attachments(uploads: Optional[list[UploadFile]]) -> list[Attachment]:
    return [read_upload(u, MAX_FILE_SIZE) for u in uploads or [] if u.filename]


@router.post(
    "/bugs/{bug_number}",
    response_model=BugSubmissionRead,
    status_code=status.HTTP_201_CREATED,
    responses=WRITE_RESPONSES,
)
def submit_bug_fix(
    bug_number: int = Path(ge=1, le=BUG_COUNT),
    description: str = Form(""),
    screenshots: Optional[list[UploadFile]] = File(None),
    idempotency_key: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    storage: StorageClient = Depends(get_storage),
    team: TeamDetails = Depends(get_current_team),
):
    return writer.submit_bug(
        db,
        storage,
        team,
        bug_number=bug_number,
        description=description,
        screenshots=_attachments(screenshots),
        idempotency_key=idempotency_key,
    )


@router.post(
    "/enhancements",
    response_model=EnhancementRead,
    status_code=status.HTTP_201_CREATED,
    responses=WRITE_RESPONSES,
)
def submit_enhancement(
    enhancement_type: str = Form("basic"),
    description: str = Form(""),
    justification: str = Form(""),
    screenshots: Optional[list[UploadFile]] = File(None),
    idempotency_key: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    storage: StorageClient = Depends(get_storage),
    team: TeamDetails = Depends(get_current_team),
):
    return writer.submit_enhancement(
        db,
        storage,
        team,
        enhancement_type=enhancement_type,
        description=description,
        justification=justification,
        screenshots=_attachments(screenshots),
        idempotency_key=idempotency_key,
    )


@router.post(
    "/brainstorm-map",
    response_model=BrainstormMapRead,
    status_code=status.HTTP_201_CREATED,
    responses=WRITE_RESPONSES,
)
def submit_brainstorm_map(
    file: Optional[UploadFile] = File(None),
    idempotency_key: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    storage: StorageClient = Depends(get_storage),
    team: TeamDetails = Depends(get_current_team),
):
    return writer.submit_brainstorm_map(
        db,
        storage,
        team,
        file=read_upload(file, MAX_FILE_SIZE) if file is not None else None,
        idempotency_key=idempotency_key,
    )


@router.post(
    "/presentations",
    response_model=PresentationRead,
    status_code=status.HTTP_201_CREATED,
    responses=WRITE_RESPONSES,
)
def submit_presentation(
    payload: PresentationCreate,
    idempotency_key: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    team: TeamDetails = Depends(get_current_team),
):
    return writer.submit_presentation(
        db,
        team,
        youtube_link=payload.youtube_link,
        idempotency_key=idempotency_key,
    )


@router.post(
    "/projects",
    response_model=ProjectRead,
    status_code=status.HTTP_201_CREATED,
    responses=WRITE_RESPONSES,
)
def submit_project(
    project_link: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    idempotency_key: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    storage: StorageClient = Depends(get_storage),
    team: TeamDetails = Depends(get_current_team),
):
    archive = read_upload(file, MAX_PROJECT_FILE_SIZE) if file is not None and file.filename else None
    return writer.submit_project(
        db,
        storage,
        team,
        project_link=project_link,
        archive=archive,
        idempotency_key=idempotency_key,
    )


@router.get("/history", response_model=list[HistoryRow])
def history(
    type: Optional[str] = Query(None, description='Label filter, e.g. "Bug #3" or "Presentation"'),
    db: Session = Depends(get_db),
    team: TeamDetails = Depends(get_current_team),
):
    return [
        HistoryRow(
            type=submission_label(row),
            submitted_by=row.author_name,
            submission_date=to_display_time(row.created_at),
            stage=row.stage,
            submission=to_read(row).model_dump(),
        )
        for row in team_history(db, team.team_id, type)
    ]


@router.delete(
    "/{kind}/{submission_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        404: {"description": "Submission not found"},
        409: {"description": "No grouping is active; the client should reload"},
    },
)
def delete_submission(
    kind: SubmissionKind,
    submission_id: int,
    db: Session = Depends(get_db),
    team: TeamDetails = Depends(get_current_team),
):
    writer.delete_submission(db, team, kind, submission_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
