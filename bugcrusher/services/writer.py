import logging
from datetime import datetime, timezone
from urllib.parse import urlparse

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bugcrusher.core.config import (
    BRAINSTORM_BUCKET,
    BRAINSTORM_EXTENSIONS,
    BUG_BUCKET,
    ENHANCEMENT_BUCKET,
    MAX_FILE_SIZE,
    MAX_PROJECT_FILE_SIZE,
    PROJECT_BUCKET,
    PROJECT_EXTENSIONS,
)
from bugcrusher.core.errors import InvalidSubmission, NotFoundError, WriteError
from bugcrusher.models.submission import (
    SUBMISSION_MODELS,
    BrainstormMap,
    BugSubmission,
    Enhancement,
    Presentation,
    Project,
)
from bugcrusher.services.attachments import (
    Attachment,
    upload_all,
    validate_images,
    validate_single_file,
)
from bugcrusher.services.gate import guarded_write
from bugcrusher.services.grouping_oracle import ActiveStatus
from bugcrusher.services.identity import TeamDetails
from bugcrusher.services.storage import StorageClient

logger = logging.getLogger(__name__)

ENHANCEMENT_TYPES = ("basic", "advanced")


def _find_replay(db: Session, model, team: TeamDetails, idempotency_key: str | None):
    if not idempotency_key:
        return None
    return (
        db.query(model)
        .filter(model.team_id == team.team_id, model.idempotency_key == idempotency_key)
        .first()
    )


def _insert(db: Session, row):
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("%s #%s stored for team %s (stage=%s, penalty=%s)", row.kind, row.id, row.team_id, row.stage, row.penalty)
    return row


def _common(team: TeamDetails, status: ActiveStatus, idempotency_key: str | None) -> dict:
    return {
        "team_id": team.team_id,
        "author_name": team.author_name,
        "created_at": datetime.now(timezone.utc),
        "stage": status.grouping,
        "penalty": status.penalty,
        "idempotency_key": idempotency_key or None,
    }


def _require_text(value: str | None, field: str) -> str:
    if value is None or not value.strip():
        raise InvalidSubmission(f"{field} is required.")
    return value.strip()


def _require_link(value: str | None, field: str) -> str:
    value = _require_text(value, field)
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidSubmission(f"{field} must be an http(s) URL.")
    return value


def submit_bug(
    db: Session,
    storage: StorageClient,
    team: TeamDetails,
    bug_number: int,
    description: str,
    screenshots: list[Attachment],
    idempotency_key: str | None = None,
) -> BugSubmission:
    description = _require_text(description, "Fix method description")
    validate_images(screenshots)

    replay = _find_replay(db, BugSubmission, team, idempotency_key)
    if replay:
        return replay

    def write(status: ActiveStatus) -> BugSubmission:
        urls = upload_all(storage, BUG_BUCKET, f"bugs/{team.team_id}/{bug_number}", screenshots)
        return _insert(
            db,
            BugSubmission(
                **_common(team, status, idempotency_key),
                bug_number=bug_number,
                description=description,
                screenshots=urls,
            ),
        )

    return guarded_write(db, team, write)


def submit_enhancement(
    db: Session,
    storage: StorageClient,
    team: TeamDetails,
    enhancement_type: str,
    description: str,
    justification: str,
    screenshots: list[Attachment],
    idempotency_key: str | None = None,
) -> Enhancement:
    if enhancement_type not in ENHANCEMENT_TYPES:
        raise InvalidSubmission("Enhancement type must be 'basic' or 'advanced'.")
    description = _require_text(description, "Description")
    justification = _require_text(justification, "Justification")
    validate_images(screenshots)

    replay = _find_replay(db, Enhancement, team, idempotency_key)
    if replay:
        return replay

    def write(status: ActiveStatus) -> Enhancement:
        urls = upload_all(storage, ENHANCEMENT_BUCKET, f"enhancements/{team.team_id}", screenshots)
        return _insert(
            db,
            Enhancement(
                **_common(team, status, idempotency_key),
                enhancement_type=enhancement_type,
                description=description,
                justification=justification,
                screenshots=urls,
            ),
        )

    return guarded_write(db, team, write)


def submit_brainstorm_map(
    db: Session,
    storage: StorageClient,
    team: TeamDetails,
    file: Attachment | None,
    idempotency_key: str | None = None,
) -> BrainstormMap:
    validate_single_file(file, BRAINSTORM_EXTENSIONS, MAX_FILE_SIZE)

    replay = _find_replay(db, BrainstormMap, team, idempotency_key)
    if replay:
        return replay

    def write(status: ActiveStatus) -> BrainstormMap:
        [url] = upload_all(storage, BRAINSTORM_BUCKET, f"brainstormMaps/{team.team_id}", [file])
        return _insert(db, BrainstormMap(**_common(team, status, idempotency_key), file_url=url))

    return guarded_write(db, team, write)


def submit_presentation(
    db: Session,
    team: TeamDetails,
    youtube_link: str,
    idempotency_key: str | None = None,
) -> Presentation:
    youtube_link = _require_link(youtube_link, "Presentation link")

    replay = _find_replay(db, Presentation, team, idempotency_key)
    if replay:
        return replay

    def write(status: ActiveStatus) -> Presentation:
        return _insert(db, Presentation(**_common(team, status, idempotency_key), youtube_link=youtube_link))

    return guarded_write(db, team, write)


def submit_project(
    db: Session,
    storage: StorageClient,
    team: TeamDetails,
    project_link: str | None = None,
    archive: Attachment | None = None,
    idempotency_key: str | None = None,
) -> Project:
    """A project is either an external link or an uploaded Scratch archive, never both."""
    has_link = bool(project_link and project_link.strip())
    if has_link == (archive is not None):
        raise InvalidSubmission("Provide either a project link or a project file.")

    if has_link:
        project_link = _require_link(project_link, "Project link")
    else:
        validate_single_file(archive, PROJECT_EXTENSIONS, MAX_PROJECT_FILE_SIZE)

    replay = _find_replay(db, Project, team, idempotency_key)
    if replay:
        return replay

    def write(status: ActiveStatus) -> Project:
        file_url = None
        if archive is not None:
            [file_url] = upload_all(storage, PROJECT_BUCKET, f"projects/{team.team_id}", [archive])
        return _insert(
            db,
            Project(
                **_common(team, status, idempotency_key),
                project_link=project_link if has_link else None,
                file_url=file_url,
            ),
        )

    return guarded_write(db, team, write)


def _get_submission(db: Session, kind: str, submission_id: int):
    model = SUBMISSION_MODELS.get(kind)
    if model is None:
        raise NotFoundError(f"Unknown submission type: {kind}")
    row = db.query(model).filter(model.id == submission_id).first()
    if row is None:
        raise NotFoundError("Submission not found")
    return row


def _delete(db: Session, row) -> None:
    kind, row_id, team_id = row.kind, row.id, row.team_id
    db.delete(row)
    db.commit()
    logger.info("%s #%s deleted (team %s)", kind, row_id, team_id)


def delete_submission(db: Session, team: TeamDetails, kind: str, submission_id: int) -> None:
    """Hard delete by the owning team. Uploaded blobs are left in storage."""
    row = _get_submission(db, kind, submission_id)
    if row.team_id != team.team_id:
        # other teams' rows are indistinguishable from missing ones
        raise NotFoundError("Submission not found")

    guarded_write(db, team, lambda _status: _delete(db, row))


def admin_delete_submission(db: Session, kind: str, submission_id: int) -> None:
    row = _get_submission(db, kind, submission_id)
    try:
        _delete(db, row)
    except SQLAlchemyError as exc:
        db.rollback()
        raise WriteError(str(exc)) from exc
