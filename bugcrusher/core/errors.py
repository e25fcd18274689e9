import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from bugcrusher.core.config import RELOAD_AFTER_MS

logger = logging.getLogger(__name__)


class CompetitionError(Exception):
    """Base for errors scoped to a single dashboard operation."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(CompetitionError):
    status_code = status.HTTP_404_NOT_FOUND


class SubmissionBlocked(CompetitionError):
    """No grouping of the team is active at write time. The client must reload."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str = "The grouping is no longer active. Reloading the page..."):
        super().__init__(message)


class InvalidSubmission(CompetitionError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class AttachmentError(InvalidSubmission):
    """File count, size or extension outside the allowed limits."""


class UploadError(CompetitionError):
    status_code = status.HTTP_502_BAD_GATEWAY


class WriteError(CompetitionError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


async def competition_error_handler(request: Request, exc: CompetitionError) -> JSONResponse:
    logger.warning(
        "%s %s failed: %s: %s",
        request.method,
        request.url.path,
        type(exc).__name__,
        exc.message,
    )

    body = {"detail": exc.message}
    if isinstance(exc, SubmissionBlocked):
        body["reload"] = True
        body["reload_after_ms"] = RELOAD_AFTER_MS

    return JSONResponse(status_code=exc.status_code, content=body)
