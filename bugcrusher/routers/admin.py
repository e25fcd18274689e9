from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from bugcrusher.core.deps import get_db
from bugcrusher.core.permissions import require_admin
from bugcrusher.routers.submissions import SubmissionKind
from bugcrusher.services import writer

router = APIRouter()


@router.get("/ping")
def admin_ping(admin_email: str = Depends(require_admin)):
    return {"msg": "admin ok", "user": admin_email}


@router.delete("/submissions/{kind}/{submission_id}", status_code=status.HTTP_204_NO_CONTENT)
def admin_delete_submission(
    kind: SubmissionKind,
    submission_id: int,
    db: Session = Depends(get_db),
    admin_email: str = Depends(require_admin),
):
    # admins may remove any team's row regardless of the grouping window
    writer.admin_delete_submission(db, kind, submission_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
