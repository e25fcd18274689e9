from fastapi import Depends, HTTPException, status

from bugcrusher.core.config import ADMIN_EMAILS
from bugcrusher.core.current_user import get_current_email


def require_admin(email: str = Depends(get_current_email)) -> str:
    if email.lower() not in ADMIN_EMAILS:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required",
        )
    return email
