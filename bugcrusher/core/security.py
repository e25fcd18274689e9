from datetime import datetime, timedelta, timezone

import jwt

from bugcrusher.core.config import ALGORITHM, SECRET_KEY


class InvalidTokenError(Exception):
    pass


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Sign a token the way the auth provider does. Used by tests and local tooling."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=60))
    to_encode["exp"] = expire
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_email_claim(token: str) -> str:
    try:
        payload = jwt.decode(
            token,
            SECRET_KEY,
            algorithms=[ALGORITHM],
            options={"verify_aud": False},
        )
    except jwt.PyJWTError as exc:
        raise InvalidTokenError(str(exc)) from exc

    email = payload.get("email")
    if not email:
        raise InvalidTokenError("token has no email claim")
    return email.strip()
