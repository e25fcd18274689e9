import os

from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from bugcrusher.core.security import create_access_token
from bugcrusher.models.grouping import GroupingStatus

TEST_DB_URL = os.environ["DATABASE_URL"]
PUBLIC_BASE = "http://testserver/storage/v1/object/public"

TEACHER_EMAIL = "teacher@alpha.test"
MEMBER_EMAIL = "ana.parent@alpha.test"
OTHER_TEAM_EMAIL = "teacher@delta.test"
NO_GROUPING_EMAIL = "teacher@gamma.test"
JUNIOR_EMAIL = "teacher@beta.test"
ADMIN_EMAIL = "admin@bugcrusher.test"

engine = create_engine(
    TEST_DB_URL,
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def auth_header(email: str) -> dict:
    token = create_access_token({"sub": email, "email": email})
    return {"Authorization": f"Bearer {token}"}


def set_status(grouping: str, **fields) -> None:
    db = TestingSessionLocal()
    try:
        row = db.query(GroupingStatus).filter(GroupingStatus.grouping == grouping).first()
        for key, value in fields.items():
            setattr(row, key, value)
        db.commit()
    finally:
        db.close()


def png(name: str = "shot.png", size: int = 128, field: str = "screenshots") -> tuple:
    return (field, (name, b"\x89PNG" + b"0" * size, "image/png"))


class UnreachableStore:
    """Session stand-in whose every query fails like a dropped connection."""

    def query(self, *entities):
        raise OperationalError("SELECT teams", {}, Exception("unable to open database file"))
