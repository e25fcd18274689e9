import os
import shutil
import tempfile
from datetime import datetime, timedelta, timezone

TEST_DB_FILE = "test_bugcrusher.db"
TEST_STORAGE_ROOT = tempfile.mkdtemp(prefix="bugcrusher-storage-")

# must be set before bugcrusher.core.config is imported
os.environ["DATABASE_URL"] = f"sqlite:///./{TEST_DB_FILE}"
os.environ["STORAGE_ROOT"] = TEST_STORAGE_ROOT
os.environ["COMPETITION_CATEGORY"] = "Senior-Scratch"
os.environ["ADMIN_EMAILS"] = "admin@bugcrusher.test"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from bugcrusher.core.deps import get_db, get_storage  # noqa: E402
from bugcrusher.db.base import Base  # noqa: E402
from bugcrusher.main import app  # noqa: E402
from bugcrusher.models.content import Bug, MissionPack, Stage, Update  # noqa: E402
from bugcrusher.models.grouping import GroupingStatus, TeamGrouping  # noqa: E402
from bugcrusher.models.team import Team, TeamMember  # noqa: E402
from bugcrusher.services.storage import StorageClient  # noqa: E402
from tests.utils import (  # noqa: E402
    JUNIOR_EMAIL,
    MEMBER_EMAIL,
    NO_GROUPING_EMAIL,
    OTHER_TEAM_EMAIL,
    PUBLIC_BASE,
    TEACHER_EMAIL,
    TestingSessionLocal,
    engine,
)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """Create a fresh schema once for the whole test session."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if os.path.exists(TEST_DB_FILE):
        os.remove(TEST_DB_FILE)
    shutil.rmtree(TEST_STORAGE_ROOT, ignore_errors=True)


@pytest.fixture()
def now():
    return datetime.now(timezone.utc)


@pytest.fixture(autouse=True)
def seed_data(now):
    """
    Seed a clean dataset for each test.

    Alpha (Senior-Scratch) is in StageA and StageB, both active, StageA
    activated first. Delta shares StageA. Gamma has no groupings. Beta is in
    the wrong category.
    """
    db = TestingSessionLocal()
    try:
        # Clear tables (child -> parent)
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(table.delete())
        db.commit()

        alpha = Team(
            team_name="Alpha",
            category="Senior-Scratch",
            teacher_name="Teacher Alpha",
            teacher_email=TEACHER_EMAIL,
            members=[
                TeamMember(position=0, name="Ana", parent_email=MEMBER_EMAIL),
                TeamMember(position=1, name="Ben", parent_email="ben.parent@alpha.test"),
            ],
        )
        delta = Team(
            team_name="Delta",
            category="Senior-Scratch",
            teacher_name="Teacher Delta",
            teacher_email=OTHER_TEAM_EMAIL,
        )
        gamma = Team(
            team_name="Gamma",
            category="Senior-Scratch",
            teacher_name="Teacher Gamma",
            teacher_email=NO_GROUPING_EMAIL,
        )
        beta = Team(
            team_name="Beta",
            category="Junior-Scratch",
            teacher_name="Teacher Beta",
            teacher_email=JUNIOR_EMAIL,
        )
        db.add_all([alpha, delta, gamma, beta])
        db.commit()

        db.add_all(
            [
                TeamGrouping(team_id=alpha.id, grouping="StageA"),
                TeamGrouping(team_id=alpha.id, grouping="StageB"),
                TeamGrouping(team_id=delta.id, grouping="StageA"),
                TeamGrouping(team_id=beta.id, grouping="StageA"),
                GroupingStatus(
                    grouping="StageA",
                    status="active",
                    updated_at=now - timedelta(minutes=30),
                    target_seconds=7200,
                    penalty=False,
                ),
                GroupingStatus(
                    grouping="StageB",
                    status="active",
                    updated_at=now - timedelta(minutes=10),
                    target_seconds=3600,
                    penalty=True,
                ),
                GroupingStatus(
                    grouping="StageC",
                    status="inactive",
                    updated_at=now - timedelta(hours=5),
                ),
            ]
        )

        stage_a = Stage(stage_name="StageA")
        stage_b = Stage(stage_name="StageB")
        db.add_all([stage_a, stage_b])
        db.commit()

        db.add_all(
            [
                Bug(
                    stage_id=stage_a.stage_id,
                    bug_number=1,
                    category="Senior-Scratch",
                    description="The cat walks through walls.",
                    bug_image_path="bugScreenshots/reference/bug1.png",
                    expected_behavior_path="bugScreenshots/reference/bug1-expected.png",
                ),
                Bug(
                    stage_id=stage_a.stage_id,
                    bug_number=2,
                    category="Junior-Scratch",
                    description="Junior-only bug.",
                ),
                MissionPack(stage_id=stage_a.stage_id, category="Senior-Scratch", content="<h1>Mission A</h1>"),
                Update(stage_id=stage_a.stage_id, category="Senior-Scratch", description="Welcome", content="Stage A is open"),
                Update(stage_id=stage_b.stage_id, category="Senior-Scratch", description="Heads up", content="Stage B rules"),
                Update(stage_id=stage_b.stage_id, category="Junior-Scratch", description="Junior", content="not for seniors"),
            ]
        )
        db.commit()

        yield
    finally:
        db.close()


@pytest.fixture()
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def storage(tmp_path):
    return StorageClient(tmp_path / "blobs", PUBLIC_BASE)


@pytest.fixture()
def client(storage):
    """Test client that uses the test DB session and a throwaway blob store."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
