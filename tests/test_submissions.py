from bugcrusher.core.deps import get_storage
from bugcrusher.core.errors import UploadError
from bugcrusher.main import app
from bugcrusher.models.submission import BrainstormMap, BugSubmission, Presentation, Project
from bugcrusher.models.team import Team
from bugcrusher.services.storage import StorageClient
from tests.utils import (
    JUNIOR_EMAIL,
    MEMBER_EMAIL,
    NO_GROUPING_EMAIL,
    PUBLIC_BASE,
    TEACHER_EMAIL,
    auth_header,
    png,
    set_status,
)


def alpha_id(db) -> int:
    return db.query(Team).filter(Team.team_name == "Alpha").one().id


def submit_bug(client, email=TEACHER_EMAIL, bug_number=1, files=None, **headers):
    return client.post(
        f"/submissions/bugs/{bug_number}",
        headers={**auth_header(email), **headers},
        data={"description": "Added a wall check before moving."},
        files=files if files is not None else [png("a.png"), png("b.png")],
    )


def test_bug_fix_with_two_images_is_stored_against_the_active_stage(client, db, storage):
    r = submit_bug(client)
    assert r.status_code == 201, r.text

    body = r.json()
    assert body["kind"] == "bug"
    assert body["bug_number"] == 1
    assert body["stage"] == "StageA"
    assert body["penalty"] is False
    assert body["author_name"] == "Teacher Alpha"
    assert len(body["screenshots"]) == 2
    prefix = f"{PUBLIC_BASE}/bugScreenshots/bugs/{alpha_id(db)}/1/"
    assert all(url.startswith(prefix) for url in body["screenshots"])

    rows = db.query(BugSubmission).all()
    assert len(rows) == 1
    assert rows[0].stage == "StageA"
    assert rows[0].screenshots == body["screenshots"]


def test_member_submission_is_authored_by_the_member(client):
    r = submit_bug(client, email=MEMBER_EMAIL)
    assert r.status_code == 201, r.text
    assert r.json()["author_name"] == "Ana"


def test_grouping_closing_after_page_load_blocks_the_write(client, db, storage):
    r = client.get("/dashboard/status", headers=auth_header(TEACHER_EMAIL))
    assert r.json()["is_active"] is True

    set_status("StageA", status="inactive")
    set_status("StageB", status="inactive")

    r = submit_bug(client)
    assert r.status_code == 409, r.text
    body = r.json()
    assert body["reload"] is True
    assert body["reload_after_ms"] > 0

    assert db.query(BugSubmission).count() == 0
    assert not (storage.root / "bugScreenshots").exists()


def test_penalty_flag_is_copied_from_the_active_grouping(client):
    set_status("StageA", penalty=True)

    r = submit_bug(client)
    assert r.status_code == 201, r.text
    assert r.json()["penalty"] is True


def test_stage_follows_the_earliest_still_active_grouping(client):
    set_status("StageA", status="inactive")

    r = submit_bug(client)
    assert r.status_code == 201, r.text
    assert r.json()["stage"] == "StageB"
    assert r.json()["penalty"] is True


def test_fifth_image_is_rejected_before_anything_is_uploaded(client, db, storage):
    r = submit_bug(client, files=[png(f"{i}.png") for i in range(5)])

    assert r.status_code == 422, r.text
    assert "Maximum of 4 images" in r.json()["detail"]
    assert db.query(BugSubmission).count() == 0
    assert not (storage.root / "bugScreenshots").exists()


def test_image_over_three_mib_is_rejected(client, db):
    r = submit_bug(client, files=[png("big.png", size=3 * 1024 * 1024)])

    assert r.status_code == 422, r.text
    assert "big.png exceeds 3MB limit" in r.json()["detail"]
    assert db.query(BugSubmission).count() == 0


def test_bug_fix_needs_a_description_and_an_image(client):
    r = client.post(
        "/submissions/bugs/1",
        headers=auth_header(TEACHER_EMAIL),
        data={"description": "   "},
        files=[png()],
    )
    assert r.status_code == 422

    r = client.post(
        "/submissions/bugs/1",
        headers=auth_header(TEACHER_EMAIL),
        data={"description": "fixed"},
    )
    assert r.status_code == 422
    assert r.json()["detail"] == "At least one image is required."


def test_bug_number_outside_the_pack_is_rejected(client):
    assert submit_bug(client, bug_number=11).status_code == 422
    assert submit_bug(client, bug_number=0).status_code == 422


class BrokenStorage(StorageClient):
    def upload(self, bucket, path, data, content_type=None):
        raise UploadError(f"Failed to upload {path.rsplit('/', 1)[-1]}.")


def test_upload_failure_leaves_no_row(client, db, tmp_path):
    app.dependency_overrides[get_storage] = lambda: BrokenStorage(tmp_path / "broken", PUBLIC_BASE)

    r = submit_bug(client)

    assert r.status_code == 502, r.text
    assert r.json()["detail"].startswith("Failed to upload")
    assert db.query(BugSubmission).count() == 0


def test_replayed_idempotency_key_returns_the_first_row(client, db):
    r1 = submit_bug(client, **{"Idempotency-Key": "retry-1"})
    r2 = submit_bug(client, **{"Idempotency-Key": "retry-1"})

    assert r1.status_code == 201, r1.text
    assert r2.status_code == 201, r2.text
    assert r2.json()["id"] == r1.json()["id"]
    assert db.query(BugSubmission).count() == 1

    r3 = submit_bug(client)
    assert r3.json()["id"] != r1.json()["id"]
    assert db.query(BugSubmission).count() == 2


def test_enhancement_types(client):
    def post(kind):
        return client.post(
            "/submissions/enhancements",
            headers=auth_header(TEACHER_EMAIL),
            data={"enhancement_type": kind, "description": "Double jump", "justification": "More fun"},
            files=[png()],
        )

    r = post("advanced")
    assert r.status_code == 201, r.text
    assert r.json()["enhancement_type"] == "advanced"
    assert r.json()["stage"] == "StageA"

    assert post("basic").status_code == 201
    assert post("expert").status_code == 422


def test_brainstorm_map_must_be_a_pdf(client, db):
    r = client.post(
        "/submissions/brainstorm-map",
        headers=auth_header(TEACHER_EMAIL),
        files={"file": ("map.pdf", b"%PDF-1.4", "application/pdf")},
    )
    assert r.status_code == 201, r.text
    assert r.json()["file_url"].startswith(f"{PUBLIC_BASE}/brainstormMap/")
    assert r.json()["file_url"].endswith("-map.pdf")

    r = client.post(
        "/submissions/brainstorm-map",
        headers=auth_header(TEACHER_EMAIL),
        files={"file": ("map.png", b"\x89PNG", "image/png")},
    )
    assert r.status_code == 422
    assert db.query(BrainstormMap).count() == 1


def test_presentation_link(client, db):
    r = client.post(
        "/submissions/presentations",
        headers=auth_header(TEACHER_EMAIL),
        json={"youtube_link": "https://youtu.be/abc123"},
    )
    assert r.status_code == 201, r.text
    assert r.json()["embed_url"] == "https://www.youtube.com/embed/abc123"

    for link in ("", "not a link", "ftp://example.com/video"):
        r = client.post(
            "/submissions/presentations",
            headers=auth_header(TEACHER_EMAIL),
            json={"youtube_link": link},
        )
        assert r.status_code == 422, link

    assert db.query(Presentation).count() == 1


def test_project_is_either_a_link_or_an_archive(client, db):
    url = "/submissions/projects"
    headers = auth_header(TEACHER_EMAIL)
    link = "https://scratch.mit.edu/projects/123"
    archive = {"file": ("game.sb3", b"PK\x03\x04", "application/x.scratch.sb3")}

    r = client.post(url, headers=headers, data={"project_link": link})
    assert r.status_code == 201, r.text
    assert r.json()["project_link"] == link
    assert r.json()["file_url"] is None

    r = client.post(url, headers=headers, files=archive)
    assert r.status_code == 201, r.text
    assert r.json()["project_link"] is None
    assert r.json()["file_url"].endswith("-game.sb3")

    assert client.post(url, headers=headers).status_code == 422
    assert client.post(url, headers=headers, data={"project_link": link}, files=archive).status_code == 422
    assert (
        client.post(url, headers=headers, files={"file": ("game.zip", b"PK", "application/zip")}).status_code
        == 422
    )

    assert db.query(Project).count() == 2


def test_team_without_groupings_is_blocked(client, db):
    r = client.post(
        "/submissions/presentations",
        headers=auth_header(NO_GROUPING_EMAIL),
        json={"youtube_link": "https://youtu.be/abc123"},
    )
    assert r.status_code == 409
    assert r.json()["reload"] is True
    assert db.query(Presentation).count() == 0


def test_other_category_cannot_submit(client, db):
    r = submit_bug(client, email=JUNIOR_EMAIL)
    assert r.status_code == 403
    assert db.query(BugSubmission).count() == 0


def test_submitting_requires_a_token(client):
    r = client.post("/submissions/presentations", json={"youtube_link": "https://youtu.be/abc123"})
    assert r.status_code == 401
