from urllib.parse import parse_qs, urlparse

from sqlalchemy.orm import Session

from bugcrusher.models.submission import SUBMISSION_MODELS
from bugcrusher.services.grouping_oracle import as_utc

NO_STAGE = "N/A"


def submission_label(row) -> str:
    if row.kind == "bug":
        return f"Bug #{row.bug_number}"
    if row.kind == "enhancement":
        return "Advanced Enhancement" if row.enhancement_type == "advanced" else "Medium Enhancement"
    if row.kind == "brainstorm_map":
        return "Brainstorm Map"
    if row.kind == "presentation":
        return "Presentation"
    if row.kind == "project":
        return "Project"
    raise ValueError(f"unknown submission kind: {row.kind}")


def team_history(db: Session, team_id: int, type_filter: str | None = None) -> list:
    """
    Every submission of the team across all variants.

    Ordered by stage (missing stage sorts as "N/A"), then label, then most
    recent first. `type_filter` keeps only rows with that exact label.
    """
    rows = []
    for model in SUBMISSION_MODELS.values():
        rows.extend(db.query(model).filter(model.team_id == team_id).all())

    if type_filter and type_filter != "all":
        rows = [r for r in rows if submission_label(r) == type_filter]

    # two stable passes: newest first, then stage/label ascending
    rows.sort(key=lambda r: as_utc(r.created_at), reverse=True)
    rows.sort(key=lambda r: (r.stage or NO_STAGE, submission_label(r)))
    return rows


def youtube_embed_url(url: str) -> str:
    parsed = urlparse(url)
    host = (parsed.hostname or "").lower()

    video_id = ""
    if host == "youtu.be":
        video_id = parsed.path.lstrip("/")
    elif "youtube.com" in host:
        if "/watch" in parsed.path:
            video_id = parse_qs(parsed.query).get("v", [""])[0]
        elif "/live/" in parsed.path:
            video_id = parsed.path.split("/live/", 1)[1]

    if video_id:
        return f"https://www.youtube.com/embed/{video_id}"
    return url.replace("watch?v=", "embed/")
