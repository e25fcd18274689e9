from sqlalchemy.orm import Session

from bugcrusher.models.content import Bug, MissionPack, Stage, Update


def get_stage(db: Session, stage_name: str) -> Stage | None:
    return db.query(Stage).filter(Stage.stage_name == stage_name).first()


def stage_updates(db: Session, grouping_names: list[str], category: str) -> list[tuple[Update, str]]:
    """Updates posted for any of the team's stages, paired with the stage name."""
    if not grouping_names:
        return []

    return (
        db.query(Update, Stage.stage_name)
        .join(Stage, Stage.stage_id == Update.stage_id)
        .filter(
            Stage.stage_name.in_(grouping_names),
            Update.category == category,
        )
        .order_by(Stage.stage_name.asc(), Update.id.asc())
        .all()
    )


def mission_pack_content(db: Session, stage_name: str, category: str) -> str | None:
    stage = get_stage(db, stage_name)
    if stage is None:
        return None

    pack = (
        db.query(MissionPack)
        .filter(MissionPack.stage_id == stage.stage_id, MissionPack.category == category)
        .first()
    )
    return pack.content if pack else None


def bug_details(db: Session, stage_name: str, bug_number: int, category: str) -> Bug | None:
    stage = get_stage(db, stage_name)
    if stage is None:
        return None

    return (
        db.query(Bug)
        .filter(
            Bug.stage_id == stage.stage_id,
            Bug.bug_number == bug_number,
            Bug.category == category,
        )
        .first()
    )
