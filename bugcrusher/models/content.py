from sqlalchemy import Column, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from bugcrusher.db.base_class import Base


class Stage(Base):
    __tablename__ = "stages"

    stage_id = Column(Integer, primary_key=True, index=True)
    # same value as the grouping name the stage belongs to
    stage_name = Column(String(100), unique=True, nullable=False, index=True)

    bugs = relationship("Bug", back_populates="stage", cascade="all, delete-orphan")


class Bug(Base):
    __tablename__ = "bugs"

    id = Column(Integer, primary_key=True, index=True)
    stage_id = Column(Integer, ForeignKey("stages.stage_id", ondelete="CASCADE"), nullable=False, index=True)
    bug_number = Column(Integer, nullable=False)
    category = Column(String(100), nullable=False)

    description = Column(Text, nullable=False)
    # storage paths relative to the public base url
    bug_image_path = Column(String(500), nullable=True)
    expected_behavior_path = Column(String(500), nullable=True)

    __table_args__ = (
        UniqueConstraint("stage_id", "bug_number", "category", name="uq_bug_stage_number_category"),
    )

    stage = relationship("Stage", back_populates="bugs")


class MissionPack(Base):
    __tablename__ = "mission_packs"

    id = Column(Integer, primary_key=True, index=True)
    stage_id = Column(Integer, ForeignKey("stages.stage_id", ondelete="CASCADE"), nullable=False, index=True)
    category = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)  # HTML


class Update(Base):
    __tablename__ = "updates"

    id = Column(Integer, primary_key=True, index=True)
    stage_id = Column(Integer, ForeignKey("stages.stage_id", ondelete="CASCADE"), nullable=False, index=True)
    category = Column(String(100), nullable=False)
    description = Column(String(255), nullable=True)
    content = Column(Text, nullable=False)
