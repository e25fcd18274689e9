from bugcrusher.db.base import Base
from bugcrusher.db.session import engine


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
