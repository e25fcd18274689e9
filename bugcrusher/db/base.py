# import models so Base.metadata knows every table (used by init_db, alembic and tests)
from bugcrusher.db.base_class import Base  # noqa: F401
from bugcrusher.models import content, grouping, submission, team  # noqa: F401
