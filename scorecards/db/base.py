# performance_scorecards/scorecards/db/base.py
# The task/user/department tables are owned by the workspace application;
# these mappings are used read-only by the scorecard engine.

from sqlalchemy.orm import declarative_base

Base = declarative_base()

# IMPORTANT: import all model modules so they register with Base.metadata
# and their string-based relationships (like "Department") can be resolved.

from scorecards.db import models  # noqa: F401,E402  (imported for side-effects only)
