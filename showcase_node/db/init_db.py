from __future__ import annotations

import logging

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel

from showcase_node.db.tables import ProjectRow, UserRow  # noqa: F401  (registers table metadata)

logger = logging.getLogger(__name__)


def init_db(engine: Engine) -> None:
    """Create missing tables. Existing tables are left untouched."""
    SQLModel.metadata.create_all(engine)
    logger.info("database tables ensured: %s", ", ".join(sorted(SQLModel.metadata.tables)))
