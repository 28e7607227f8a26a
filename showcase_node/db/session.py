from __future__ import annotations

import os

from sqlalchemy.engine import Engine
from sqlmodel import create_engine


def database_url() -> str:
    explicit = os.getenv("SHOWCASE_DATABASE_URL", "").strip()
    if explicit:
        return explicit
    user = os.getenv("POSTGRES_USER", "showcase")
    password = os.getenv("POSTGRES_PASSWORD", "showcase")
    host = os.getenv("POSTGRES_HOST", "postgres")
    port = os.getenv("POSTGRES_PORT", "5432")
    db = os.getenv("POSTGRES_DB", "showcase")
    return f"postgresql+psycopg2://{user}:{password}@{host}:{port}/{db}"


_engine: Engine | None = None


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = create_engine(database_url())
    return _engine
