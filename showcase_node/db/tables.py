"""User and project tables."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UserRow(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(primary_key=True)
    joined_at: datetime = Field(index=True)
    upvotes_cast: int = 0

    # badge id → ISO award time, in award order
    badges_json: dict[str, Any] = Field(
        default_factory=dict, sa_column=Column(JSON),
    )

    updated_at: datetime = Field(default_factory=utc_now)


class ProjectRow(SQLModel, table=True):
    __tablename__ = "projects"

    id: str = Field(primary_key=True)
    owner_id: str = Field(index=True)
    created_at: datetime = Field(index=True)
    upvote_count: int = 0
    view_count: int = 0

    upvotes_json: list[dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON),
    )
    views_json: list[dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON),
    )

    updated_at: datetime = Field(default_factory=utc_now)
