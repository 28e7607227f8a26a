from __future__ import annotations

import logging
from datetime import datetime
from typing import Annotated, Any

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from showcase_node.config.runtime import RuntimeSettings
from showcase_node.config_loader import load_config
from showcase_node.middleware.auth import StaticSessionValidator, extract_session_token
from showcase_node.notifications import LoggingNotificationSink, NotificationSink
from showcase_node.results import RejectReason, ResultStatus
from showcase_node.services.engine import ShowcaseEngine
from showcase_node.store.interfaces import DataStore
from showcase_node.store.memory import InMemoryDataStore

logger = logging.getLogger(__name__)

app = FastAPI(title="Showcase Leaderboard API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        force=True,
    )


def build_store(settings: RuntimeSettings) -> DataStore:
    if settings.store_backend == "db":
        from showcase_node.db import DBDataStore, get_engine, init_db

        engine = get_engine()
        init_db(engine)
        return DBDataStore(engine)
    return InMemoryDataStore()


def build_notification_sink(settings: RuntimeSettings) -> NotificationSink:
    if settings.notify_channel:
        from showcase_node.db import PgNotifySink

        return PgNotifySink(channel=settings.notify_channel)
    return LoggingNotificationSink()


def build_engine(settings: RuntimeSettings | None = None) -> ShowcaseEngine:
    settings = settings or RuntimeSettings.from_env()
    return ShowcaseEngine(
        build_store(settings),
        config=load_config(),
        notification_sink=build_notification_sink(settings),
        session_validator=StaticSessionValidator.from_settings(settings),
        max_page_size=settings.max_page_size,
    )


_engine: ShowcaseEngine | None = None


def get_engine() -> ShowcaseEngine:
    global _engine
    if _engine is None:
        _engine = build_engine()
    return _engine


def get_session_token(request: Request) -> str | None:
    return extract_session_token(request)


EngineDep = Annotated[ShowcaseEngine, Depends(get_engine)]
TokenDep = Annotated[str | None, Depends(get_session_token)]


# ── request bodies ──

class PublishRequest(BaseModel):
    owner_id: str = Field(min_length=1)
    project_id: str = Field(min_length=1)


class UpvoteRequest(BaseModel):
    voter_id: str = Field(min_length=1)


class ViewRequest(BaseModel):
    viewer_id: str | None = None


def _raise_for_status(result_status: ResultStatus, reason: RejectReason | None, message: str | None) -> None:
    if result_status == ResultStatus.ACCESS_DENIED:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=message or "access denied")
    if result_status == ResultStatus.REJECTED:
        if reason in (RejectReason.UNKNOWN_PROJECT, RejectReason.UNKNOWN_USER):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message)
        if reason == RejectReason.OWNER_MISMATCH:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=message)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


def _write_response(result) -> dict[str, Any]:
    _raise_for_status(result.status, result.reason, result.message)
    return {
        "status": result.status.value,
        "awarded_badges": list(result.awarded_badges),
        "upvote_count": result.upvote_count,
        "view_count": result.view_count,
    }


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/leaderboard")
def get_leaderboard(
    engine: EngineDep,
    session_token: TokenDep,
    page: int = 0,
    page_size: int = 10,
    as_of: datetime | None = None,
) -> dict[str, Any]:
    result = engine.leaderboard(session_token, page=page, page_size=page_size, as_of=as_of)
    _raise_for_status(result.status, result.reason, result.message)
    return {
        "page": result.page,
        "page_size": result.page_size,
        "total": result.total,
        "entries": [entry.to_dict() for entry in result.entries],
    }


@app.get("/users/{user_id}/score")
def get_user_score(
    user_id: str,
    engine: EngineDep,
    session_token: TokenDep,
    as_of: datetime | None = None,
) -> dict[str, Any]:
    result = engine.user_score(session_token, user_id, as_of=as_of)
    _raise_for_status(result.status, result.reason, result.message)
    return result.record.to_dict()


@app.get("/users/{user_id}/rank")
def get_user_rank(
    user_id: str,
    engine: EngineDep,
    session_token: TokenDep,
    as_of: datetime | None = None,
) -> dict[str, Any]:
    result = engine.user_rank(session_token, user_id, as_of=as_of)
    _raise_for_status(result.status, result.reason, result.message)
    return result.entry.to_dict()


@app.post("/projects")
def publish_project(body: PublishRequest, engine: EngineDep) -> dict[str, Any]:
    return _write_response(engine.publish_project(body.owner_id, body.project_id))


@app.post("/projects/{project_id}/upvotes")
def upvote_project(project_id: str, body: UpvoteRequest, engine: EngineDep) -> dict[str, Any]:
    return _write_response(engine.upvote(body.voter_id, project_id))


@app.post("/projects/{project_id}/views")
def view_project(project_id: str, body: ViewRequest, engine: EngineDep) -> dict[str, Any]:
    return _write_response(engine.view(project_id, body.viewer_id))


def main() -> None:
    configure_logging()
    settings = RuntimeSettings.from_env()
    logger.info("api worker bootstrap (store=%s)", settings.store_backend)

    # configuration problems surface here, before the server accepts traffic
    global _engine
    _engine = build_engine(settings)

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
