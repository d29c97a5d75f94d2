from __future__ import annotations

import logging
import math
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, Field
from sqlmodel import Session

from . import store
from .admin import build_admin_router
from .config import get_settings
from .db import get_session, init_db
from .duration import resolve_duration_seconds
from .errors import (
    DurationUnavailableError,
    InvalidLevelsError,
    InvalidReferenceError,
    MetadataUnavailableError,
)
from .models import MAX_DURATION_SEC, Track, Video
from .oembed import fetch_youtube_title
from .store import StoreResult, VideoPatch
from .utils import search_videos
from .youtube import extract_youtube_id


log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="Practice-Tracks", lifespan=lifespan)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


def _json_safe(value):
    # NaN / Infinity are valid to json.loads but not to the JSON response encoder.
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_json_safe(v) for v in value]
    return value


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    errors = [{**err, "input": _json_safe(err.get("input"))} for err in exc.errors()]
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(errors)})


# Admin routes (title / duration refresh from YouTube)
app.include_router(build_admin_router(get_session_dep=get_session))


@app.get("/", response_class=HTMLResponse)
def home(request: Request, q: str | None = None, session: Session = Depends(get_session)):
    """Video list with a per-block level strip for each track."""
    videos = search_videos(store.list_videos(session), q or "")
    rows = [{"video": v, "track": store.get_track(session, v.video_id)} for v in videos]

    # Admin actions redirect back here with their counters in the query string.
    qp = dict(request.query_params)
    qp.pop("q", None)
    result = qp if qp else None

    return templates.TemplateResponse(request, "home.html", {"rows": rows, "q": q or "", "result": result})


# --- JSON API ---

class VideoIn(BaseModel):
    url: str
    title: Optional[str] = None
    instrument: Optional[str] = None
    duration_sec: Optional[float] = Field(default=None, allow_inf_nan=False, le=MAX_DURATION_SEC)
    block_size_sec: Optional[float] = Field(default=None, allow_inf_nan=False, le=MAX_DURATION_SEC)
    # Ask YouTube for whatever title/duration wasn't supplied.
    resolve_metadata: bool = False


class BlockSizeIn(BaseModel):
    block_size_sec: float = Field(allow_inf_nan=False, le=MAX_DURATION_SEC)


class LevelsIn(BaseModel):
    levels: list[int] = Field(default_factory=list)


def _require_video(session: Session, id: str) -> Video:
    video = store.get_video(session, id)
    if not video:
        raise HTTPException(404, "Video not found")
    return video


def _require_track(session: Session, video_id: str) -> Track:
    track = store.get_track(session, video_id)
    if not track:
        raise HTTPException(404, "Track not found")
    return track


def _resolve_missing_metadata(payload: VideoIn) -> dict[str, Any]:
    """Best effort: a failed lookup just leaves the default in place."""
    settings = get_settings()
    found: dict[str, Any] = {}
    if not payload.title:
        try:
            found["title"] = fetch_youtube_title(payload.url, timeout_s=settings.youtube_timeout_s)
        except MetadataUnavailableError as e:
            log.warning("title lookup failed for %s: %s", payload.url, e)
    if payload.duration_sec is None:
        try:
            found["duration_sec"] = resolve_duration_seconds(payload.url, timeout_s=settings.duration_wait_s)
        except DurationUnavailableError as e:
            log.warning("duration lookup failed for %s: %s", payload.url, e)
    return found


@app.get("/api/videos")
def list_videos(q: str | None = None, session: Session = Depends(get_session)) -> list[Video]:
    return search_videos(store.list_videos(session), q or "")


@app.post("/api/videos")
def add_video(payload: VideoIn, session: Session = Depends(get_session)) -> Video:
    video_id = extract_youtube_id(payload.url)
    if not video_id:
        raise HTTPException(400, str(InvalidReferenceError(payload.url)))

    fields = payload.model_dump(exclude={"resolve_metadata"})
    if payload.resolve_metadata and not store.get_video_by_external_id(session, video_id):
        fields.update(_resolve_missing_metadata(payload))

    try:
        return store.add_video(session, **fields)
    except InvalidReferenceError as e:
        raise HTTPException(400, str(e)) from e


@app.get("/api/videos/{id}")
def get_video(id: str, session: Session = Depends(get_session)) -> Video:
    return _require_video(session, id)


@app.patch("/api/videos/{id}")
def update_video(id: str, patch: VideoPatch, session: Session = Depends(get_session)) -> Video:
    if store.update_video(session, id, patch) is StoreResult.NOT_FOUND:
        raise HTTPException(404, "Video not found")
    return _require_video(session, id)


@app.delete("/api/videos/{id}")
def remove_video(id: str, session: Session = Depends(get_session)):
    if store.remove_video(session, id) is StoreResult.NOT_FOUND:
        raise HTTPException(404, "Video not found")
    return {"ok": True}


@app.get("/api/tracks/{video_id}")
def get_track(video_id: str, session: Session = Depends(get_session)) -> Track:
    return _require_track(session, video_id)


@app.put("/api/tracks/{video_id}/block-size")
def update_track_block_size(video_id: str, payload: BlockSizeIn, session: Session = Depends(get_session)):
    result = store.update_track_block_size(session, video_id, payload.block_size_sec)
    if result is StoreResult.NOT_FOUND:
        raise HTTPException(404, "Track not found")
    return {"result": result.value, "track": _require_track(session, video_id)}


@app.put("/api/tracks/{video_id}/levels")
def set_levels(video_id: str, payload: LevelsIn, session: Session = Depends(get_session)) -> Track:
    try:
        result = store.set_levels(session, video_id, payload.levels)
    except InvalidLevelsError as e:
        raise HTTPException(400, str(e)) from e
    if result is StoreResult.NOT_FOUND:
        raise HTTPException(404, "Track not found")
    return _require_track(session, video_id)
