from __future__ import annotations

from collections.abc import Callable
import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import RedirectResponse
from sqlmodel import Session

from . import store
from .config import get_settings
from .duration import resolve_duration_seconds
from .errors import DurationUnavailableError, MetadataUnavailableError
from .oembed import fetch_youtube_title
from .store import StoreResult, VideoPatch


log = logging.getLogger(__name__)


def _has_placeholder_title(video) -> bool:
    return video.title == f"YouTube {video.video_id}"


def build_admin_router(*, get_session_dep: Callable[[], Session]) -> APIRouter:
    """Admin routes.

    - Fill in placeholder titles from YouTube oEmbed
    - Re-read a video's duration from YouTube (resamples its track)

    Kept as a router factory so the main app can inject dependencies cleanly.
    """

    r = APIRouter()

    @r.post("/admin/titles")
    def admin_titles(session: Session = Depends(get_session_dep)):
        settings = get_settings()
        attempted = 0
        updated = 0
        for v in store.list_videos(session):
            if not _has_placeholder_title(v):
                continue
            attempted += 1
            try:
                title = fetch_youtube_title(v.video_id, timeout_s=settings.youtube_timeout_s)
            except MetadataUnavailableError as e:
                log.warning("title refresh failed for %s: %s", v.video_id, e)
                continue
            if title:
                store.update_video(session, v.id, VideoPatch(title=title))
                updated += 1
        return RedirectResponse(url=f"/?titles=1&attempted={attempted}&updated={updated}", status_code=303)

    @r.post("/admin/videos/{id}/duration")
    def admin_duration(id: str, session: Session = Depends(get_session_dep)):
        video = store.get_video(session, id)
        if not video:
            raise HTTPException(404, "Video not found")

        settings = get_settings()
        try:
            seconds = resolve_duration_seconds(video.video_id, timeout_s=settings.duration_wait_s)
        except DurationUnavailableError as e:
            raise HTTPException(502, str(e)) from e

        result = store.update_video(session, id, VideoPatch(duration_sec=seconds))
        if result is StoreResult.NOT_FOUND:
            raise HTTPException(404, "Video not found")
        return RedirectResponse(url=f"/?duration=1&video={video.video_id}&seconds={seconds}", status_code=303)

    return r
