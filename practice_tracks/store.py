from __future__ import annotations

import enum
import logging
import math
from collections.abc import Sequence
from typing import Optional

from pydantic import BaseModel, Field
from sqlmodel import Session, select

from .errors import InvalidLevelsError, InvalidReferenceError
from .models import (
    DEFAULT_BLOCK_SIZE_SEC,
    DEFAULT_DURATION_SEC,
    LEVEL_MAX,
    LEVEL_MIN,
    MAX_DURATION_SEC,
    Track,
    Video,
    utcnow,
)
from .resample import block_count, resample_levels_max
from .youtube import normalize_reference, normalize_youtube_url, thumbnail_url_from_id


log = logging.getLogger(__name__)


class StoreResult(str, enum.Enum):
    APPLIED = "applied"
    UNCHANGED = "unchanged"
    NOT_FOUND = "not_found"


class VideoPatch(BaseModel):
    """Partial update for a video.

    Only fields that were explicitly set are applied (see ``model_fields_set``),
    so ``VideoPatch(note=None)`` clears the note while ``VideoPatch()`` leaves
    it alone.
    """

    title: Optional[str] = None
    instrument: Optional[str] = None
    note: Optional[str] = None
    duration_sec: Optional[float] = Field(default=None, allow_inf_nan=False, le=MAX_DURATION_SEC)


def _clean(s: Optional[str]) -> Optional[str]:
    if s is None:
        return None
    s = s.strip()
    return s or None


def _zero_levels(duration_sec: int, block_size_sec: int) -> list[int]:
    return [0] * block_count(duration_sec, block_size_sec)


# --- lookups ---

def list_videos(session: Session) -> list[Video]:
    return list(session.exec(select(Video).order_by(Video.created_at)).all())


def get_video(session: Session, id: str) -> Optional[Video]:
    return session.get(Video, id)


def get_video_by_external_id(session: Session, video_id: str) -> Optional[Video]:
    return session.exec(select(Video).where(Video.video_id == video_id)).first()


def get_track(session: Session, video_id: str) -> Optional[Track]:
    return session.get(Track, video_id)


# --- mutations ---

def add_video(
    session: Session,
    url: str,
    title: Optional[str] = None,
    instrument: Optional[str] = None,
    duration_sec: Optional[float] = None,
    block_size_sec: Optional[float] = None,
) -> Video:
    """Create a video and its zero-filled track.

    Adding an id that is already stored returns the stored video untouched.
    """
    canonical_url = normalize_youtube_url(url)
    video_id = normalize_reference(canonical_url)
    if not video_id:
        raise InvalidReferenceError(url)

    existing = get_video_by_external_id(session, video_id)
    if existing:
        return existing

    if duration_sec is None or not math.isfinite(duration_sec):
        duration = DEFAULT_DURATION_SEC
    else:
        duration = max(1, math.floor(duration_sec))

    if block_size_sec and math.isfinite(block_size_sec) and block_size_sec > 0:
        block_size = max(1, math.floor(block_size_sec))
    else:
        block_size = DEFAULT_BLOCK_SIZE_SEC

    now = utcnow()
    video = Video(
        provider="youtube",
        video_id=video_id,
        url=canonical_url,
        title=_clean(title) or f"YouTube {video_id}",
        duration_sec=duration,
        thumbnail_url=thumbnail_url_from_id(video_id),
        instrument=_clean(instrument),
        created_at=now,
        updated_at=now,
    )
    track = Track(
        video_id=video_id,
        block_size_sec=block_size,
        levels=_zero_levels(duration, block_size),
    )
    session.add(video)
    session.add(track)
    session.commit()
    session.refresh(video)

    log.info("added video %s (%ss, %d blocks of %ss)", video_id, duration, len(track.levels), block_size)
    return video


def update_video(session: Session, id: str, patch: VideoPatch) -> StoreResult:
    video = get_video(session, id)
    if not video:
        return StoreResult.NOT_FOUND

    fields = patch.model_fields_set
    if "title" in fields:
        # Title is required on the record; an empty patch value keeps the old one.
        video.title = _clean(patch.title) or video.title
    if "instrument" in fields:
        video.instrument = _clean(patch.instrument)
    if "note" in fields:
        video.note = patch.note

    new_duration = None
    if "duration_sec" in fields and patch.duration_sec is not None and patch.duration_sec > 0:
        new_duration = max(1, math.floor(patch.duration_sec))
        video.duration_sec = new_duration

    video.updated_at = utcnow()
    session.add(video)

    if new_duration is not None:
        track = get_track(session, video.video_id)
        if track:
            # Same grid, new span: keeps recorded levels, pads or truncates the tail.
            track.levels = resample_levels_max(
                track.levels, track.block_size_sec, track.block_size_sec, new_duration
            )
        else:
            track = Track(
                video_id=video.video_id,
                block_size_sec=DEFAULT_BLOCK_SIZE_SEC,
                levels=_zero_levels(new_duration, DEFAULT_BLOCK_SIZE_SEC),
            )
        session.add(track)
        log.info("video %s duration -> %ss, track now %d blocks", video.video_id, new_duration, len(track.levels))

    session.commit()
    return StoreResult.APPLIED


def remove_video(session: Session, id: str) -> StoreResult:
    video = get_video(session, id)
    if not video:
        return StoreResult.NOT_FOUND

    video_id = video.video_id
    track = get_track(session, video_id)
    session.delete(video)
    if track:
        session.delete(track)
    # Single commit: both rows go or neither does.
    session.commit()

    log.info("removed video %s", video_id)
    return StoreResult.APPLIED


def update_track_block_size(session: Session, video_id: str, new_block_size_sec: float) -> StoreResult:
    track = get_track(session, video_id)
    video = get_video_by_external_id(session, video_id)
    if not track or not video:
        return StoreResult.NOT_FOUND

    if not math.isfinite(new_block_size_sec):
        return StoreResult.UNCHANGED
    block_size = max(1, math.floor(new_block_size_sec))
    if block_size == track.block_size_sec:
        return StoreResult.UNCHANGED

    old_block_size = track.block_size_sec
    track.levels = resample_levels_max(track.levels, old_block_size, block_size, video.duration_sec)
    track.block_size_sec = block_size
    session.add(track)
    session.commit()

    log.info("track %s block size %ss -> %ss", video_id, old_block_size, block_size)
    return StoreResult.APPLIED


def set_levels(session: Session, video_id: str, levels: Sequence[int]) -> StoreResult:
    """Replace the recorded levels of a track.

    The sequence must keep the track's block count and stay on the 0..3 scale.
    """
    track = get_track(session, video_id)
    video = get_video_by_external_id(session, video_id)
    if not track or not video:
        return StoreResult.NOT_FOUND

    expected = block_count(video.duration_sec, track.block_size_sec)
    if len(levels) != expected:
        raise InvalidLevelsError(f"expected {expected} levels for {video_id}, got {len(levels)}")
    bad = [lv for lv in levels if not LEVEL_MIN <= lv <= LEVEL_MAX]
    if bad:
        raise InvalidLevelsError(f"levels must be within {LEVEL_MIN}..{LEVEL_MAX}, got {bad}")

    track.levels = [int(lv) for lv in levels]
    session.add(track)
    session.commit()
    return StoreResult.APPLIED
