from __future__ import annotations

import re
from typing import Optional
from urllib.parse import parse_qs, urlparse


_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")

_YOUTUBE_HOSTS = {"youtube.com", "www.youtube.com", "m.youtube.com", "music.youtube.com"}
_SHORT_HOSTS = {"youtu.be", "www.youtu.be"}

# Path prefixes that are followed directly by the video id.
_PATH_PREFIXES = ("embed", "shorts", "live", "v")


def _valid(candidate: Optional[str]) -> Optional[str]:
    if candidate and _ID_RE.match(candidate):
        return candidate
    return None


def extract_youtube_id(value: str) -> Optional[str]:
    """Return the 11 character video id from a URL or bare id, else None."""
    s = (value or "").strip()
    if not s:
        return None

    if _ID_RE.match(s):
        return s

    if "://" not in s:
        s = "https://" + s
    parsed = urlparse(s)
    host = (parsed.hostname or "").lower()
    parts = [p for p in parsed.path.split("/") if p]

    if host in _SHORT_HOSTS:
        return _valid(parts[0]) if parts else None

    if host in _YOUTUBE_HOSTS:
        if parts and parts[0] == "watch":
            return _valid(parse_qs(parsed.query).get("v", [None])[0])
        if len(parts) >= 2 and parts[0] in _PATH_PREFIXES:
            return _valid(parts[1])

    return None


# Name used by the store: parse and validate a user supplied reference.
normalize_reference = extract_youtube_id


def watch_url_from_id(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


def normalize_youtube_url(value: str) -> str:
    """Canonical watch URL for anything we recognise; the stripped input otherwise."""
    video_id = extract_youtube_id(value)
    if not video_id:
        return (value or "").strip()
    return watch_url_from_id(video_id)


def thumbnail_url_from_id(video_id: str) -> str:
    return f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"
