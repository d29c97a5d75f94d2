from __future__ import annotations

import re
from collections.abc import Iterable

from rapidfuzz import fuzz
from rapidfuzz.utils import default_process

from .models import Video


def _clean(s: str) -> str:
    return re.sub(r"\s+", " ", s.strip())


def search_videos(videos: Iterable[Video], query: str, min_score: float = 60.0) -> list[Video]:
    """Fuzzy match ``query`` against title and instrument, best first.

    An empty query returns the videos unchanged.
    """
    q = _clean(query or "")
    videos = list(videos)
    if not q:
        return videos

    scored = []
    for v in videos:
        haystack = " ".join(p for p in (v.title, v.instrument) if p)
        score = max(
            fuzz.token_set_ratio(q, haystack, processor=default_process),
            fuzz.partial_ratio(q, haystack, processor=default_process),
        )
        if score >= min_score:
            scored.append((score, v))

    # sort is stable, so equal scores keep library order
    scored.sort(key=lambda t: t[0], reverse=True)
    return [v for _, v in scored]
