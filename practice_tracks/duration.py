from __future__ import annotations

import logging
import re
import time
from typing import Optional

import httpx

from .errors import DurationUnavailableError, InvalidReferenceError
from .oembed import HEADERS
from .youtube import extract_youtube_id, watch_url_from_id


log = logging.getLogger(__name__)

# The watch page embeds the player response, which carries the length as a string.
_LENGTH_RE = re.compile(r'"lengthSeconds"\s*:\s*"?(\d+)"?')
_DURATION_META_RE = re.compile(r'itemprop="duration"\s+content="PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?"')


def parse_duration_seconds(html: str) -> int:
    """Best-effort duration from a watch page; 0 when none is reported."""
    m = _LENGTH_RE.search(html)
    if m:
        return int(m.group(1))

    m = _DURATION_META_RE.search(html)
    if m:
        h, mi, s = (int(g) if g else 0 for g in m.groups())
        return h * 3600 + mi * 60 + s

    return 0


def resolve_duration_seconds(
    reference: str,
    client: Optional[httpx.Client] = None,
    timeout_s: float = 5.0,
    poll_interval_s: float = 0.2,
) -> int:
    """Ask YouTube how long a video is, retrying until ``timeout_s`` runs out.

    Live streams and premieres report 0 until they have a length; those (and
    transient HTTP failures) end in :class:`DurationUnavailableError`.
    """
    video_id = extract_youtube_id(reference)
    if not video_id:
        raise InvalidReferenceError(reference)

    url = watch_url_from_id(video_id)
    own_client = client is None
    if own_client:
        client = httpx.Client(follow_redirects=True, timeout=max(timeout_s, 1.0), headers=HEADERS)

    deadline = time.monotonic() + timeout_s
    last_error: Optional[str] = None
    try:
        while True:
            try:
                r = client.get(url)
                r.raise_for_status()
                seconds = parse_duration_seconds(r.text)
                if seconds > 0:
                    return seconds
                last_error = "no positive duration reported"
            except httpx.HTTPError as e:
                last_error = str(e) or type(e).__name__
                log.debug("duration lookup for %s failed: %s", video_id, last_error)

            if time.monotonic() + poll_interval_s > deadline:
                break
            time.sleep(poll_interval_s)
    finally:
        if own_client:
            client.close()

    raise DurationUnavailableError(f"could not get duration for {video_id}: {last_error}")
