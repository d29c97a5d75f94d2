from __future__ import annotations

import logging
from typing import Optional

import httpx

from .errors import InvalidReferenceError, MetadataUnavailableError
from .youtube import extract_youtube_id, watch_url_from_id


log = logging.getLogger(__name__)

_OEMBED_URL = "https://www.youtube.com/oembed"

HEADERS = {
    "User-Agent": "Mozilla/5.0 (X11; Linux x86_64) Practice-Tracks/0.1",
    "Accept": "application/json,text/plain,*/*",
}


def fetch_youtube_title(
    reference: str,
    client: Optional[httpx.Client] = None,
    timeout_s: float = 10.0,
) -> str:
    """Look up a video's display title through YouTube's oEmbed endpoint.

    Pass ``client`` to reuse a connection pool (or a mock transport in tests).
    """
    video_id = extract_youtube_id(reference)
    if not video_id:
        raise InvalidReferenceError(reference)

    params = {"url": watch_url_from_id(video_id), "format": "json"}

    try:
        if client is None:
            with httpx.Client(follow_redirects=True, timeout=timeout_s, headers=HEADERS) as c:
                r = c.get(_OEMBED_URL, params=params)
        else:
            r = client.get(_OEMBED_URL, params=params)
    except httpx.HTTPError as e:
        raise MetadataUnavailableError(f"oEmbed request for {video_id} failed: {e}") from e

    if not r.is_success:
        # 401/404 for private or removed videos.
        raise MetadataUnavailableError(f"oEmbed returned {r.status_code} for {video_id}")

    try:
        data = r.json()
    except ValueError as e:
        raise MetadataUnavailableError(f"oEmbed returned invalid JSON for {video_id}") from e

    title = str(data.get("title") or "") if isinstance(data, dict) else ""
    log.debug("oEmbed title for %s: %r", video_id, title)
    return title
