from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Optional

from .models import LEVEL_MAX


def block_count(duration_sec: float, block_size_sec: float) -> int:
    """Number of blocks needed to cover ``duration_sec`` (last one may be short)."""
    return math.ceil(duration_sec / block_size_sec)


def resample_levels_max(
    old_levels: Sequence[Optional[int]],
    old_block_sec: float,
    new_block_sec: float,
    total_duration_sec: Optional[float] = None,
    ceiling: int = LEVEL_MAX,
) -> list[int]:
    """Re-express a level sequence on a different block grid.

    Each output block takes the highest level of every old block whose time
    range overlaps it, so coarsening never dilutes a high mark and refining
    copies the coarse value into each sub-block.

    ``total_duration_sec`` (when positive) sets the span of the output; without
    it the old sequence is assumed to cover exactly
    ``len(old_levels) * old_block_sec``. Old indices past the end of
    ``old_levels`` count as 0.

    Degenerate input (no levels, non-positive block size) gives ``[]``.
    """
    if not old_levels or old_block_sec <= 0 or new_block_sec <= 0:
        return []

    if total_duration_sec and total_duration_sec > 0:
        duration = total_duration_sec
    else:
        duration = len(old_levels) * old_block_sec

    # Nothing can beat the larger of the ceiling and the highest stored level.
    stop_at = max(ceiling, max(level or 0 for level in old_levels))

    new_len = max(1, block_count(duration, new_block_sec))
    out = [0] * new_len

    for j in range(new_len):
        start = j * new_block_sec
        end = min(duration, start + new_block_sec)

        # Old blocks overlapping [start, end). ceil(end / old) - 1 drops a block
        # that begins exactly at `end`.
        i_start = math.floor(start / old_block_sec)
        i_end = min(math.ceil(end / old_block_sec) - 1, len(old_levels) - 1)

        best = 0
        for i in range(i_start, i_end + 1):
            level = old_levels[i] or 0
            if level > best:
                best = level
                if best >= stop_at:
                    break
        out[j] = best

    return out
