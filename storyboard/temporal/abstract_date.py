"""
AbstractDate Model
==================

Comparator and approximate ordinal encoding for integer-segment dates.

ORDERING OF RECORD:
===================
`compare` is the authoritative ordering. `to_ordinal` is a weighted
flattening used ONLY for spatial scaling on the X axis.

KNOWN APPROXIMATION:
====================
The ordinal weights assume a calendar scale (30 days per month, 365 per
year). Segments whose magnitudes exceed that scale (a "day" of 45) can
produce ordinals that disagree with `compare`. This is accepted; callers
that need ordering use `compare`.
"""

from __future__ import annotations
from functools import cmp_to_key
from typing import Iterable, List, Optional, Sequence

from ..contracts.base import AbstractDate, Scene, TimelineExtent


# Weights from the least significant segment upward: day, month, year, age, epoch
ORDINAL_WEIGHTS = (1, 30, 365, 365_000, 365_000_000)


def compare(a: Sequence[int], b: Sequence[int]) -> int:
    """
    Compare two AbstractDates lexicographically.

    Missing trailing segments are treated as 0, so [2024] == [2024, 0, 0].
    Returns negative if a < b, positive if a > b, 0 if equal.
    """
    length = max(len(a), len(b))
    for i in range(length):
        av = a[i] if i < len(a) else 0
        bv = b[i] if i < len(b) else 0
        if av != bv:
            return -1 if av < bv else 1
    return 0


def segment_weight(position_from_end: int) -> int:
    """Weight of the segment `position_from_end` places above the least significant one."""
    if position_from_end < len(ORDINAL_WEIGHTS):
        return ORDINAL_WEIGHTS[position_from_end]
    return 10 ** (position_from_end + 2)


def to_ordinal(date: Sequence[int]) -> int:
    """Flatten an AbstractDate into a single number for X-axis scaling."""
    n = len(date)
    return sum(
        segment * segment_weight(n - 1 - i)
        for i, segment in enumerate(date)
    )


def timeline_extent(scenes: Iterable[Scene]) -> Optional[TimelineExtent]:
    """
    Earliest start and latest end across all scenes.

    Max uses `end_date` when present. Returns None for an empty set.
    """
    scenes = list(scenes)
    if not scenes:
        return None

    lo = scenes[0].date
    hi = scenes[0].end_date or scenes[0].date
    for scene in scenes:
        if compare(scene.date, lo) < 0:
            lo = scene.date
        end = scene.end_date or scene.date
        if compare(end, hi) > 0:
            hi = end

    return TimelineExtent(min=lo, max=hi)


def sort_chronologically(scenes: Iterable[Scene]) -> List[Scene]:
    """Stable sort by `compare(date)`; ties keep their input order."""
    return sorted(scenes, key=cmp_to_key(lambda a, b: compare(a.date, b.date)))


def nudge(date: Sequence[int], delta: int, floor: Optional[int] = None) -> AbstractDate:
    """
    Copy `date` with its least significant segment shifted by `delta`.

    With `floor`, the shifted segment never drops below it.
    An empty date is returned unchanged.
    """
    if not date:
        return tuple(date)
    segments = list(date)
    value = segments[-1] + delta
    if floor is not None and value < floor:
        value = floor
    segments[-1] = value
    return tuple(segments)


def segment_at(date: Sequence[int], index: int) -> int:
    """Segment value with the comparator's missing-means-zero rule."""
    if 0 <= index < len(date):
        return date[index]
    return 0


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'s' if count > 1 else ''}"


def date_interval_label(a: Sequence[int], b: Sequence[int]) -> str:
    """
    Human-readable interval between two [year, month, day] dates.

    Display-only: borrows 30 days per month and 12 months per year.
    Dates with fewer than three segments are labelled "Later".
    """
    if len(a) < 3 or len(b) < 3:
        return "Later"
    if compare(b, a) < 0:
        return "Earlier"

    diff_y = b[0] - a[0]
    diff_m = b[1] - a[1]
    diff_d = b[2] - a[2]

    if diff_d < 0:
        diff_m -= 1
        diff_d += 30
    if diff_m < 0:
        diff_y -= 1
        diff_m += 12

    if diff_y == 0 and diff_m == 0 and diff_d == 0:
        return "Same time"

    parts = []
    if diff_y > 0:
        parts.append(_plural(diff_y, "year"))
    if diff_m > 0:
        parts.append(_plural(diff_m, "month"))
    if diff_d > 0:
        parts.append(_plural(diff_d, "day"))

    return ", ".join(parts) + " later"


def format_plain(date: Sequence[int]) -> str:
    """Codec-free rendering used when no DateCodec is supplied."""
    return "-".join(str(segment) for segment in date)
