"""
Temporal Layer

AbstractDate comparison and ordinal encoding, the injectable calendar
clock, and the default date codec collaborator.
"""

from .abstract_date import (
    ORDINAL_WEIGHTS,
    compare,
    to_ordinal,
    timeline_extent,
    sort_chronologically,
    nudge,
    segment_at,
    date_interval_label,
    format_plain,
)
from .clock import CalendarClock, ClockExhausted
from .codec import RegexDateCodec, format_token

__all__ = [
    "ORDINAL_WEIGHTS",
    "compare",
    "to_ordinal",
    "timeline_extent",
    "sort_chronologically",
    "nudge",
    "segment_at",
    "date_interval_label",
    "format_plain",
    "CalendarClock",
    "ClockExhausted",
    "RegexDateCodec",
    "format_token",
]
