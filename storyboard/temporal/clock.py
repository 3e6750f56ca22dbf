"""
Calendar Clock
==============

Injectable source of "today" for the inverse layout fallback.

GUARANTEES:
- Core functions never read system time implicitly; they ask a clock
- A fixed clock makes inverse queries byte-identical across runs
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import List, Optional

from ..contracts.base import AbstractDate


class ClockExhausted(Exception):
    """Raised when a scripted clock runs out of dates."""
    pass


@dataclass
class CalendarClock:
    """
    Injectable clock answering "what is today's real calendar date".

    MODES:
    ======
    1. LIVE mode: reads the system date (UTC); only the number of reads
       is kept
    2. FIXED mode: replays a scripted sequence; the last date repeats
       unless `strict` is set
    """
    _dates: List[date] = field(default_factory=list)
    _current_index: int = 0
    _reads: int = 0
    _is_live: bool = True
    _strict: bool = False

    def today(self) -> date:
        self._reads += 1
        if self._is_live:
            return datetime.now(timezone.utc).date()

        if self._current_index >= len(self._dates):
            if self._strict or not self._dates:
                raise ClockExhausted(
                    f"Clock exhausted at index {self._current_index}. "
                    f"Scripted {len(self._dates)} dates."
                )
            return self._dates[-1]
        current = self._dates[self._current_index]
        self._current_index += 1
        return current

    def today_as_abstract(self) -> AbstractDate:
        """Today as a 3-segment [year, month, day] AbstractDate."""
        current = self.today()
        return (current.year, current.month, current.day)

    def read_count(self) -> int:
        return self._reads

    @classmethod
    def live(cls) -> 'CalendarClock':
        """Clock backed by the system date."""
        return cls(_is_live=True)

    @classmethod
    def fixed(cls, *dates: date, strict: bool = False) -> 'CalendarClock':
        """Clock that replays the given dates in order."""
        return cls(_dates=list(dates), _is_live=False, _strict=strict)

    def __repr__(self) -> str:
        mode = "LIVE" if self._is_live else "FIXED"
        return f"CalendarClock(mode={mode}, reads={self._reads})"


def resolve_clock(clock: Optional[CalendarClock]) -> CalendarClock:
    return clock if clock is not None else CalendarClock.live()
