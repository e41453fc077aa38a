"""Timeline entries describing what the widget shows and when it next refreshes."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, List

from .scheduler import next_local_midnight
from .yearinfo import DayYearInfo

__all__ = ["Timeline", "TimelineEntry", "TimelineProvider"]


@dataclass(frozen=True)
class TimelineEntry:
    """A single render request: the moment to draw and the info panel flag."""

    date: datetime
    show_day_info: bool = False

    @property
    def info(self) -> DayYearInfo:
        return DayYearInfo.from_date(self.date)


@dataclass(frozen=True)
class Timeline:
    entries: List[TimelineEntry] = field(default_factory=list)
    refresh_after: datetime | None = None


class TimelineProvider:
    """Produce placeholder, snapshot and scheduled entries for the widget."""

    def __init__(
        self,
        *,
        show_day_info: bool = False,
        now_provider: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.show_day_info = show_day_info
        self.now_provider = now_provider

    def placeholder(self) -> TimelineEntry:
        """Entry with the default configuration, used before settings are known."""

        return TimelineEntry(date=self.now_provider())

    def snapshot(self) -> TimelineEntry:
        """Preview entry; always shows the info panel."""

        entry = self._entry(self.now_provider())
        return replace(entry, show_day_info=True)

    def timeline(self) -> Timeline:
        now = self.now_provider()
        return Timeline(entries=[self._entry(now)], refresh_after=next_local_midnight(now))

    def _entry(self, now: datetime) -> TimelineEntry:
        return TimelineEntry(date=now, show_day_info=self.show_day_info)
