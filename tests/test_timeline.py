from __future__ import annotations

from datetime import datetime

from year_progress.timeline import TimelineEntry, TimelineProvider

NOW = datetime(2024, 7, 1, 9, 15)


def test_placeholder_uses_default_configuration() -> None:
    provider = TimelineProvider(show_day_info=True, now_provider=lambda: NOW)

    assert provider.placeholder() == TimelineEntry(date=NOW, show_day_info=False)


def test_snapshot_always_shows_day_info() -> None:
    provider = TimelineProvider(show_day_info=False, now_provider=lambda: NOW)

    assert provider.snapshot().show_day_info is True


def test_timeline_refreshes_after_next_midnight() -> None:
    provider = TimelineProvider(show_day_info=True, now_provider=lambda: NOW)

    timeline = provider.timeline()

    assert timeline.entries == [TimelineEntry(date=NOW, show_day_info=True)]
    assert timeline.refresh_after == datetime(2024, 7, 2)


def test_entry_exposes_day_info() -> None:
    info = TimelineEntry(date=NOW).info

    assert info.day_of_year == 183
    assert info.days_remaining == 183
