from __future__ import annotations

import io
from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo

import pytest
from PIL import Image

from year_progress import app
from year_progress.display import PreviewDisplayDriver
from year_progress.rendering import DisplayEnvironment, WidgetFamily
from year_progress.scheduler import Scheduler

NOW = datetime(2024, 7, 1, 9, 0)


class FakeScheduler:
    def __init__(
        self,
        callback: Callable[[], None],
        runs: list[dict[str, Any]],
        time_provider: Callable[[], datetime] | None = None,
    ):
        self.callback = callback
        self.runs = runs
        self.time_provider = time_provider

    def run(self, *, immediate: bool = False, iterations=None):
        self.runs.append({"immediate": immediate, "iterations": iterations})
        if immediate:
            self.callback()


class FailingDisplay(PreviewDisplayDriver):
    def display_image(self, image: Image.Image) -> None:
        raise OSError("panel unplugged")


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    for name in (
        "YEAR_PROGRESS_FAMILY",
        "YEAR_PROGRESS_SHOW_DAY_INFO",
        "YEAR_PROGRESS_ENVIRONMENT",
        "YEAR_PROGRESS_TIMEZONE",
    ):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def _run(argv: list[str], display: PreviewDisplayDriver, runs: list[dict[str, Any]], **kwargs: Any) -> None:
    app.main(
        argv,
        scheduler_factory=lambda callback, **options: FakeScheduler(callback, runs, **options),
        display_factory=lambda **_: display,
        now_provider=lambda: NOW,
        **kwargs,
    )


def test_once_flag_triggers_single_refresh() -> None:
    runs: list[dict[str, Any]] = []
    display = PreviewDisplayDriver()

    _run(["--once", "--show-day-info"], display, runs)

    assert runs == [{"immediate": True, "iterations": 1}]
    history = display.history
    assert len(history) == 1
    assert history[0].size == (800, 480)


def test_immediate_flag_runs_before_loop() -> None:
    runs: list[dict[str, Any]] = []
    display = PreviewDisplayDriver()

    _run(["--immediate", "--family", "medium"], display, runs)

    assert runs == [{"immediate": True, "iterations": None}]
    assert len(display.history) == 1


def test_snapshot_renders_without_scheduling() -> None:
    runs: list[dict[str, Any]] = []
    display = PreviewDisplayDriver()

    _run(["--snapshot", "--view", "summary"], display, runs)

    assert runs == []
    assert len(display.history) == 1


def test_text_view_prints_grid() -> None:
    runs: list[dict[str, Any]] = []
    output = io.StringIO()

    _run(["--once", "--view", "text", "--no-show-day-info"], PreviewDisplayDriver(), runs, output=output)

    lines = output.getvalue().splitlines()
    assert len(lines) == 19  # 366 days in rows of 20
    assert output.getvalue().count("●") == 183


def test_display_failure_is_logged_and_display_sleeps(caplog: pytest.LogCaptureFixture) -> None:
    runs: list[dict[str, Any]] = []
    display = FailingDisplay()

    _run(["--once"], display, runs)

    assert "Failed to push frame to display" in caplog.text
    assert runs == [{"immediate": True, "iterations": 1}]


@pytest.mark.parametrize("argv", [["--once", "--immediate"], ["--snapshot", "--once"]])
def test_exclusive_flags_are_rejected(argv: list[str]) -> None:
    with pytest.raises(SystemExit):
        app.main(argv)


def test_settings_fall_back_to_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("YEAR_PROGRESS_SHOW_DAY_INFO", "yes")
    monkeypatch.setenv("YEAR_PROGRESS_FAMILY", "medium")
    monkeypatch.setenv("YEAR_PROGRESS_ENVIRONMENT", "desktop")

    settings = app.resolve_settings(app.build_parser().parse_args([]))

    assert settings.show_day_info is True
    assert settings.family is WidgetFamily.MEDIUM
    assert settings.environment is DisplayEnvironment.DESKTOP
    assert settings.timezone is None


def test_cli_flags_override_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("YEAR_PROGRESS_SHOW_DAY_INFO", "yes")
    monkeypatch.setenv("YEAR_PROGRESS_FAMILY", "medium")

    args = app.build_parser().parse_args(["--no-show-day-info", "--family", "large"])
    settings = app.resolve_settings(args)

    assert settings.show_day_info is False
    assert settings.family is WidgetFamily.LARGE


def test_env_file_is_loaded(tmp_path: Path) -> None:
    env_file = tmp_path / "custom.env"
    env_file.write_text("YEAR_PROGRESS_ENVIRONMENT=desktop\nYEAR_PROGRESS_TIMEZONE=UTC\n", encoding="utf-8")

    settings = app.resolve_settings(app.build_parser().parse_args(["--env-file", str(env_file)]))

    assert settings.environment is DisplayEnvironment.DESKTOP
    assert settings.timezone is not None


def test_invalid_environment_value_exits(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("YEAR_PROGRESS_SHOW_DAY_INFO", "maybe")

    with pytest.raises(SystemExit):
        app.main(["--once"])


def test_scheduler_uses_configured_timezone() -> None:
    tokyo = ZoneInfo("Asia/Tokyo")
    args = app.build_parser().parse_args(["--timezone", "Asia/Tokyo", "--view", "text"])
    settings = app.resolve_settings(args)
    created: list[FakeScheduler] = []

    def scheduler_factory(callback: Callable[[], None], **kwargs: Any) -> FakeScheduler:
        created.append(FakeScheduler(callback, [], **kwargs))
        return created[-1]

    runtime = app.AppRuntime(settings=settings, scheduler_factory=scheduler_factory, output=io.StringIO())
    runtime.start()

    assert created[0].time_provider is runtime.now_provider
    assert created[0].time_provider().tzinfo is tokyo


def test_scheduler_waits_for_midnight_in_configured_timezone() -> None:
    tokyo = ZoneInfo("Asia/Tokyo")
    clock = {"now": datetime(2024, 7, 1, 23, 0, tzinfo=tokyo)}
    sleeps: list[float] = []

    def sleep(seconds: float) -> None:
        sleeps.append(seconds)
        clock["now"] += timedelta(seconds=seconds)

    settings = app.resolve_settings(app.build_parser().parse_args(["--view", "text"]))
    runtime = app.AppRuntime(
        settings=settings,
        scheduler_factory=lambda callback, **options: Scheduler(
            callback, sleep_func=sleep, max_sleep=None, **options
        ),
        now_provider=lambda: clock["now"],
        output=io.StringIO(),
    )
    runtime.start()
    runtime.run(immediate=False, iterations=1)

    assert sleeps == [3600]
    assert clock["now"] == datetime(2024, 7, 2, tzinfo=tokyo)


def test_loop_without_immediate_shows_placeholder_first() -> None:
    runs: list[dict[str, Any]] = []
    output = io.StringIO()

    _run(["--view", "text", "--show-day-info", "--family", "medium"], PreviewDisplayDriver(), runs, output=output)

    assert runs == [{"immediate": False, "iterations": None}]
    # Placeholder uses the default configuration: medium grid without info, 30 columns.
    assert len(output.getvalue().splitlines()) == 13
