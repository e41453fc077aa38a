"""Command line entry point for the year progress display."""

from __future__ import annotations

import argparse
import functools
import logging
import os
import sys
from dataclasses import dataclass
from datetime import datetime, tzinfo
from pathlib import Path
from typing import Callable, Iterable, Optional, TextIO

from .config import ConfigError, load_env_file, read_bool_env, read_choice_env, resolve_timezone
from .display import (
    DisplayDriver,
    PreviewDisplayDriver,
    WaveshareEPDDriver,
    create_display_driver,
    fit_to_resolution,
)
from .rendering import (
    DisplayEnvironment,
    RendererConfig,
    WidgetFamily,
    YearProgressRenderer,
    format_grid_text,
)
from .scheduler import Scheduler
from .timeline import TimelineEntry, TimelineProvider

LOGGER = logging.getLogger(__name__)

FAMILY_CHOICES = tuple(family.value for family in WidgetFamily)
ENVIRONMENT_CHOICES = tuple(env.label for env in DisplayEnvironment)
VIEW_CHOICES = ("widget", "summary", "text")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Year progress dot grid display")
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Optional path to a .env file loaded before the app starts.",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single refresh immediately and exit.",
    )
    parser.add_argument(
        "--immediate",
        action="store_true",
        help="Perform an immediate refresh before waiting for midnight.",
    )
    parser.add_argument(
        "--snapshot",
        action="store_true",
        help="Render a single preview with the info panel shown and exit.",
    )

    view_group = parser.add_argument_group("View options")
    view_group.add_argument(
        "--view",
        choices=VIEW_CHOICES,
        default="widget",
        help="What to render on each refresh. 'text' prints the grid to stdout.",
    )
    view_group.add_argument(
        "--family",
        choices=FAMILY_CHOICES,
        default=None,
        help="Widget size family (env YEAR_PROGRESS_FAMILY, default large).",
    )
    view_group.add_argument(
        "--show-day-info",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Show the day info panel (env YEAR_PROGRESS_SHOW_DAY_INFO).",
    )
    view_group.add_argument(
        "--environment",
        choices=ENVIRONMENT_CHOICES,
        default=None,
        help="Layout margins to apply (env YEAR_PROGRESS_ENVIRONMENT, default mobile).",
    )
    view_group.add_argument(
        "--timezone",
        type=str,
        default=None,
        help="IANA timezone used for day boundaries (env YEAR_PROGRESS_TIMEZONE, default local).",
    )
    view_group.add_argument(
        "--scale",
        type=float,
        default=2.0,
        help="Pixels per layout unit when rendering images.",
    )

    display_group = parser.add_argument_group("Display options")
    display_group.add_argument(
        "--display-driver",
        choices=("auto", "waveshare", "preview"),
        default="auto",
        help="Select the display backend. 'auto' picks hardware when available.",
    )
    display_group.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory where the preview driver writes captured frames.",
    )

    return parser


@dataclass
class AppSettings:
    once: bool
    immediate: bool
    snapshot: bool
    view: str
    family: WidgetFamily
    show_day_info: bool
    environment: DisplayEnvironment
    timezone: tzinfo | None
    scale: float
    display_driver: str
    output_dir: Path | None


class AppRuntime:
    """Owns the lifecycle of the renderer, display, and scheduler."""

    def __init__(
        self,
        *,
        settings: AppSettings,
        scheduler_factory: Callable[..., Scheduler] = Scheduler,
        display_factory: Callable[..., DisplayDriver] = create_display_driver,
        now_provider: Callable[[], datetime] | None = None,
        output: TextIO | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.settings = settings
        self.scheduler_factory = scheduler_factory
        self.display_factory = display_factory
        self.now_provider = now_provider or functools.partial(datetime.now, settings.timezone)
        self.output = output or sys.stdout
        self.logger = logger or LOGGER

        self.provider = TimelineProvider(
            show_day_info=settings.show_day_info,
            now_provider=self.now_provider,
        )
        self._display: DisplayDriver | None = None
        self._renderer: YearProgressRenderer | None = None
        self._scheduler: Scheduler | None = None
        self._started = False

    @property
    def renders_text(self) -> bool:
        return self.settings.view == "text"

    def start(self) -> None:
        """Instantiate dependencies and prepare the refresh loop."""

        if self._started:
            return

        try:
            self._renderer = YearProgressRenderer(
                RendererConfig(environment=self.settings.environment, scale=self.settings.scale)
            )
            if not self.renders_text:
                self._display = self._create_display_driver()
                self._display.initialize()
            self._scheduler = self.scheduler_factory(self.refresh_once, time_provider=self.now_provider)
            self._started = True
        except Exception:
            self.close()
            raise

    def run(self, *, immediate: bool = False, iterations: Optional[int] = None) -> None:
        if not self._scheduler:
            raise RuntimeError("Scheduler has not been started")
        if not immediate:
            # Populates the display until the first scheduled refresh.
            self.show_entry(self.provider.placeholder())
        self._scheduler.run(immediate=immediate, iterations=iterations)

    def refresh_once(self) -> None:
        timeline = self.provider.timeline()
        for entry in timeline.entries:
            self.show_entry(entry)
        if timeline.refresh_after is not None:
            self.logger.info("Next refresh after %s", timeline.refresh_after.isoformat())

    def show_snapshot(self) -> None:
        self.show_entry(self.provider.snapshot())

    def show_entry(self, entry: TimelineEntry) -> None:
        if not self._renderer:
            raise RuntimeError("Runtime has not been fully started")

        info = entry.info
        self.logger.info(
            "Rendering day %d of %d (%d left) at %s",
            info.day_of_year,
            info.days_in_year,
            info.days_remaining,
            entry.date.isoformat(),
        )

        if self.renders_text:
            geometry = self._renderer.geometry(entry, self.settings.family)
            self.output.write(format_grid_text(geometry.rows, info.day_of_year) + "\n")
            return

        if not self._display:
            raise RuntimeError("Runtime has not been fully started")

        self._display.initialize()
        try:
            if self.settings.view == "summary":
                image = self._renderer.render_summary(entry.date)
            else:
                image = self._renderer.render_widget(entry, self.settings.family)
        except Exception:
            self.logger.exception("Failed to render year progress image")
            self._sleep_display_safely()
            return

        try:
            self._display.display_image(fit_to_resolution(image, self._display.resolution))
        except Exception:
            self.logger.exception("Failed to push frame to display")
        finally:
            self._sleep_display_safely()

    def close(self) -> None:
        if self._display:
            try:
                self._display.sleep()
            except Exception:
                self.logger.exception("Error while putting display to sleep")
            finally:
                self._display = None

        self._renderer = None
        self._scheduler = None
        self._started = False

    def _sleep_display_safely(self) -> None:
        if not self._display:
            return
        try:
            self._display.sleep()
        except Exception:
            self.logger.exception("Failed to put display into sleep mode")

    # Internal helpers -------------------------------------------------
    def _create_display_driver(self) -> DisplayDriver:
        mode = self.settings.display_driver
        if mode == "waveshare":
            if not WaveshareEPDDriver.is_supported():
                raise RuntimeError("waveshare driver not available in this environment")
            return WaveshareEPDDriver(logger=self.logger)
        if mode == "preview":
            return PreviewDisplayDriver(output_dir=self.settings.output_dir, logger=self.logger)
        return self.display_factory(
            prefer_preview=False,
            output_dir=self.settings.output_dir,
            logger=self.logger,
        )


def resolve_settings(args: argparse.Namespace) -> AppSettings:
    load_env_file(args.env_file)

    family = args.family or read_choice_env("YEAR_PROGRESS_FAMILY", FAMILY_CHOICES, "large")
    environment = args.environment or read_choice_env(
        "YEAR_PROGRESS_ENVIRONMENT", ENVIRONMENT_CHOICES, "mobile"
    )
    show_day_info = args.show_day_info
    if show_day_info is None:
        show_day_info = read_bool_env("YEAR_PROGRESS_SHOW_DAY_INFO", False)
    timezone_name = args.timezone or os.environ.get("YEAR_PROGRESS_TIMEZONE")

    if args.scale <= 0:
        raise ConfigError(f"--scale must be positive, got {args.scale}")

    return AppSettings(
        once=args.once,
        immediate=args.immediate,
        snapshot=args.snapshot,
        view=args.view,
        family=WidgetFamily(family),
        show_day_info=show_day_info,
        environment=DisplayEnvironment.from_label(environment),
        timezone=resolve_timezone(timezone_name),
        scale=args.scale,
        display_driver=args.display_driver,
        output_dir=args.output_dir,
    )


def main(
    argv: Optional[Iterable[str]] = None,
    *,
    scheduler_factory: Callable[..., Scheduler] = Scheduler,
    display_factory: Callable[..., DisplayDriver] = create_display_driver,
    now_provider: Callable[[], datetime] | None = None,
    output: TextIO | None = None,
) -> None:
    logging.basicConfig(level=logging.INFO)
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if sum((args.once, args.immediate, args.snapshot)) > 1:
        parser.error("--once, --immediate and --snapshot are mutually exclusive")

    try:
        settings = resolve_settings(args)
    except ConfigError as exc:
        parser.error(str(exc))

    runtime = AppRuntime(
        settings=settings,
        scheduler_factory=scheduler_factory,
        display_factory=display_factory,
        now_provider=now_provider,
        output=output,
    )

    try:
        runtime.start()
        if settings.snapshot:
            runtime.show_snapshot()
        elif settings.once:
            runtime.run(immediate=True, iterations=1)
        else:
            runtime.run(immediate=settings.immediate)
    except KeyboardInterrupt:
        LOGGER.info("Interrupted, shutting down")
    finally:
        runtime.close()


if __name__ == "__main__":
    main()
