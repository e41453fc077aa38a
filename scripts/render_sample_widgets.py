#!/usr/bin/env python3
"""Generate sample PNG previews for every widget family plus the summary view."""

from __future__ import annotations

import argparse
from datetime import datetime
from pathlib import Path
import sys

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from year_progress.rendering import (
    DisplayEnvironment,
    RendererConfig,
    WidgetFamily,
    YearProgressRenderer,
)
from year_progress.timeline import TimelineProvider


PREVIEWS_DIR = PROJECT_ROOT / "previews"


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=PREVIEWS_DIR,
        help="Where to write the preview files (defaults to previews/).",
    )
    parser.add_argument(
        "--date",
        type=datetime.fromisoformat,
        default=None,
        help="ISO date to render instead of now, e.g. 2024-07-01.",
    )
    parser.add_argument(
        "--environment",
        choices=tuple(env.label for env in DisplayEnvironment),
        default="mobile",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    moment = args.date or datetime.now()
    renderer = YearProgressRenderer(
        RendererConfig(
            environment=DisplayEnvironment.from_label(args.environment),
            preview_output_dir=args.output_dir,
        )
    )

    for show_day_info in (False, True):
        provider = TimelineProvider(show_day_info=show_day_info, now_provider=lambda: moment)
        entry = provider.timeline().entries[0]
        for family in WidgetFamily:
            renderer.render_widget(entry, family)
    renderer.render_summary(moment)

    print(f"Wrote previews to {args.output_dir}")


if __name__ == "__main__":
    main()
