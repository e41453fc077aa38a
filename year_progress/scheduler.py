"""Scheduling utilities for refreshing once per day at local midnight."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_SLEEP = 900.0


def next_local_midnight(moment: datetime) -> datetime:
    """Return the start of the calendar day following ``moment``.

    The result keeps ``moment``'s timezone (naive datetimes stay naive). A moment
    that is exactly midnight still maps to the *next* midnight, since the current
    day has already been rendered.
    """

    following = moment.date() + timedelta(days=1)
    return datetime(following.year, following.month, following.day, tzinfo=moment.tzinfo)


def seconds_between(start: datetime, end: datetime) -> float:
    """Return the elapsed seconds from ``start`` to ``end``.

    Aware datetimes are compared in UTC so that a wall clock shift (daylight
    saving) between the two is accounted for.
    """

    if start.tzinfo is not None and end.tzinfo is not None:
        return (end.astimezone(timezone.utc) - start.astimezone(timezone.utc)).total_seconds()
    return (end - start).total_seconds()


@dataclass
class Scheduler:
    """Run a callback every day at local midnight."""

    callback: Callable[[], None]
    time_provider: Callable[[], datetime] = datetime.now
    sleep_func: Callable[[float], None] = time.sleep
    max_sleep: Optional[float] = DEFAULT_MAX_SLEEP

    def run(
        self,
        *,
        immediate: bool = False,
        iterations: Optional[int] = None,
    ) -> None:
        """Run the scheduler loop.

        Args:
            immediate: If ``True`` the callback is triggered immediately before
                waiting for the next midnight.
            iterations: Optional number of iterations to execute. ``None`` runs
                indefinitely.
        """

        remaining = iterations

        if immediate:
            LOGGER.debug("Executing immediate refresh before waiting for midnight")
            self.callback()
            if remaining is not None:
                remaining -= 1
                if remaining <= 0:
                    return

        while remaining is None or remaining > 0:
            target = self.wait_until_next_midnight()
            LOGGER.debug("Reached scheduled refresh time at %s", target.isoformat())
            self.callback()
            if remaining is not None:
                remaining -= 1

    def wait_until_next_midnight(self) -> datetime:
        """Block until the next local midnight and return it.

        Sleeps are split into chunks of at most ``max_sleep`` seconds so that a
        suspended host or a clock adjustment does not delay the refresh by a day.
        """

        target = next_local_midnight(self.time_provider())
        while True:
            remaining = seconds_between(self.time_provider(), target)
            if remaining <= 0:
                return target
            if self.max_sleep is not None:
                remaining = min(remaining, self.max_sleep)
            LOGGER.debug(
                "Sleeping %.3f seconds towards next refresh at %s",
                remaining,
                target.isoformat(),
            )
            self.sleep_func(remaining)
