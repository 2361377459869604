"""Work out which week of the season is current."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, tzinfo

from fbpool.dates import day_start
from fbpool.models.games import Season, Week

logger = logging.getLogger(__name__)

# Shifting a schedule-zone midnight forward keeps it on the same calendar
# day for every US zone west of it.
_DAY_ALIGN_SHIFT = timedelta(hours=6)


class SeasonConfigError(RuntimeError):
    """Raised when no week can be chosen as current (bad or empty schedule)."""


class SeasonClock:
    def __init__(self, season: Season, tz: tzinfo) -> None:
        self._season = season
        self._tz = tz
        self.week_index: int | None = None
        self.season_ended = False

    @property
    def current_week(self) -> Week:
        if self.week_index is None:
            raise SeasonConfigError("Current week has not been computed")
        return self._season.weeks[self.week_index]

    def recompute(self, now: datetime) -> int:
        """Update and return the current week index for wall time ``now``.

        A week is current from its first game day until a day after its last
        one. Between weeks, the next week to start is current. After the last
        week the season has ended and the index stays on the last week.
        """
        weeks = self._season.weeks
        index: int | None = None
        for i, week in enumerate(weeks):
            if not week.has_bounds:
                continue
            if week.start <= now <= week.extended_end:
                logger.debug("In week %d (%s - %s)", week.num, week.start, week.extended_end)
                index = i
                break
            if now < week.start:
                logger.debug("Before week %d (starts %s)", week.num, week.start)
                index = i
                break

        ended = False
        last = weeks[-1] if weeks else None
        if last is not None and last.has_bounds and now > last.extended_end:
            index = len(weeks) - 1
            ended = True

        if index is None:
            raise SeasonConfigError(f"Could not place {now.isoformat()} in any week of the season")

        if index != self.week_index or ended != self.season_ended:
            logger.info("Current week index %d (week %d), season ended: %s", index, weeks[index].num, ended)
        self.week_index = index
        self.season_ended = ended
        return index

    def precedes_current_week(self, day: date) -> bool:
        """True if ``day`` falls on a calendar day before the current week starts."""
        start = self.current_week.start
        if start is None:
            return False
        start = start.astimezone(self._tz)
        t = day_start(day, self._tz) + _DAY_ALIGN_SHIFT

        if t.year != start.year:
            return t.year < start.year
        return t.timetuple().tm_yday < start.timetuple().tm_yday
