"""Background loop that keeps the current week's games and scores fresh.

Each pass:
  1. Fetch the current week's page (retrying every minute until it arrives)
  2. Overwrite stored games with the polled ones, matched by team
  3. Rescore every member for the current week
  4. Sleep until the next interesting moment, then re-place the season clock
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, time, timedelta, timezone, tzinfo
from typing import Callable, Iterable

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_when_event_set,
    wait_fixed,
)

from fbpool.config import Settings, get_settings
from fbpool.ingestion.scanner import TokenScanner
from fbpool.ingestion.schedule import ScheduleExtractor
from fbpool.ingestion.source import FETCH_ERRORS, read_week_page
from fbpool.models.games import Game, GameStatus, Week
from fbpool.models.pool import User
from fbpool.scoring import update_week_scores
from fbpool.season import SeasonConfigError
from fbpool.state import PoolState
from fbpool.teams import UnknownTeamError

logger = logging.getLogger(__name__)

DEFAULT_WAKE_HOUR = 8
AFTER_KICKOFF_DELAY = timedelta(hours=3)
STARTED_RECHECK_DELAY = timedelta(minutes=15)
IN_PROGRESS_RECHECK_DELAY = timedelta(minutes=30)


def next_wake_time(games: Iterable[Game], now: datetime, tz: tzinfo) -> datetime:
    """When to poll next.

    Defaults to 08:00 tomorrow in ``tz``. A game still to start today moves
    that to three hours after its kickoff, or to 15 minutes from now if the
    kickoff has passed but the page still lists it as upcoming. Any game in
    progress means 30 minutes from now, whatever else is scheduled.
    """
    games = list(games)
    local_now = now.astimezone(tz)
    tomorrow = local_now.date() + timedelta(days=1)
    wake = datetime.combine(tomorrow, time(DEFAULT_WAKE_HOUR), tzinfo=tz)

    today_kickoffs = sorted(
        g.kickoff
        for g in games
        if g.status is GameStatus.FUTURE
        and g.kickoff is not None
        and g.kickoff.astimezone(tz).date() == local_now.date()
    )
    if today_kickoffs:
        first = today_kickoffs[0]
        if first <= now:
            wake = now + STARTED_RECHECK_DELAY
        else:
            wake = min(wake, first + AFTER_KICKOFF_DELAY)

    if any(g.status is GameStatus.IN_PROGRESS for g in games):
        logger.info("Games are in progress")
        wake = now + IN_PROGRESS_RECHECK_DELAY

    return wake


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PollScheduler:
    def __init__(
        self,
        state: PoolState,
        *,
        from_web: bool,
        season_year: int,
        wake_tz: tzinfo,
        retry_delay_s: float = 60.0,
        fetch_page: Callable[[int, bool], bytes] = read_week_page,
        on_page: Callable[[int, bytes], None] | None = None,
        on_games_updated: Callable[[Week], None] | None = None,
        on_scores_changed: Callable[[User, int], None] | None = None,
        now: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._state = state
        self._from_web = from_web
        self._season_year = season_year
        self._wake_tz = wake_tz
        self._retry_delay_s = retry_delay_s
        self._fetch_page = fetch_page
        self._on_page = on_page
        self._on_games_updated = on_games_updated
        self._on_scores_changed = on_scores_changed
        self._now = now
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @classmethod
    def from_settings(cls, state: PoolState, settings: Settings | None = None, **kwargs) -> PollScheduler:
        s = settings or get_settings()
        return cls(
            state,
            from_web=s.update_from_web,
            season_year=s.season_year,
            wake_tz=s.wake_tz,
            retry_delay_s=s.fetch_retry_delay_s,
            **kwargs,
        )

    # ------------------------------------------------------------------ #
    # One pass
    # ------------------------------------------------------------------ #
    def fetch(self, week_num: int) -> bytes:
        """Fetch a page, retrying on a fixed delay until it arrives or we stop."""
        retrying = Retrying(
            stop=stop_when_event_set(self._stop),
            wait=wait_fixed(self._retry_delay_s),
            retry=retry_if_exception_type(FETCH_ERRORS),
            sleep=self._stop.wait,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return retrying(self._fetch_page, week_num, self._from_web)

    def apply_page(self, week_index: int, page: bytes) -> int:
        """Overwrite the week's games with those on ``page``. Returns the number updated.

        Games are matched by team and never appended. Scanning stops at the
        first game dated before the current week (the page has not rolled
        over yet) or at the first unreadable row; games already applied stay.
        """
        state = self._state
        week = state.week(week_index)
        extractor = ScheduleExtractor(TokenScanner(page), self._season_year, state.tz)
        updated = 0

        with state.season_lock:
            try:
                for game in extractor:
                    if state.clock.precedes_current_week(game.day):
                        logger.info("Week mismatch: %s is before week %d, page not updated yet", game.day, week.num)
                        break
                    if week.replace(game):
                        updated += 1
                    else:
                        logger.warning("No game for %s at %s in week %d, skipping", game.visitor, game.home, week.num)
            except UnknownTeamError as e:
                logger.error("Week %d page: %s; keeping previous data", week.num, e)

        if extractor.failed:
            logger.warning("Week %d page incomplete, %d games updated", week.num, updated)
        return updated

    def poll_once(self) -> datetime:
        """Run one fetch/update/score pass and return the next wake time."""
        state = self._state
        if state.clock.week_index is None:
            state.clock.recompute(self._now())
        week_index = state.clock.week_index
        week = state.week(week_index)
        logger.info("Updating games for week %d", week.num)

        page = self.fetch(week.num)
        if self._on_page is not None:
            self._on_page(week.num, page)

        updated = self.apply_page(week_index, page)
        with state.season_lock:
            polled = week.snapshot()
        if updated and self._on_games_updated is not None:
            self._on_games_updated(polled)

        update_week_scores(state, week_index, self._on_scores_changed)

        now = self._now()
        wake = next_wake_time(polled.games, now, self._wake_tz)
        logger.info("Next update %s (sleep %s)", wake.isoformat(), wake - now)
        return wake

    # ------------------------------------------------------------------ #
    # Loop
    # ------------------------------------------------------------------ #
    def run(self) -> None:
        """Poll until ``stop()`` is called."""
        logger.info("Poll loop started")
        while not self._stop.is_set():
            try:
                wake = self.poll_once()
            except FETCH_ERRORS as e:
                if self._stop.is_set():
                    break
                logger.error("Fetch failed: %s", e, exc_info=True)
                wake = self._now() + timedelta(seconds=self._retry_delay_s)
            except Exception as e:
                logger.error("Poll pass failed: %s", e, exc_info=True)
                wake = self._now() + timedelta(seconds=self._retry_delay_s)

            delay = (wake - self._now()).total_seconds()
            if self._stop.wait(max(0.0, delay)):
                break

            try:
                self._state.clock.recompute(self._now())
            except SeasonConfigError as e:
                logger.error("Could not place the current week: %s", e)
        logger.info("Poll loop stopped")

    def start(self) -> threading.Thread:
        self._stop.clear()
        self._thread = threading.Thread(target=self.run, name="fbpool-poller", daemon=True)
        self._thread.start()
        return self._thread

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
