"""Build the season schedule and the pool state at startup."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from pydantic import TypeAdapter

from fbpool.config import Settings, get_settings
from fbpool.ingestion.schedule import load_week
from fbpool.ingestion.source import FETCH_ERRORS, fetch_schedule_page
from fbpool.models.games import Season
from fbpool.models.pool import User
from fbpool.state import PoolState

logger = logging.getLogger(__name__)

_USERS = TypeAdapter(list[User])


def load_season(settings: Settings | None = None) -> Season:
    """Read and extract every week's page.

    A week whose page cannot be read is left empty and logged.
    """
    s = settings or get_settings()
    season = Season.empty(s.season_year, s.num_weeks)
    logger.info("Loading %d weeks of the %d season", s.num_weeks, s.season_year)

    for week in season.weeks:
        try:
            page = fetch_schedule_page(week.num)
        except FETCH_ERRORS as e:
            logger.error("Could not read week %d: %s", week.num, e)
            continue
        load_week(week, page, s.season_year, s.schedule_tz)

    return season


def load_users(path: str | Path) -> list[User]:
    """Read pool members and their picks from a JSON list."""
    users = _USERS.validate_json(Path(path).read_bytes())
    logger.info("Loaded %d members from %s", len(users), path)
    return users


def build_state(
    users: list[User] | None = None,
    settings: Settings | None = None,
    now: datetime | None = None,
) -> PoolState:
    """Load the season, register members, and place the clock."""
    s = settings or get_settings()
    state = PoolState(load_season(s), s.schedule_tz, users or [])
    state.clock.recompute(now or datetime.now(s.schedule_tz))
    return state
