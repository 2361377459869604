"""Push polled pages, games and member totals to Supabase for the web layer.

Tables live in the ``fbpool`` schema:
  games       one row per game, keyed (season, week, home)
  user_weeks  one row per member per week, keyed (season, week, email)

Raw pages are archived to Storage as {season}/week{NN}/{timestamp}.html.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from supabase import Client, create_client

from fbpool.config import get_settings
from fbpool.models.games import Week
from fbpool.models.pool import User

logger = logging.getLogger(__name__)

SCHEMA = "fbpool"
GAMES_KEY = "season,week,home"
USER_WEEKS_KEY = "season,week,email"

_client: Client | None = None


def get_client() -> Client:
    """Return a singleton service-role client for the poll worker."""
    global _client
    if _client is None:
        s = get_settings()
        if not s.publishing_enabled:
            raise RuntimeError("Supabase is not configured (SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY)")
        _client = create_client(s.supabase_url, s.supabase_service_role_key)
    return _client


def upsert(table: str, rows: list[dict], on_conflict: str) -> None:
    if not rows:
        return
    get_client().schema(SCHEMA).table(table).upsert(rows, on_conflict=on_conflict).execute()


def page_path(season_year: int, week_num: int, ts: datetime) -> str:
    return f"{season_year}/week{week_num:02d}/{ts.strftime('%Y%m%dT%H%M%SZ')}.html"


def archive_page(bucket: str, path: str, page: bytes) -> None:
    get_client().storage.from_(bucket).upload(
        path,
        page,
        file_options={"content-type": "text/html", "upsert": "true"},
    )


def game_rows(season_year: int, week: Week) -> list[dict]:
    return [
        {
            "season": season_year,
            "week": week.num,
            "visitor": g.visitor,
            "home": g.home,
            "score_visitor": g.score_visitor,
            "score_home": g.score_home,
            "status": g.status.value,
            "status_text": g.status_text,
            "day": g.day.isoformat(),
            "kickoff_at": g.kickoff.isoformat() if g.kickoff else None,
        }
        for g in week.games
    ]


def user_week_row(season_year: int, user: User, week_index: int) -> dict:
    uw = user.weeks[week_index]
    return {
        "season": season_year,
        "week": uw.num,
        "email": user.email,
        "points": uw.points,
        "good_picks": uw.good_picks,
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }


class Publisher:
    """Callbacks for ``PollScheduler`` that write through to Supabase.

    Publishing failures are logged and never stop the poll loop.
    """

    def __init__(self, season_year: int, bucket: str | None = None) -> None:
        self.season_year = season_year
        self.bucket = bucket or get_settings().supabase_bucket_raw_pages

    def page(self, week_num: int, page: bytes, ts: datetime | None = None) -> None:
        path = page_path(self.season_year, week_num, ts or datetime.now(timezone.utc))
        try:
            archive_page(self.bucket, path, page)
            logger.debug("Archived week %d page to %s/%s", week_num, self.bucket, path)
        except Exception as e:
            logger.warning("Could not archive week %d page: %s", week_num, e)

    def games(self, week: Week) -> None:
        try:
            upsert("games", game_rows(self.season_year, week), on_conflict=GAMES_KEY)
        except Exception as e:
            logger.error("Could not publish games for week %d: %s", week.num, e, exc_info=True)

    def user_week(self, user: User, week_index: int) -> None:
        try:
            upsert("user_weeks", [user_week_row(self.season_year, user, week_index)], on_conflict=USER_WEEKS_KEY)
        except Exception as e:
            logger.error("Could not publish week index %d for %s: %s", week_index, user.email, e, exc_info=True)
