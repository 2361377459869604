from datetime import date, datetime, timezone

import pytest

from conftest import NY, make_game, make_user
from fbpool import publish
from fbpool.models.games import GameStatus, Week


def _week():
    week = Week(num=2)
    week.record(make_game("Bills", "Ravens", GameStatus.FINISHED, "20", "24", day=date(2017, 9, 17)))
    week.record(make_game("Jets", "Raiders", kickoff=datetime(2017, 9, 17, 16, 5, tzinfo=NY), day=date(2017, 9, 17)))
    return week


def test_game_rows():
    rows = publish.game_rows(2017, _week())
    assert rows[0] == {
        "season": 2017,
        "week": 2,
        "visitor": "Bills",
        "home": "Ravens",
        "score_visitor": "20",
        "score_home": "24",
        "status": "finished",
        "status_text": "",
        "day": "2017-09-17",
        "kickoff_at": None,
    }
    assert rows[1]["kickoff_at"] == "2017-09-17T16:05:00-04:00"


def test_user_week_row():
    user = make_user("a@x.com", "Alice")
    user.weeks[1].points = 12
    user.weeks[1].good_picks = 3
    row = publish.user_week_row(2017, user, 1)
    assert {k: row[k] for k in ("season", "week", "email", "points", "good_picks")} == {
        "season": 2017,
        "week": 2,
        "email": "a@x.com",
        "points": 12,
        "good_picks": 3,
    }


def test_publisher_upserts(monkeypatch):
    calls = []
    monkeypatch.setattr(publish, "upsert", lambda table, rows, on_conflict: calls.append((table, rows, on_conflict)))
    pub = publish.Publisher(2017)

    pub.games(_week())
    pub.user_week(make_user("a@x.com", "Alice"), 0)

    assert [(t, len(r), c) for t, r, c in calls] == [
        ("games", 2, "season,week,home"),
        ("user_weeks", 1, "season,week,email"),
    ]


def test_publisher_archives_pages_by_season_and_week(monkeypatch):
    uploads = []
    monkeypatch.setattr(publish, "archive_page", lambda bucket, path, page: uploads.append((bucket, path)))

    publish.Publisher(2017).page(3, b"<html></html>", datetime(2017, 9, 24, 18, 30, 5, tzinfo=timezone.utc))

    assert uploads == [("fbpool-raw-pages", "2017/week03/20170924T183005Z.html")]


def test_publisher_swallows_failures(monkeypatch, caplog):
    def boom(*args, **kwargs):
        raise RuntimeError("Supabase is not configured")

    monkeypatch.setattr(publish, "upsert", boom)
    monkeypatch.setattr(publish, "archive_page", boom)
    pub = publish.Publisher(2017)

    pub.games(_week())
    pub.user_week(make_user("a@x.com", "Alice"), 0)
    pub.page(2, b"<html></html>")

    failures = [r for r in caplog.records if "Supabase is not configured" in r.getMessage()]
    assert len(failures) == 3


@pytest.fixture
def unconfigured(monkeypatch):
    monkeypatch.setattr(publish, "_client", None)
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_SERVICE_ROLE_KEY", raising=False)


def test_client_requires_configuration(unconfigured):
    with pytest.raises(RuntimeError, match="not configured"):
        publish.get_client()


def test_empty_upsert_skips_the_client(unconfigured):
    publish.upsert("games", [], on_conflict=publish.GAMES_KEY)
