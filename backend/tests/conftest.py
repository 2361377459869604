from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from fbpool import config
from fbpool.models.games import Game, GameStatus, Season, Week
from fbpool.models.pool import Selection, User, UserWeek
from fbpool.state import PoolState

NY = ZoneInfo("America/New_York")


def divider(label):
    return f'<tr class="divider"><td colspan="3">{label}</td></tr>'


def game_row(status, visitor, home, score_v=None, score_h=None, status_class="right"):
    def team_cell(name, score):
        bold = f" <b>{score}</b>" if score is not None else ""
        return f'<td class="left">{name}{bold}</td>'

    return (
        f'<tr class="left">\n'
        f'  <td class="{status_class}">{status}</td>\n'
        f"  {team_cell(visitor, score_v)}\n"
        f"  {team_cell(home, score_h)}\n"
        f"</tr>"
    )


def page(*rows):
    body = "\n".join(rows)
    return f"<html><body><h1>NFL Schedule</h1><table>\n{body}\n</table></body></html>"


WEEK1_PAGE = page(
    divider("Thursday, September 7, 2017"),
    game_row("FINAL", "Kansas City", "New England", "42", "27"),
    divider("Sunday, September 10, 2017"),
    game_row("F/OT", "NY Jets", "Buffalo", "12", "21"),
    game_row("3rd 4:12", "Atlanta", "Chicago", status_class="center"),
    game_row("4:25 PM ET", "Seattle", "Green Bay"),
    divider("Monday, September 11, 2017"),
    game_row("7:10 PM ET", "New Orleans", "Minnesota"),
)


@pytest.fixture
def tz():
    return NY


@pytest.fixture
def week1_page():
    return WEEK1_PAGE


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    monkeypatch.setattr(config, "_settings", None)


def make_game(visitor, home, status=GameStatus.FUTURE, score_v="", score_h="", day=date(2017, 9, 10), kickoff=None):
    return Game(
        visitor=visitor,
        home=home,
        score_visitor=score_v,
        score_home=score_h,
        status=status,
        day=day,
        status_text="",
        kickoff=kickoff,
    )


def make_week(num, first_day, games=(), days=4):
    week = Week(num=num)
    for g in games:
        week.record(g)
    start = datetime.combine(first_day, datetime.min.time(), tzinfo=NY)
    week.widen_bounds([start, start + timedelta(days=days)])
    return week


def make_season(num_weeks=3, first_day=date(2017, 9, 7)):
    weeks = [make_week(i + 1, first_day + timedelta(days=7 * i)) for i in range(num_weeks)]
    return Season(year=2017, weeks=weeks)


def make_user(email, name, picks_by_week=None, num_weeks=3):
    weeks = [UserWeek(num=i + 1) for i in range(num_weeks)]
    for idx, picks in (picks_by_week or {}).items():
        weeks[idx].selections = [
            Selection(team=team, confidence=conf, when=datetime(2017, 9, 6, tzinfo=NY)) for team, conf in picks
        ]
    return User(email=email, name=name, weeks=weeks)


@pytest.fixture
def make_state():
    def _make(season=None, users=()):
        return PoolState(season or make_season(), NY, users)

    return _make
