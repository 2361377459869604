"""Score picks against game results and build pool standings.

A pick earns its full confidence value while its team leads (or after it
has won); a level game or one whose score is not posted yet earns nothing.
Everything here is recomputed from scratch on every poll, so running it
twice on the same data gives the same totals.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence

import polars as pl

from fbpool.models.games import Game, GameStatus, Week
from fbpool.models.pool import (
    PickResult,
    PickResults,
    Selection,
    StandingRow,
    User,
    UserWeek,
    WeekScore,
)
from fbpool.season import SeasonConfigError
from fbpool.state import PoolState

logger = logging.getLogger(__name__)

TIE = "tie"

_WEEK_SCHEMA = {
    "email": pl.Utf8,
    "name": pl.Utf8,
    "week": pl.Int64,
    "points": pl.Int64,
    "played": pl.Boolean,
}


def parse_scores(game: Game) -> tuple[int, int] | None:
    """Return (visitor, home) scores, or None until both are posted."""
    try:
        return int(game.score_visitor), int(game.score_home)
    except ValueError:
        return None


def leader(game: Game) -> str | None:
    """Team currently ahead (or the winner). None if level or not started."""
    if game.status is GameStatus.FUTURE:
        return None
    if game.status is GameStatus.IN_PROGRESS or game.status is GameStatus.FINISHED:
        scores = parse_scores(game)
        if scores is None:
            return None
        score_v, score_h = scores
        if score_h > score_v:
            return game.home
        if score_v > score_h:
            return game.visitor
        return None
    raise ValueError(f"Unhandled game status: {game.status!r}")


def score_selection(selection: Selection, game: Game) -> int:
    if selection.team == leader(game):
        return selection.confidence
    return 0


def score_user_week(user_week: UserWeek, week: Week, who: str = "") -> WeekScore:
    """Sum the points of one member's picks for one week."""
    result = WeekScore()
    for s in user_week.selections:
        game = week.game_for(s.team)
        if game is None:
            logger.warning("Could not find game for user %s selection %s in week %d", who, s.team, week.num)
            continue
        points = score_selection(s, game)
        if points:
            result.points += points
            result.good_picks += 1
        logger.debug("week %d user %s pick %s (%d): %d points", week.num, who, s.team, s.confidence, points)
    return result


def update_week_scores(
    state: PoolState,
    week_index: int,
    on_change: Callable[[User, int], None] | None = None,
) -> list[str]:
    """Recompute every member's total for one week.

    Stores changed totals on the members, then calls ``on_change`` for each
    once no lock is held. Returns the emails whose totals changed.
    """
    with state.season_lock:
        week = state.week(week_index).snapshot()

    changed: list[User] = []
    for user in state.members():
        with state.user_lock(user.email):
            user_week = user.weeks[week_index]
            score = score_user_week(user_week, week, user.email)
            if score.points == user_week.points and score.good_picks == user_week.good_picks:
                logger.debug("user %s week index %d points %d unchanged", user.email, week_index, score.points)
                continue
            user_week.points = score.points
            user_week.good_picks = score.good_picks
            logger.info("user %s week index %d points %d", user.email, week_index, score.points)
        changed.append(user)

    if on_change is not None:
        for user in changed:
            on_change(user, week_index)
    return [u.email for u in changed]


def update_all_scores(
    state: PoolState,
    on_change: Callable[[User, int], None] | None = None,
) -> list[str]:
    changed: list[str] = []
    for i in range(state.num_weeks):
        changed.extend(update_week_scores(state, i, on_change))
    return changed


def _average(total: int, weeks_played: int) -> str:
    if weeks_played == 0:
        return "0.0"
    return f"{total / weeks_played:.1f}"


def compute_standings(users: Sequence[User], num_weeks: int) -> list[StandingRow]:
    """Standings over the first ``num_weeks`` weeks, best total first.

    Every member whose score equals a week's high score is credited with
    winning that week.
    """
    rows = [
        {
            "email": u.email,
            "name": u.name,
            "week": i,
            "points": u.weeks[i].points,
            "played": u.weeks[i].played,
        }
        for u in users
        for i in range(num_weeks)
    ]
    if not rows:
        empty = [StandingRow(email=u.email, name=u.name, total=0, weeks_played=0, weeks_won=0, ave_per_week="0.0")
                 for u in users]
        return sorted(empty, key=lambda r: r.name)

    df = pl.DataFrame(rows, schema=_WEEK_SCHEMA)
    df = df.with_columns(pl.col("points").max().over("week").alias("high_score"))

    table = (
        df.group_by("email", maintain_order=True)
        .agg(
            pl.col("name").first(),
            pl.col("points").sum().alias("total"),
            pl.col("played").sum().alias("weeks_played"),
            (pl.col("points") == pl.col("high_score")).sum().alias("weeks_won"),
        )
        .sort(["total", "name"], descending=[True, False])
    )

    return [
        StandingRow(
            email=r["email"],
            name=r["name"],
            total=r["total"],
            weeks_played=r["weeks_played"],
            weeks_won=r["weeks_won"],
            ave_per_week=_average(r["total"], r["weeks_played"]),
        )
        for r in table.iter_rows(named=True)
    ]


def standings(state: PoolState) -> list[StandingRow]:
    """Standings up to the current week, or the whole season once it has ended.

    The current week is left out while it is still being played.
    """
    if state.clock.week_index is None:
        raise SeasonConfigError("Current week has not been computed")
    num_weeks = state.clock.week_index
    if state.clock.season_ended:
        num_weeks += 1
    users = state.members()
    return compute_standings(users, num_weeks)


def week_leaderboard(state: PoolState, week_index: int) -> list[tuple[str, int]]:
    """(name, points) for every member in one week, best first."""
    board = [(u.name, u.weeks[week_index].points) for u in state.members()]
    return sorted(board, key=lambda r: (-r[1], r[0]))


def pick_results(user_week: UserWeek, week: Week) -> PickResults:
    """One row per pick, grouped by the state of its game."""
    results = PickResults()
    for s in user_week.selections:
        game = week.game_for(s.team)
        if game is None:
            logger.warning("Results: no game for week %d selection %s", week.num, s.team)
            continue

        time_str = game.status_text
        if game.status is GameStatus.FUTURE and game.kickoff is not None:
            time_str = game.kickoff.strftime("%a %b %d %I:%M%p %Z")
        elif game.status is not GameStatus.FUTURE and parse_scores(game) is None:
            continue

        row = PickResult(
            time=time_str,
            visitor=game.visitor,
            home=game.home,
            pick=s.team,
            confidence=s.confidence,
            winner=leader(game) or TIE,
            points=score_selection(s, game),
        )
        if game.status is GameStatus.FINISHED:
            results.finished.append(row)
        elif game.status is GameStatus.IN_PROGRESS:
            results.in_progress.append(row)
        elif game.status is GameStatus.FUTURE:
            results.future.append(row)
    return results
