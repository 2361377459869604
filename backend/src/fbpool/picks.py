"""Record and validate a member's weekly picks."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Literal, Mapping, Sequence

from pydantic import BaseModel, Field

from fbpool.models.games import GameStatus, Week
from fbpool.models.pool import Selection, UserWeek
from fbpool.state import PoolState

logger = logging.getLogger(__name__)


class PickError(ValueError):
    """A set of picks breaks one of the pool rules."""


class DuplicateConfidenceError(PickError):
    def __init__(self, confidence: int, first: str, second: str) -> None:
        super().__init__(
            f"Can not reuse confidences, you have both {first} and {second} with a confidence of {confidence}"
        )
        self.confidence = confidence


class UnknownPickTeamError(PickError):
    def __init__(self, team: str, week_num: int) -> None:
        super().__init__(f"{team} does not play in week {week_num}")
        self.team = team


class PickChoice(BaseModel):
    """One game's entry on the pick form, keyed by the visiting team."""

    winner: Literal["home", "visitor"]
    confidence: int = Field(ge=1)


def validate_selections(selections: Sequence[Selection], week: Week) -> None:
    """Check a week's selections: known teams, one pick per game, unique confidences.

    Confidences must lie in 1..number of games. Raises ``PickError``.
    """
    n_games = len(week.games)
    by_confidence: dict[int, str] = {}
    by_game: dict[int, str] = {}
    for s in selections:
        idx = week.team_index.get(s.team)
        if idx is None:
            raise UnknownPickTeamError(s.team, week.num)
        if idx in by_game:
            raise PickError(f"Two picks for the same game: {by_game[idx]} and {s.team}")
        by_game[idx] = s.team
        if not 1 <= s.confidence <= n_games:
            raise PickError(f"Confidence {s.confidence} for {s.team} is outside 1..{n_games}")
        if s.confidence in by_confidence:
            raise DuplicateConfidenceError(s.confidence, by_confidence[s.confidence], s.team)
        by_confidence[s.confidence] = s.team


def submit_picks(
    state: PoolState,
    email: str,
    week_index: int,
    picks: Mapping[str, PickChoice],
    now: datetime,
) -> UserWeek:
    """Apply a pick form to a member's week.

    Games that have started (or whose kickoff has passed before the page
    caught up) keep their existing pick. The stored selections only change
    if the resulting set is valid. Only the member's own lock is held while
    building, so other members' submissions and the poller do not wait.
    """
    with state.season_lock:
        week = state.week(week_index).snapshot()

    with state.user_lock(email):
        user_week = state.users[email].weeks[week_index]
        selections = [s.model_copy() for s in user_week.selections]

        for game in week.games:
            if game.status is not GameStatus.FUTURE:
                continue
            if game.kickoff is not None and now >= game.kickoff:
                logger.info("user %s: ignoring pick for %s at %s, it started %s", email, game.visitor, game.home, game.kickoff)
                continue
            choice = picks.get(game.visitor)
            if choice is None:
                continue

            team = game.home if choice.winner == "home" else game.visitor
            existing = next((i for i, s in enumerate(selections) if game.has_team(s.team)), None)
            if existing is None:
                selections.append(Selection(team=team, confidence=choice.confidence, when=now))
            elif selections[existing].team != team or selections[existing].confidence != choice.confidence:
                selections[existing] = Selection(team=team, confidence=choice.confidence, when=now)

        validate_selections(selections, week)
        user_week.selections = selections
        logger.info("user %s saved %d picks for week %d", email, len(selections), week.num)
        return user_week
