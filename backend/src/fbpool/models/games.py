"""Models for games, weeks, and the season schedule."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Iterable

from pydantic import BaseModel, Field, model_validator

# A week's last scheduled instant is the start of its last game day,
# so completion checks extend the week by one day.
WEEK_END_GRACE = timedelta(hours=24)


class GameStatus(str, Enum):
    FUTURE = "future"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"

    @classmethod
    def from_text(cls, text: str) -> GameStatus:
        """Derive the status from the raw status cell text.

        "FINAL" / "F/OT" means finished, a clock time ("1:00 PM") means the
        game has not started, anything else ("3rd 4:12", "Halftime") is live.
        """
        if "FINAL" in text or "F/OT" in text:
            return cls.FINISHED
        if "AM" in text or "PM" in text:
            return cls.FUTURE
        return cls.IN_PROGRESS


class Game(BaseModel):
    visitor: str
    home: str
    score_visitor: str = ""
    score_home: str = ""
    status: GameStatus = GameStatus.FUTURE
    day: date
    status_text: str = ""
    kickoff: datetime | None = None

    @model_validator(mode="after")
    def _distinct_teams(self) -> Game:
        if self.visitor == self.home:
            raise ValueError(f"Game has the same team on both sides: {self.home}")
        return self

    @property
    def teams(self) -> frozenset[str]:
        return frozenset((self.visitor, self.home))

    def has_team(self, team: str) -> bool:
        return team == self.visitor or team == self.home


class Week(BaseModel):
    """One week of the schedule.

    Games live in an append-only list; ``team_index`` maps each team to the
    position of its game so lookups survive later replacements of the game.
    """

    num: int
    start: datetime | None = None
    end: datetime | None = None
    games: list[Game] = Field(default_factory=list)
    team_index: dict[str, int] = Field(default_factory=dict)

    @property
    def extended_end(self) -> datetime | None:
        if self.end is None:
            return None
        return self.end + WEEK_END_GRACE

    @property
    def has_bounds(self) -> bool:
        return self.start is not None and self.end is not None

    def snapshot(self) -> Week:
        """Copy that later ``record``/``replace`` calls on this week do not touch.

        Games are replaced whole, never mutated, so they are shared.
        """
        return self.model_copy(update={"games": list(self.games), "team_index": dict(self.team_index)})

    def game_for(self, team: str) -> Game | None:
        idx = self.team_index.get(team)
        if idx is None:
            return None
        return self.games[idx]

    def record(self, game: Game) -> int:
        """Add a game, or replace the stored game for the same matchup.

        Returns the game's index. Raises ValueError if either team already
        plays a different opponent this week.
        """
        idx_v = self.team_index.get(game.visitor)
        idx_h = self.team_index.get(game.home)
        if idx_v is None and idx_h is None:
            self.games.append(game)
            idx = len(self.games) - 1
            self.team_index[game.visitor] = idx
            self.team_index[game.home] = idx
            return idx
        if idx_v != idx_h:
            raise ValueError(
                f"Week {self.num}: {game.visitor} vs {game.home} conflicts with an existing game"
            )
        self.games[idx_v] = game
        return idx_v

    def replace(self, game: Game) -> bool:
        """Overwrite the stored game for this matchup. False if there is none."""
        idx = self.team_index.get(game.visitor)
        if idx is None or self.games[idx].teams != game.teams:
            return False
        self.games[idx] = game
        return True

    def widen_bounds(self, instants: Iterable[datetime]) -> None:
        for t in instants:
            if self.start is None or t < self.start:
                self.start = t
            if self.end is None or t > self.end:
                self.end = t


class Season(BaseModel):
    year: int
    weeks: list[Week]

    @classmethod
    def empty(cls, year: int, num_weeks: int) -> Season:
        return cls(year=year, weeks=[Week(num=i + 1) for i in range(num_weeks)])
