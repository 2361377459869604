"""Models for pool members, their picks, and computed standings."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from fbpool.teams import TEAM_ALIASES


class Selection(BaseModel):
    team: str
    confidence: int = Field(ge=1)
    when: datetime

    @field_validator("team")
    @classmethod
    def _canonical_team(cls, v: str) -> str:
        # Older pick files use city or retired names ("Redskins")
        return TEAM_ALIASES.get(v, v)


class UserWeek(BaseModel):
    num: int
    points: int = 0
    good_picks: int = 0
    selections: list[Selection] = Field(default_factory=list)

    @property
    def played(self) -> bool:
        return len(self.selections) > 0


class User(BaseModel):
    email: str
    name: str
    weeks: list[UserWeek] = Field(default_factory=list)

    def ensure_weeks(self, num_weeks: int) -> None:
        """Pad ``weeks`` so there is one entry per season week."""
        for i in range(len(self.weeks), num_weeks):
            self.weeks.append(UserWeek(num=i + 1))


class WeekScore(BaseModel):
    points: int = 0
    good_picks: int = 0


class StandingRow(BaseModel):
    email: str
    name: str
    total: int
    weeks_played: int
    weeks_won: int
    ave_per_week: str


class PickResult(BaseModel):
    time: str
    visitor: str
    home: str
    pick: str
    confidence: int
    winner: str  # team name, or "tie" while level / not started
    points: int


class PickResults(BaseModel):
    finished: list[PickResult] = Field(default_factory=list)
    in_progress: list[PickResult] = Field(default_factory=list)
    future: list[PickResult] = Field(default_factory=list)
