"""Team-name normalization.

The schedule pages spell teams several ways (city only, city + nickname,
abbreviated cities, names of relocated franchises). Every game and pick is
keyed by the canonical nickname, so every spelling must resolve through
``TEAM_ALIASES``. Spellings we have never seen raise instead of mapping to a
blank name.
"""

from __future__ import annotations

CANONICAL_TEAMS: frozenset[str] = frozenset({
    "49ers", "Bears", "Bengals", "Bills", "Broncos", "Browns", "Buccaneers",
    "Cardinals", "Chargers", "Chiefs", "Colts", "Commanders", "Cowboys",
    "Dolphins", "Eagles", "Falcons", "Giants", "Jaguars", "Jets", "Lions",
    "Packers", "Panthers", "Patriots", "Raiders", "Rams", "Ravens", "Saints",
    "Seahawks", "Steelers", "Texans", "Titans", "Vikings",
})

# Spelling on the page → canonical nickname
TEAM_ALIASES: dict[str, str] = {
    "Arizona": "Cardinals",
    "Arizona Cardinals": "Cardinals",
    "Atlanta": "Falcons",
    "Atlanta Falcons": "Falcons",
    "Baltimore": "Ravens",
    "Baltimore Ravens": "Ravens",
    "Buffalo": "Bills",
    "Buffalo Bills": "Bills",
    "Carolina": "Panthers",
    "Carolina Panthers": "Panthers",
    "Chicago": "Bears",
    "Chicago Bears": "Bears",
    "Cincinnati": "Bengals",
    "Cincinnati Bengals": "Bengals",
    "Cleveland": "Browns",
    "Cleveland Browns": "Browns",
    "Dallas": "Cowboys",
    "Dallas Cowboys": "Cowboys",
    "Denver": "Broncos",
    "Denver Broncos": "Broncos",
    "Detroit": "Lions",
    "Detroit Lions": "Lions",
    "Green Bay": "Packers",
    "Green Bay Packers": "Packers",
    "Houston": "Texans",
    "Houston Texans": "Texans",
    "Indianapolis": "Colts",
    "Indianapolis Colts": "Colts",
    "Jacksonville": "Jaguars",
    "Jacksonville Jaguars": "Jaguars",
    "Kansas City": "Chiefs",
    "Kansas City Chiefs": "Chiefs",
    # Before 2017 the page used the bare city for the Rams
    "Los Angeles": "Rams",
    "Los Angeles Rams": "Rams",
    "LA Rams": "Rams",
    "St. Louis": "Rams",
    "St. Louis Rams": "Rams",
    "Los Angeles Chargers": "Chargers",
    "LA Chargers": "Chargers",
    "San Diego": "Chargers",
    "San Diego Chargers": "Chargers",
    "Miami": "Dolphins",
    "Miami Dolphins": "Dolphins",
    "Minnesota": "Vikings",
    "Minnesota Vikings": "Vikings",
    "New England": "Patriots",
    "New England Patriots": "Patriots",
    "New Orleans": "Saints",
    "New Orleans Saints": "Saints",
    "NY Giants": "Giants",
    "New York Giants": "Giants",
    "NY Jets": "Jets",
    "New York Jets": "Jets",
    "Oakland": "Raiders",
    "Oakland Raiders": "Raiders",
    "Las Vegas": "Raiders",
    "Las Vegas Raiders": "Raiders",
    "Philadelphia": "Eagles",
    "Philadelphia Eagles": "Eagles",
    "Pittsburgh": "Steelers",
    "Pittsburgh Steelers": "Steelers",
    "San Francisco": "49ers",
    "San Francisco 49ers": "49ers",
    "Seattle": "Seahawks",
    "Seattle Seahawks": "Seahawks",
    "Tampa Bay": "Buccaneers",
    "Tampa Bay Buccaneers": "Buccaneers",
    "Tennessee": "Titans",
    "Tennessee Titans": "Titans",
    "Washington": "Commanders",
    "Washington Redskins": "Commanders",
    "Washington Football Team": "Commanders",
    "Washington Commanders": "Commanders",
    "Redskins": "Commanders",
}


class UnknownTeamError(KeyError):
    """Raised when a team spelling is not in the normalization table."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown team name: {self.name!r}"


def normalize_team(name: str) -> str:
    """Map a team spelling from the page to its canonical nickname."""
    key = " ".join(name.split())
    if key in CANONICAL_TEAMS:
        return key
    try:
        return TEAM_ALIASES[key]
    except KeyError:
        raise UnknownTeamError(name) from None
