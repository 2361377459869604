"""Extract games from one week's schedule page.

Page layout (only the parts we rely on):

    <tr class="divider"><td>Thursday, September 7, 2017</td></tr>
    <tr class="left">
      <td class="right">FINAL</td>
      <td class="left">Kansas City <b>42</b></td>
      <td class="left">New England <b>27</b></td>
    </tr>

Day-group rows carry ``divider``, game rows ``left``, the status cell
``right`` or ``center`` and team cells ``left``, always as the first
attribute. Final scores are the bold text after each team name.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, tzinfo
from typing import IO, Callable, Iterator

from pydantic import ValidationError

from fbpool.dates import day_start, parse_day_label, parse_kickoff
from fbpool.ingestion.scanner import TokenScanner
from fbpool.models.games import Game, GameStatus, Week
from fbpool.teams import normalize_team

logger = logging.getLogger(__name__)

DAY_MARKER = "divider"
ROW_MARKER = "left"
STATUS_MARKERS = ("right", "center")
TEAM_MARKER = "left"


class ScheduleExtractor:
    """Lazy iterator of ``Game`` records from one schedule page.

    Iteration stops when no game row remains, or early when a row is cut
    short (missing cell, text, or final score). In the early case ``failed``
    is set and the interrupted row is dropped; games already yielded stay
    valid. Unknown team spellings raise ``UnknownTeamError``.
    """

    def __init__(
        self,
        scanner: TokenScanner,
        season_year: int,
        tz: tzinfo,
        normalize: Callable[[str], str] = normalize_team,
    ) -> None:
        self._scanner = scanner
        self._season_year = season_year
        self._tz = tz
        self._normalize = normalize
        self._day: date | None = None
        self._done = False

        self.failed = False
        self.instants: set[datetime] = set()
        self.games: list[Game] = []
        self.team_index: dict[str, int] = {}

    def __iter__(self) -> Iterator[Game]:
        return self

    def __next__(self) -> Game:
        game = self._read_game()
        if game is None:
            raise StopIteration
        self.games.append(game)
        idx = len(self.games) - 1
        self.team_index[game.visitor] = idx
        self.team_index[game.home] = idx
        self.instants.add(day_start(game.day, self._tz))
        return game

    @property
    def bounds(self) -> tuple[datetime, datetime] | None:
        """Earliest and latest scheduled instant seen so far."""
        if not self.instants:
            return None
        return min(self.instants), max(self.instants)

    def _fail(self, reason: str) -> None:
        logger.warning("Schedule scan stopped early: %s", reason)
        self.failed = True
        self._done = True
        return None

    def _read_team(self, finished: bool) -> tuple[str, str] | None:
        """Read one team cell, plus its bold score when the game is final."""
        s = self._scanner
        if not s.seek_tag(TEAM_MARKER):
            return None
        name = s.next_text()
        if name is None:
            return None
        team = self._normalize(name)
        score = ""
        if finished:
            score = s.seek_bold_text()
            if score is None:
                return None
        return team, score

    def _read_game(self) -> Game | None:
        if self._done:
            return None
        s = self._scanner

        if not s.seek_tag(DAY_MARKER, ROW_MARKER):
            self._done = True
            return None

        if s.token.first_attr_value == DAY_MARKER:
            label = s.next_text()
            if label is None:
                return self._fail("missing day label")
            try:
                self._day = parse_day_label(label, self._season_year)
            except ValueError as e:
                return self._fail(str(e))
            if not s.seek_tag(ROW_MARKER):
                self._done = True
                return None

        if self._day is None:
            return self._fail("game row before any day label")

        if not s.seek_tag(*STATUS_MARKERS):
            return self._fail("missing status cell")
        status_text = s.next_text()
        if status_text is None:
            return self._fail("missing status text")
        status = GameStatus.from_text(status_text)
        finished = status is GameStatus.FINISHED

        visitor = self._read_team(finished)
        if visitor is None:
            return self._fail(f"row cut short before visitor team ({status_text})")
        home = self._read_team(finished)
        if home is None:
            return self._fail(f"row cut short after {visitor[0]}")

        kickoff = None
        if status is GameStatus.FUTURE:
            try:
                kickoff = parse_kickoff(self._day, status_text, self._tz)
            except ValueError:
                logger.warning("Could not parse kickoff %r for %s at %s", status_text, visitor[0], home[0])

        try:
            game = Game(
                visitor=visitor[0],
                home=home[0],
                score_visitor=visitor[1],
                score_home=home[1],
                status=status,
                day=self._day,
                status_text=status_text,
                kickoff=kickoff,
            )
        except ValidationError as e:
            return self._fail(str(e))

        logger.debug(
            "%s %s vs %s %s on %s %s",
            game.visitor, game.score_visitor, game.home, game.score_home, game.day, status_text,
        )
        return game


def extract_week(
    source: IO[bytes] | IO[str] | bytes | str,
    season_year: int,
    tz: tzinfo,
) -> ScheduleExtractor:
    """Scan a whole page and return the exhausted extractor."""
    extractor = ScheduleExtractor(TokenScanner(source), season_year, tz)
    for _ in extractor:
        pass
    return extractor


def load_week(
    week: Week,
    source: IO[bytes] | IO[str] | bytes | str,
    season_year: int,
    tz: tzinfo,
) -> ScheduleExtractor:
    """Record every game of a page into ``week`` and widen its bounds.

    Games recorded before a scan failure are kept.
    """
    extractor = ScheduleExtractor(TokenScanner(source), season_year, tz)
    for game in extractor:
        week.record(game)
    week.widen_bounds(extractor.instants)

    bounds = extractor.bounds
    if bounds is None:
        logger.warning("Week %d: no games found", week.num)
    else:
        logger.info(
            "Week %d: %d games, start %s, end %s%s",
            week.num, len(extractor.games),
            bounds[0].strftime("%a %b %d"), bounds[1].strftime("%a %b %d"),
            " (incomplete scan)" if extractor.failed else "",
        )
    return extractor
