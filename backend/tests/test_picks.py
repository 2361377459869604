from datetime import datetime

import pytest

from conftest import NY, make_game, make_season, make_user
from fbpool.models.games import GameStatus
from fbpool.models.pool import Selection
from fbpool.picks import (
    DuplicateConfidenceError,
    PickChoice,
    PickError,
    UnknownPickTeamError,
    submit_picks,
    validate_selections,
)

BEFORE = datetime(2017, 9, 9, 12, tzinfo=NY)
LATER = datetime(2017, 9, 9, 18, tzinfo=NY)


@pytest.fixture
def state(make_state):
    season = make_season(3)
    week = season.weeks[0]
    week.record(make_game("Chiefs", "Patriots", GameStatus.FINISHED, "42", "27"))
    week.record(make_game("Jets", "Bills", kickoff=datetime(2017, 9, 10, 13, tzinfo=NY)))
    week.record(make_game("Seahawks", "Packers", kickoff=datetime(2017, 9, 10, 16, 25, tzinfo=NY)))
    return make_state(season, [make_user("a@x.com", "Alice")])


def test_submit_new_picks(state):
    uw = submit_picks(
        state, "a@x.com", 0,
        {"Jets": PickChoice(winner="home", confidence=3), "Seahawks": PickChoice(winner="visitor", confidence=2)},
        BEFORE,
    )
    assert [(s.team, s.confidence) for s in uw.selections] == [("Bills", 3), ("Seahawks", 2)]
    assert all(s.when == BEFORE for s in uw.selections)


def test_resubmit_only_touches_changed_picks(state):
    submit_picks(state, "a@x.com", 0, {"Jets": PickChoice(winner="home", confidence=3),
                                        "Seahawks": PickChoice(winner="visitor", confidence=2)}, BEFORE)
    uw = submit_picks(state, "a@x.com", 0, {"Jets": PickChoice(winner="home", confidence=3),
                                             "Seahawks": PickChoice(winner="home", confidence=2)}, LATER)
    by_team = {s.team: s for s in uw.selections}
    assert set(by_team) == {"Bills", "Packers"}
    assert by_team["Bills"].when == BEFORE
    assert by_team["Packers"].when == LATER


def test_started_games_are_ignored(state):
    uw = submit_picks(state, "a@x.com", 0, {"Chiefs": PickChoice(winner="visitor", confidence=1),
                                             "Jets": PickChoice(winner="visitor", confidence=2)},
                      datetime(2017, 9, 10, 13, 5, tzinfo=NY))
    assert uw.selections == []


def test_duplicate_confidence_keeps_previous_picks(state):
    submit_picks(state, "a@x.com", 0, {"Jets": PickChoice(winner="home", confidence=3)}, BEFORE)
    with pytest.raises(DuplicateConfidenceError):
        submit_picks(state, "a@x.com", 0, {"Seahawks": PickChoice(winner="home", confidence=3)}, LATER)
    assert [s.team for s in state.users["a@x.com"].weeks[0].selections] == ["Bills"]


def test_validate_selections(state):
    week = state.week(0)

    def sel(team, conf):
        return Selection(team=team, confidence=conf, when=BEFORE)

    validate_selections([sel("Bills", 1), sel("Packers", 3)], week)
    with pytest.raises(UnknownPickTeamError):
        validate_selections([sel("Lions", 1)], week)
    with pytest.raises(PickError):
        validate_selections([sel("Bills", 1), sel("Jets", 2)], week)
    with pytest.raises(PickError):
        validate_selections([sel("Bills", 4)], week)
    with pytest.raises(DuplicateConfidenceError):
        validate_selections([sel("Bills", 2), sel("Packers", 2)], week)
