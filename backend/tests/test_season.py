from datetime import date, datetime, timedelta

import pytest

from conftest import NY, make_season
from fbpool.models.games import Season, Week
from fbpool.season import SeasonClock, SeasonConfigError


@pytest.fixture
def clock():
    # Weeks span Thu..Mon: 9/7-9/11, 9/14-9/18, 9/21-9/25 (end + 24h grace)
    return SeasonClock(make_season(3), NY)


def at(month, day, hour=12):
    return datetime(2017, month, day, hour, tzinfo=NY)


def test_inside_a_week(clock):
    assert clock.recompute(at(9, 10)) == 0
    assert not clock.season_ended
    assert clock.recompute(at(9, 15)) == 1


def test_grace_day_after_last_game_day(clock):
    # Week 1 ends 9/11 00:00, extended to 9/12 00:00
    assert clock.recompute(at(9, 11, 23)) == 0
    assert clock.recompute(datetime(2017, 9, 12, 0, 0, tzinfo=NY)) == 0


def test_gap_between_weeks_points_at_next_week(clock):
    assert clock.recompute(at(9, 13)) == 1


def test_before_season_points_at_first_week(clock):
    assert clock.recompute(at(8, 1)) == 0
    assert not clock.season_ended


def test_after_season_pins_last_week(clock):
    assert clock.recompute(at(10, 1)) == 2
    assert clock.season_ended
    assert clock.current_week.num == 3


def test_progression_is_monotonic(clock):
    t = at(8, 30)
    last_index = -1
    last_ended = False
    while t < at(10, 10):
        idx = clock.recompute(t)
        assert idx >= last_index
        assert clock.season_ended or not last_ended
        last_index, last_ended = idx, clock.season_ended
        t += timedelta(hours=5)
    assert last_ended


def test_unloaded_weeks_are_skipped():
    season = make_season(3)
    season.weeks[1] = Week(num=2)
    c = SeasonClock(season, NY)
    assert c.recompute(at(9, 15)) == 2


def test_no_matching_week_is_a_config_error():
    c = SeasonClock(Season(year=2017, weeks=[Week(num=1), Week(num=2)]), NY)
    with pytest.raises(SeasonConfigError):
        c.recompute(at(9, 10))


def test_current_week_before_recompute_raises(clock):
    with pytest.raises(SeasonConfigError):
        clock.current_week


def test_precedes_current_week(clock):
    clock.recompute(at(9, 15))  # week 2 starts Thu 9/14
    assert clock.precedes_current_week(date(2017, 9, 11))
    assert clock.precedes_current_week(date(2016, 12, 31))
    assert not clock.precedes_current_week(date(2017, 9, 14))
    assert not clock.precedes_current_week(date(2017, 9, 17))
    assert not clock.precedes_current_week(date(2018, 1, 2))
