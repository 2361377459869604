"""Parsing of the day labels and kickoff times printed on schedule pages."""

from __future__ import annotations

from datetime import date, datetime, time, tzinfo

# "Thursday, September 7, 2017"
_LONG_DAY_FORMAT = "%A, %B %d, %Y"
# "Thu 9/7" (year taken from the season)
_SHORT_DAY_FORMAT = "%a %m/%d/%Y"
# "8:30 PM", optionally followed by a zone label ("8:30 PM ET")
_KICKOFF_FORMAT = "%I:%M %p"

# Regular seasons start in September; a January label belongs to the next year.
_SEASON_ROLLOVER_MONTH = 7


def parse_day_label(label: str, season_year: int) -> date:
    """Parse a day-group label. Raises ValueError if no known format matches."""
    label = " ".join(label.split())
    try:
        return datetime.strptime(label, _LONG_DAY_FORMAT).date()
    except ValueError:
        pass

    parts = label.split()
    if len(parts) != 2 or "/" not in parts[1]:
        raise ValueError(f"Unrecognized day label: {label!r}")
    month_str = parts[1].split("/")[0]
    year = season_year
    if month_str.isdigit() and int(month_str) < _SEASON_ROLLOVER_MONTH:
        year += 1
    try:
        return datetime.strptime(f"{label}/{year}", _SHORT_DAY_FORMAT).date()
    except ValueError:
        raise ValueError(f"Unrecognized day label: {label!r}") from None


def parse_kickoff(day: date, text: str, tz: tzinfo) -> datetime:
    """Combine a game day with a "3:04 PM [ZONE]" time. Raises ValueError."""
    parts = text.split()
    if len(parts) < 2:
        raise ValueError(f"Unrecognized kickoff time: {text!r}")
    t = datetime.strptime(f"{parts[0]} {parts[1]}", _KICKOFF_FORMAT).time()
    return datetime.combine(day, t, tzinfo=tz)


def day_start(day: date, tz: tzinfo) -> datetime:
    """Midnight at the start of ``day`` in ``tz``."""
    return datetime.combine(day, time(0, 0), tzinfo=tz)
