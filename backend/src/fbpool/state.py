"""Shared pool state: the season schedule, the members, and their locks.

The poll thread writes game data under ``season_lock``. Pick submissions and
score updates for one member go through that member's lock, so members never
wait on each other.
"""

from __future__ import annotations

import threading
from datetime import tzinfo
from typing import Iterable

from fbpool.models.games import Season, Week
from fbpool.models.pool import User
from fbpool.season import SeasonClock


class PoolState:
    def __init__(self, season: Season, tz: tzinfo, users: Iterable[User] = ()) -> None:
        self.season = season
        self.tz = tz
        self.clock = SeasonClock(season, tz)
        self.season_lock = threading.RLock()
        self.users: dict[str, User] = {}
        self._user_locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        for user in users:
            self.add_user(user)

    @property
    def num_weeks(self) -> int:
        return len(self.season.weeks)

    def week(self, index: int) -> Week:
        return self.season.weeks[index]

    def add_user(self, user: User) -> None:
        user.ensure_weeks(self.num_weeks)
        with self._registry_lock:
            self.users[user.email] = user
            self._user_locks.setdefault(user.email, threading.Lock())

    def user_lock(self, email: str) -> threading.Lock:
        with self._registry_lock:
            return self._user_locks[email]

    def members(self) -> list[User]:
        with self._registry_lock:
            return list(self.users.values())
