"""In-memory schedule cache shared by every request the process serves."""
import threading
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from six_scraper.models import CourseClass

CACHE_TTL = timedelta(minutes=5)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReadWriteLock:
    """
    Many readers or one writer. A waiting writer blocks new readers so a steady
    stream of reads cannot starve a set().
    """

    def __init__(self) -> None:
        self._condition = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        with self._condition:
            while self._writer or self._writers_waiting:
                self._condition.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._condition:
                self._readers -= 1
                if self._readers == 0:
                    self._condition.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        with self._condition:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._condition.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._condition:
                self._writer = False
                self._condition.notify_all()


@dataclass(frozen=True)
class CacheEntry:
    key: str
    data: tuple[CourseClass, ...]
    fetched_at: datetime
    expires_at: datetime


class ScheduleCache:
    """
    Maps a fully built portal URL to the classes parsed from it.
    Entries expire lazily: an old entry stays in memory but reads as a miss
    until a later set() replaces it.
    """

    def __init__(self, ttl: timedelta = CACHE_TTL, clock: Callable[[], datetime] = _utcnow) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = ReadWriteLock()

    def get(self, key: str) -> CacheEntry | None:
        with self._lock.read_locked():
            entry = self._entries.get(key)
        if entry is None or self._clock() >= entry.expires_at:
            return None
        return entry

    def set(self, key: str, data: Sequence[CourseClass], fetched_at: datetime) -> CacheEntry:
        # The freshness window starts now, not at fetched_at
        entry = CacheEntry(key=key, data=tuple(data), fetched_at=fetched_at, expires_at=self._clock() + self.ttl)
        with self._lock.write_locked():
            self._entries[key] = entry
        return entry

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._entries)
