"""The watchlist store: a deduplicated, sortable and persisted set of movies.

The in-memory set is authoritative for the running process.  Every mutation
applies its change synchronously and then writes the full snapshot to the
storage adapter under a single key; storage failures are logged and never undo
or block the in-memory change.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Callable, Iterable

from pydantic import ValidationError

from .config import DEFAULT_STORAGE_KEY
from .errors import StorageCorrupt
from .models import MovieDetail, MovieSummary, WatchlistItem
from .schema import is_integer
from .storage import StorageAdapter
from .utils import fold_title, parse_release_date, parse_timestamp

logger = logging.getLogger(__name__)

_OLDEST_TIMESTAMP = datetime.min.replace(tzinfo=timezone.utc)


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"

    def flipped(self) -> "SortDirection":
        return SortDirection.DESC if self is SortDirection.ASC else SortDirection.ASC


class SortKey(str, Enum):
    DATE_ADDED = "dateAdded"
    TITLE = "title"
    RELEASE_DATE = "releaseDate"
    RATING = "rating"

    @property
    def label(self) -> str:
        return _SORT_LABELS[self]

    @property
    def default_direction(self) -> SortDirection:
        """Newest first for the date added, ascending for everything else."""

        if self is SortKey.DATE_ADDED:
            return SortDirection.DESC
        return SortDirection.ASC


_SORT_LABELS = {
    SortKey.DATE_ADDED: "Date Added",
    SortKey.TITLE: "Title",
    SortKey.RELEASE_DATE: "Release Date",
    SortKey.RATING: "Rating",
}


def _date_added_key(item: WatchlistItem) -> tuple[bool, datetime]:
    parsed = parse_timestamp(item.date_added)
    return (parsed is not None, parsed or _OLDEST_TIMESTAMP)


def _title_key(item: WatchlistItem) -> tuple[str, str]:
    return (fold_title(item.title), item.title)


def _release_date_key(item: WatchlistItem) -> tuple[bool, date]:
    # Unparsable release dates order before every real date.
    parsed = parse_release_date(item.release_date)
    return (parsed is not None, parsed or date.min)


def _rating_key(item: WatchlistItem) -> float:
    return item.vote_average


_SORT_FUNCTIONS: dict[SortKey, Callable[[WatchlistItem], Any]] = {
    SortKey.DATE_ADDED: _date_added_key,
    SortKey.TITLE: _title_key,
    SortKey.RELEASE_DATE: _release_date_key,
    SortKey.RATING: _rating_key,
}


@dataclass(slots=True)
class WatchlistStats:
    total_movies: int


def is_restorable(record: Any) -> bool:
    """Return whether a stored record carries an id, title and insertion date."""

    return (
        isinstance(record, dict)
        and is_integer(record.get("id"))
        and isinstance(record.get("title"), str)
        and bool(record["title"])
        and isinstance(record.get("dateAdded"), str)
        and bool(record["dateAdded"])
    )


class WatchlistStore:
    """Owns the canonical watchlist and keeps the storage copy in sync."""

    def __init__(
        self,
        storage: StorageAdapter,
        key: str = DEFAULT_STORAGE_KEY,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._storage = storage
        self._key = key
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._items: dict[int, WatchlistItem] = {}
        self._sort_key = SortKey.DATE_ADDED
        self._sort_direction = SortKey.DATE_ADDED.default_direction
        self._loaded = False
        self._write_lock = asyncio.Lock()

    @classmethod
    async def open(
        cls,
        storage: StorageAdapter,
        key: str = DEFAULT_STORAGE_KEY,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> "WatchlistStore":
        """Create a store and rehydrate it from ``storage``."""

        store = cls(storage, key, clock=clock)
        await store.load()
        return store

    @property
    def storage_key(self) -> str:
        return self._key

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def sort_key(self) -> SortKey:
        return self._sort_key

    @property
    def sort_direction(self) -> SortDirection:
        return self._sort_direction

    @property
    def items(self) -> tuple[WatchlistItem, ...]:
        """Items in insertion order."""

        return tuple(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, movie_id: object) -> bool:
        return movie_id in self._items

    def contains(self, movie_id: int) -> bool:
        return movie_id in self._items

    def get(self, movie_id: int) -> WatchlistItem | None:
        return self._items.get(movie_id)

    def stats(self) -> WatchlistStats:
        return WatchlistStats(total_movies=len(self._items))

    async def load(self) -> None:
        """Replace the in-memory set with the records found in storage."""

        self._items = {}
        try:
            raw = await self._storage.read(self._key)
        except Exception:
            logger.exception("Failed to read watchlist %r; starting empty", self._key)
            raw = None

        if raw is not None:
            try:
                records = self._parse_snapshot(raw)
            except StorageCorrupt:
                logger.exception("Discarding corrupt watchlist %r", self._key)
                await self._erase()
            else:
                self._items = self._restore(records)
        self._loaded = True

    async def add(self, movie: MovieSummary | MovieDetail) -> bool:
        """Add ``movie`` unless it is already present; return whether it was added."""

        if movie.id in self._items:
            return False
        summary = movie.to_summary() if isinstance(movie, MovieDetail) else movie
        self._items[summary.id] = WatchlistItem.from_movie(summary, self._clock())
        await self._persist()
        return True

    async def remove(self, movie_id: int) -> bool:
        """Remove the movie if present; return whether anything was removed."""

        if self._items.pop(movie_id, None) is None:
            return False
        await self._persist()
        return True

    async def toggle(self, movie: MovieSummary | MovieDetail) -> bool:
        """Remove ``movie`` if present, otherwise add it; return whether it is now present."""

        if movie.id in self._items:
            await self.remove(movie.id)
            return False
        await self.add(movie)
        return True

    async def clear(self) -> bool:
        """Empty the watchlist; return whether anything was removed."""

        previous = self._items
        self._items = {}
        await self._persist()
        return bool(previous)

    def sorted_view(
        self,
        sort_by: SortKey | str | None = None,
        direction: SortDirection | str | None = None,
    ) -> tuple[WatchlistItem, ...]:
        """Return the items ordered by ``sort_by`` without touching the stored order.

        Defaults to the current sort settings.  Ties keep insertion order in
        both directions.
        """

        key = SortKey(sort_by) if sort_by is not None else self._sort_key
        order = SortDirection(direction) if direction is not None else self._sort_direction
        return tuple(
            sorted(
                self._items.values(),
                key=_SORT_FUNCTIONS[key],
                reverse=order is SortDirection.DESC,
            )
        )

    def update_sort(
        self,
        sort_by: SortKey | str,
        direction: SortDirection | str | None = None,
    ) -> tuple[SortKey, SortDirection]:
        """Change the sort settings.

        An explicit ``direction`` always wins.  Otherwise choosing the current
        key again flips the direction and choosing a new key applies that key's
        default direction.
        """

        key = SortKey(sort_by)
        if direction is not None:
            self._sort_direction = SortDirection(direction)
        elif key is self._sort_key:
            self._sort_direction = self._sort_direction.flipped()
        else:
            self._sort_direction = key.default_direction
        self._sort_key = key
        return self._sort_key, self._sort_direction

    def _serialize(self) -> bytes:
        records = [item.to_record() for item in self._items.values()]
        return json.dumps(records, ensure_ascii=False).encode("utf-8")

    async def _persist(self) -> bool:
        # Writes are serialised and each snapshot is taken once the lock is held,
        # so the last write to land always carries the latest in-memory state.
        async with self._write_lock:
            payload = self._serialize()
            try:
                written = await self._storage.write(self._key, payload)
            except Exception:
                logger.exception("Failed to persist watchlist %r", self._key)
                return False
        if not written:
            logger.error("Storage rejected the watchlist write for %r", self._key)
        return bool(written)

    async def _erase(self) -> None:
        try:
            await self._storage.remove(self._key)
        except Exception:
            logger.exception("Failed to remove corrupt watchlist %r", self._key)

    def _parse_snapshot(self, raw: bytes | str) -> list[Any]:
        try:
            records = json.loads(raw)
        except ValueError as exc:
            raise StorageCorrupt(self._key) from exc
        if not isinstance(records, list):
            raise StorageCorrupt(self._key)
        return records

    def _restore(self, records: Iterable[Any]) -> dict[int, WatchlistItem]:
        restored: dict[int, WatchlistItem] = {}
        skipped = 0
        for record in records:
            if not is_restorable(record):
                skipped += 1
                continue
            try:
                item = WatchlistItem.model_validate(record)
            except ValidationError:
                skipped += 1
                continue
            if item.id in restored:
                skipped += 1
                continue
            restored[item.id] = item
        if skipped:
            logger.warning(
                "Dropped %d invalid watchlist record(s) from %r", skipped, self._key
            )
        return restored
