"""Persistence adapters used by the watchlist store.

Every adapter exposes the same three coroutines: ``read`` returns the stored
bytes or ``None``, ``write`` stores bytes and reports success, and ``remove``
deletes the key.  Native failures are raised as
:class:`~moviedb.errors.StorageUnavailable`.
"""

from __future__ import annotations

import asyncio
import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError

from .database import Database
from .db_models import StoredValue
from .errors import StorageUnavailable
from .utils import slugify


@runtime_checkable
class StorageAdapter(Protocol):
    async def read(self, key: str) -> bytes | None: ...

    async def write(self, key: str, data: bytes) -> bool: ...

    async def remove(self, key: str) -> None: ...


class MemoryStorage:
    """Process-local storage, mainly for tests."""

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self.values: dict[str, bytes] = dict(initial or {})

    async def read(self, key: str) -> bytes | None:
        return self.values.get(key)

    async def write(self, key: str, data: bytes) -> bool:
        self.values[key] = bytes(data)
        return True

    async def remove(self, key: str) -> None:
        self.values.pop(key, None)


class FileStorage:
    """Stores each key in its own file inside ``directory``."""

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self._directory / f"{slugify(key)}.json"

    async def read(self, key: str) -> bytes | None:
        path = self.path_for(key)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageUnavailable(key, "read") from exc

    async def write(self, key: str, data: bytes) -> bool:
        try:
            await asyncio.to_thread(self._write_atomic, self.path_for(key), data)
        except OSError as exc:
            raise StorageUnavailable(key, "write") from exc
        return True

    async def remove(self, key: str) -> None:
        path = self.path_for(key)
        try:
            await asyncio.to_thread(path.unlink, missing_ok=True)
        except OSError as exc:
            raise StorageUnavailable(key, "remove") from exc

    @staticmethod
    def _write_atomic(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        # One temporary file per write.
        with tempfile.NamedTemporaryFile(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
        ) as handle:
            handle.write(data)
            temporary = Path(handle.name)
        try:
            os.replace(temporary, path)
        except OSError:
            temporary.unlink(missing_ok=True)
            raise


class DatabaseStorage:
    """Stores values in the ``stored_values`` table."""

    def __init__(self, database: Database) -> None:
        self._database = database

    async def read(self, key: str) -> bytes | None:
        try:
            async with self._database.session() as session:
                record = await session.get(StoredValue, key)
                return None if record is None else record.payload
        except SQLAlchemyError as exc:
            raise StorageUnavailable(key, "read") from exc

    async def write(self, key: str, data: bytes) -> bool:
        try:
            async with self._database.session() as session:
                await session.merge(StoredValue(key=key, payload=data))
                await session.commit()
        except SQLAlchemyError as exc:
            raise StorageUnavailable(key, "write") from exc
        return True

    async def remove(self, key: str) -> None:
        try:
            async with self._database.session() as session:
                await session.execute(delete(StoredValue).where(StoredValue.key == key))
                await session.commit()
        except SQLAlchemyError as exc:
            raise StorageUnavailable(key, "remove") from exc
