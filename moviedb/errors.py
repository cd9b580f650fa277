"""Exception hierarchy shared by the gateway, decoders and watchlist store."""

from __future__ import annotations

from typing import Sequence

PathPart = str | int


def format_path(path: Sequence[PathPart]) -> str:
    """Render a validation path such as ``("results", 2, "id")`` as ``results[2].id``."""

    rendered = ""
    for part in path:
        if isinstance(part, int):
            rendered += f"[{part}]"
        elif rendered:
            rendered += f".{part}"
        else:
            rendered = part
    return rendered or "$"


class MovieDBError(Exception):
    """Base class for every error raised by the package."""


class TransportError(MovieDBError):
    """The HTTP call failed or returned a non-2xx status.

    ``status`` is ``None`` when no response was received at all.
    """

    def __init__(self, status: int | None, url: str) -> None:
        self.status = status
        self.url = url
        if status is None:
            message = f"Request to {url} failed before a response was received"
        else:
            message = f"Request to {url} failed with HTTP {status}"
        super().__init__(message)


class DecodeError(MovieDBError):
    """Base class for payloads that do not match the expected shape."""


class SchemaMismatch(DecodeError):
    """Strict validation failed at ``path``."""

    def __init__(
        self, path: Sequence[PathPart], expected_kind: str, received: str
    ) -> None:
        self.path = tuple(path)
        self.expected_kind = expected_kind
        self.received = received
        super().__init__(
            f"Schema mismatch at {format_path(self.path)}: "
            f"expected {expected_kind}, received {received}"
        )

    @property
    def location(self) -> str:
        return format_path(self.path)


class UnrecoverableSchemaMismatch(DecodeError):
    """A list resource was not list-shaped, so nothing could be salvaged."""

    def __init__(self, resource: str, reason: str) -> None:
        self.resource = resource
        self.reason = reason
        super().__init__(f"Cannot decode {resource}: {reason}")


class StorageError(MovieDBError):
    """Base class for persistence failures."""

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        super().__init__(message)


class StorageCorrupt(StorageError):
    """The persisted value under ``key`` could not be parsed."""

    def __init__(self, key: str) -> None:
        super().__init__(key, f"Stored value for {key!r} is corrupt")


class StorageUnavailable(StorageError):
    """The persistence adapter failed while performing ``operation``."""

    def __init__(self, key: str, operation: str) -> None:
        self.operation = operation
        super().__init__(key, f"Storage {operation} failed for {key!r}")
