"""Utility helpers for parsing and displaying movie data."""

from __future__ import annotations

import re
import unicodedata
from datetime import date, datetime, timezone


def slugify(value: str) -> str:
    """Return a filesystem and URL friendly slug."""

    value = unicodedata.normalize("NFKD", value)
    value = value.encode("ascii", "ignore").decode("ascii")
    value = re.sub(r"[^a-zA-Z0-9]+", "-", value)
    value = value.strip("-")
    value = re.sub(r"-+", "-", value)
    return value.lower() or "value"


def fold_title(value: str) -> str:
    """Return a case and accent insensitive key for ordering titles."""

    decomposed = unicodedata.normalize("NFKD", value)
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    return stripped.casefold().strip()


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO-8601 timestamp; naive values are treated as UTC."""

    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_release_date(value: object) -> date | None:
    """Parse a ``YYYY-MM-DD`` release date, returning ``None`` when unusable."""

    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def format_runtime(minutes: int | None) -> str:
    if not minutes:
        return "Unknown"
    hours, remainder = divmod(minutes, 60)
    return f"{hours}h {remainder}m"


def format_currency(amount: int | float | None) -> str | None:
    """Format a USD amount; ``0`` means unknown and yields ``None``."""

    if not amount:
        return None
    return f"${amount:,.0f}"


def format_release_year(value: str | None) -> str:
    parsed = parse_release_date(value)
    if parsed is None:
        return "N/A"
    return str(parsed.year)


def format_rating(value: float) -> str:
    return f"{value:.1f}"
