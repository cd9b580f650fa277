"""Pytest configuration and test helpers."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable

import pytest


# Ensure the package is importable when running tests without an editable
# install. This mirrors the expected runtime layout where ``moviedb`` sits at
# the project root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO tests to run on asyncio without requiring trio."""

    return "asyncio"


@pytest.fixture
def movie_payload() -> Callable[..., dict[str, Any]]:
    """Return a factory for raw search-result movie payloads."""

    def build(movie_id: int = 1, **overrides: Any) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": movie_id,
            "title": f"Movie {movie_id}",
            "overview": "An overview.",
            "poster_path": f"/poster-{movie_id}.jpg",
            "backdrop_path": None,
            "release_date": "2020-01-01",
            "vote_average": 7.5,
            "vote_count": 100,
            "genre_ids": [18, 35],
            "adult": False,
            "original_language": "en",
            "original_title": f"Movie {movie_id}",
            "popularity": 12.5,
            "video": False,
        }
        payload.update(overrides)
        return payload

    return build


@pytest.fixture
def detail_payload(movie_payload: Callable[..., dict[str, Any]]) -> Callable[..., dict[str, Any]]:
    """Return a factory for raw movie detail payloads."""

    def build(movie_id: int = 1, **overrides: Any) -> dict[str, Any]:
        payload = movie_payload(movie_id)
        payload.pop("genre_ids")
        payload.update(
            {
                "runtime": 125,
                "budget": 1_000_000,
                "revenue": 0,
                "homepage": None,
                "imdb_id": "tt0000001",
                "status": "Released",
                "tagline": None,
                "genres": [{"id": 18, "name": "Drama"}],
                "production_companies": [
                    {"id": 3, "logo_path": None, "name": "Studio", "origin_country": "US"}
                ],
                "production_countries": [{"iso_3166_1": "US", "name": "United States"}],
                "spoken_languages": [
                    {"english_name": "English", "iso_639_1": "en", "name": "English"}
                ],
            }
        )
        payload.update(overrides)
        return payload

    return build
