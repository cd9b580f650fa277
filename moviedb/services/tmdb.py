"""Gateway to The Movie Database (TMDB) API.

Each public coroutine issues exactly one request and pipes the JSON body
through the matching decoder.  Transport failures and decoding failures are
reported as distinct error types; nothing is retried or cached here.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

import httpx

from ..config import Settings
from ..decoders import (
    decode_credits,
    decode_movie_detail,
    decode_reviews,
    decode_search_results,
    decode_videos,
)
from ..errors import SchemaMismatch, TransportError
from ..models import Credits, MovieDetail, MoviePage, ReviewPage, VideoList

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_BASE_URL = "https://image.tmdb.org/t/p"
POSTER_SIZE = "w500"
BACKDROP_SIZE = "w1280"
PROFILE_SIZE = "w185"

ResultT = TypeVar("ResultT")


def build_image_url(
    path: str | None, size: str = POSTER_SIZE, base_url: str = DEFAULT_IMAGE_BASE_URL
) -> str | None:
    """Return ``<base>/<size><path>`` or ``None`` when there is no image."""

    if not path:
        return None
    return f"{base_url.rstrip('/')}/{size}{path}"


class TMDBClient:
    """Typed client for the movie endpoints of the TMDB API."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        if not settings.tmdb_api_key:
            raise ValueError("TMDB API key is required when initialising TMDBClient")
        self._settings = settings
        self._client = http_client

    async def search_movies(self, query: str, page: int = 1) -> MoviePage:
        """Search movies by title; malformed rows are dropped rather than failing the page."""

        normalized = (query or "").strip()
        if not normalized:
            raise ValueError("Search query must not be empty")
        params = {
            "query": normalized,
            "page": self._check_page(page),
            "include_adult": "false",
        }
        return await self._request("/search/movie", decode_search_results, params)

    async def get_movie_details(self, movie_id: int) -> MovieDetail:
        endpoint = f"/movie/{self._check_id(movie_id)}"
        return await self._request(endpoint, decode_movie_detail)

    async def get_movie_credits(self, movie_id: int) -> Credits:
        endpoint = f"/movie/{self._check_id(movie_id)}/credits"
        return await self._request(endpoint, decode_credits)

    async def get_movie_videos(self, movie_id: int) -> VideoList:
        endpoint = f"/movie/{self._check_id(movie_id)}/videos"
        return await self._request(endpoint, decode_videos)

    async def get_movie_reviews(self, movie_id: int, page: int = 1) -> ReviewPage:
        endpoint = f"/movie/{self._check_id(movie_id)}/reviews"
        return await self._request(
            endpoint, decode_reviews, {"page": self._check_page(page)}
        )

    def poster_url(self, path: str | None) -> str | None:
        return build_image_url(path, POSTER_SIZE, self._settings.image_base)

    def backdrop_url(self, path: str | None) -> str | None:
        return build_image_url(path, BACKDROP_SIZE, self._settings.image_base)

    def profile_url(self, path: str | None) -> str | None:
        return build_image_url(path, PROFILE_SIZE, self._settings.image_base)

    async def _request(
        self,
        endpoint: str,
        decoder: Callable[[Any], ResultT],
        params: dict[str, Any] | None = None,
    ) -> ResultT:
        query: dict[str, Any] = {"api_key": self._settings.tmdb_api_key}
        if self._settings.tmdb_language:
            query["language"] = self._settings.tmdb_language
        query.update(params or {})

        logger.debug("TMDB request %s", endpoint)
        try:
            response = await self._client.get(endpoint, params=query)
        except httpx.HTTPError as exc:
            logger.warning("TMDB request %s failed: %s", endpoint, exc)
            raise TransportError(None, endpoint) from exc

        if not response.is_success:
            logger.warning(
                "TMDB request %s returned %s: %s",
                endpoint,
                response.status_code,
                response.text,
            )
            raise TransportError(response.status_code, endpoint)

        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning("Unexpected non-JSON TMDB response for %s", endpoint)
            raise SchemaMismatch((), "JSON document", "invalid JSON") from exc

        return decoder(payload)

    @staticmethod
    def _check_id(movie_id: int) -> int:
        if isinstance(movie_id, bool) or not isinstance(movie_id, int) or movie_id <= 0:
            raise ValueError(f"Invalid movie id: {movie_id!r}")
        return movie_id

    @staticmethod
    def _check_page(page: int) -> int:
        if isinstance(page, bool) or not isinstance(page, int) or page < 1:
            raise ValueError(f"Invalid page number: {page!r}")
        return page
