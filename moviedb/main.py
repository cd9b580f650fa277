"""HTTP surface exposing the movie gateway and the watchlist to a UI."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any, Awaitable, TypeVar

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import resources
from .config import Settings, settings
from .database import Database
from .errors import DecodeError, SchemaMismatch, TransportError
from .models import MovieSummary
from .schema import validate
from .services.tmdb import POSTER_SIZE, TMDBClient, build_image_url
from .storage import DatabaseStorage, FileStorage, MemoryStorage, StorageAdapter
from .utils import format_currency, format_rating, format_release_year, format_runtime
from .watchlist import WatchlistStore

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT")

app: FastAPI


def build_storage(config: Settings, database: Database | None) -> StorageAdapter:
    """Return the persistence adapter selected by ``WATCHLIST_STORAGE``."""

    if config.watchlist_storage == "memory":
        return MemoryStorage()
    if config.watchlist_storage == "file":
        return FileStorage(config.watchlist_file_path)
    if database is None:
        raise ValueError("A database is required for WATCHLIST_STORAGE=database")
    return DatabaseStorage(database)


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            base_url=settings.tmdb_base,
            timeout=httpx.Timeout(settings.http_timeout_seconds),
        )
    )
    database: Database | None = None
    if settings.watchlist_storage == "database":
        database = Database(settings.database_url)
        await database.create_all()

    if settings.tmdb_api_key:
        fastapi_app.state.tmdb_client = TMDBClient(settings, http_client)
    else:
        logger.warning("TMDB_API_KEY is not set; movie lookups are disabled")
    fastapi_app.state.watchlist = await WatchlistStore.open(
        build_storage(settings, database), settings.watchlist_storage_key
    )

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        if database is not None:
            await database.dispose()
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Movie search and a persistent personal watchlist backed by TMDB",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def get_tmdb_client(fastapi_app: FastAPI) -> TMDBClient:
    client = getattr(fastapi_app.state, "tmdb_client", None)
    if not isinstance(client, TMDBClient):
        raise HTTPException(status_code=503, detail="TMDB client not configured")
    return client


def get_watchlist(fastapi_app: FastAPI) -> WatchlistStore:
    store = getattr(fastapi_app.state, "watchlist", None)
    if not isinstance(store, WatchlistStore):
        raise RuntimeError("Watchlist store not initialised")
    return store


async def _call_gateway(call: Awaitable[ResultT]) -> ResultT:
    """Await a gateway call and turn its failures into HTTP errors."""

    try:
        return await call
    except TransportError as exc:
        raise HTTPException(
            status_code=502,
            detail={"error": "transport", "status": exc.status, "message": str(exc)},
        ) from exc
    except SchemaMismatch as exc:
        raise HTTPException(
            status_code=502,
            detail={"error": "schema_mismatch", "path": exc.location, "message": str(exc)},
        ) from exc
    except DecodeError as exc:
        raise HTTPException(
            status_code=502, detail={"error": "unrecoverable", "message": str(exc)}
        ) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


async def _read_movie(request: Request) -> MovieSummary:
    try:
        payload = await request.json()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid payload") from exc
    try:
        return validate(resources.MOVIE_SUMMARY, payload)
    except SchemaMismatch as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _with_artwork(client: TMDBClient, record: dict[str, Any]) -> dict[str, Any]:
    record["poster_url"] = client.poster_url(record.get("poster_path"))
    record["backdrop_url"] = client.backdrop_url(record.get("backdrop_path"))
    return record


def _with_profile(client: TMDBClient, record: dict[str, Any]) -> dict[str, Any]:
    record["profile_url"] = client.profile_url(record.get("profile_path"))
    return record


def _watchlist_payload(
    store: WatchlistStore, sort_by: str | None = None, direction: str | None = None
) -> dict[str, Any]:
    try:
        items = store.sorted_view(sort_by, direction)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {
        "items": [
            {
                **item.to_record(),
                "poster_url": build_image_url(
                    item.poster_path, POSTER_SIZE, settings.image_base
                ),
            }
            for item in items
        ],
        "sort_by": sort_by or store.sort_key.value,
        "direction": direction or store.sort_direction.value,
        "total": store.stats().total_movies,
    }


def register_routes(fastapi_app: FastAPI) -> None:
    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/api/search")
    async def search_endpoint(query: str, page: int = 1) -> JSONResponse:
        client = get_tmdb_client(fastapi_app)
        result = await _call_gateway(client.search_movies(query, page))
        payload = result.model_dump(mode="json")
        payload["results"] = [_with_artwork(client, movie) for movie in payload["results"]]
        payload["next_page"] = result.next_page
        return JSONResponse(payload)

    @fastapi_app.get("/api/movies/{movie_id}")
    async def movie_details_endpoint(movie_id: int) -> JSONResponse:
        client = get_tmdb_client(fastapi_app)
        movie = await _call_gateway(client.get_movie_details(movie_id))
        payload = _with_artwork(client, movie.model_dump(mode="json"))
        payload["display"] = {
            "runtime": format_runtime(movie.runtime),
            "budget": format_currency(movie.budget),
            "revenue": format_currency(movie.revenue),
            "release_year": format_release_year(movie.release_date),
            "rating": format_rating(movie.vote_average),
        }
        payload["in_watchlist"] = get_watchlist(fastapi_app).contains(movie.id)
        return JSONResponse(payload)

    @fastapi_app.get("/api/movies/{movie_id}/credits")
    async def movie_credits_endpoint(movie_id: int) -> JSONResponse:
        client = get_tmdb_client(fastapi_app)
        credits = await _call_gateway(client.get_movie_credits(movie_id))
        payload = credits.model_dump(mode="json")
        payload["cast"] = [_with_profile(client, member) for member in payload["cast"]]
        payload["crew"] = [_with_profile(client, member) for member in payload["crew"]]
        director = credits.director
        payload["director"] = (
            _with_profile(client, director.model_dump(mode="json")) if director else None
        )
        return JSONResponse(payload)

    @fastapi_app.get("/api/movies/{movie_id}/videos")
    async def movie_videos_endpoint(movie_id: int) -> JSONResponse:
        client = get_tmdb_client(fastapi_app)
        videos = await _call_gateway(client.get_movie_videos(movie_id))
        payload = {
            "results": [
                {**video.model_dump(mode="json"), "youtube_url": video.youtube_url}
                for video in videos.results
            ]
        }
        trailer = videos.trailer
        payload["trailer"] = (
            {**trailer.model_dump(mode="json"), "youtube_url": trailer.youtube_url}
            if trailer
            else None
        )
        return JSONResponse(payload)

    @fastapi_app.get("/api/movies/{movie_id}/reviews")
    async def movie_reviews_endpoint(movie_id: int, page: int = 1) -> JSONResponse:
        client = get_tmdb_client(fastapi_app)
        reviews = await _call_gateway(client.get_movie_reviews(movie_id, page))
        return JSONResponse(reviews.model_dump(mode="json"))

    @fastapi_app.get("/api/watchlist")
    async def watchlist_endpoint(
        sort_by: str | None = None, direction: str | None = None
    ) -> JSONResponse:
        store = get_watchlist(fastapi_app)
        return JSONResponse(_watchlist_payload(store, sort_by, direction))

    @fastapi_app.post("/api/watchlist")
    async def add_to_watchlist_endpoint(request: Request) -> JSONResponse:
        store = get_watchlist(fastapi_app)
        movie = await _read_movie(request)
        added = await store.add(movie)
        return JSONResponse({"added": added, "total": len(store)})

    @fastapi_app.post("/api/watchlist/toggle")
    async def toggle_watchlist_endpoint(request: Request) -> JSONResponse:
        store = get_watchlist(fastapi_app)
        movie = await _read_movie(request)
        present = await store.toggle(movie)
        return JSONResponse({"in_watchlist": present, "total": len(store)})

    @fastapi_app.delete("/api/watchlist/{movie_id}")
    async def remove_from_watchlist_endpoint(movie_id: int) -> JSONResponse:
        store = get_watchlist(fastapi_app)
        removed = await store.remove(movie_id)
        return JSONResponse({"removed": removed, "total": len(store)})

    @fastapi_app.delete("/api/watchlist")
    async def clear_watchlist_endpoint() -> JSONResponse:
        store = get_watchlist(fastapi_app)
        cleared = await store.clear()
        return JSONResponse({"cleared": cleared, "total": 0})

    @fastapi_app.put("/api/watchlist/sort")
    async def update_sort_endpoint(request: Request) -> JSONResponse:
        store = get_watchlist(fastapi_app)
        try:
            body = await request.json()
        except ValueError as exc:
            raise HTTPException(status_code=400, detail="Invalid payload") from exc
        if not isinstance(body, dict) or "sort_by" not in body:
            raise HTTPException(status_code=400, detail="sort_by is required")
        try:
            sort_key, direction = store.update_sort(body["sort_by"], body.get("direction"))
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return JSONResponse(
            {"sort_by": sort_key.value, "direction": direction.value, "label": sort_key.label}
        )


app = create_app()
