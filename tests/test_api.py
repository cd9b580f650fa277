"""Tests for the HTTP routes exposing the gateway and watchlist."""

from __future__ import annotations

import httpx
from fastapi import FastAPI
from fastapi.testclient import TestClient

from moviedb.config import Settings
from moviedb.main import register_routes
from moviedb.services.tmdb import TMDBClient
from moviedb.storage import MemoryStorage
from moviedb.watchlist import WatchlistStore


def build_app(handler=None) -> tuple[FastAPI, WatchlistStore]:
    fastapi_app = FastAPI()
    register_routes(fastapi_app)
    store = WatchlistStore(MemoryStorage())
    fastapi_app.state.watchlist = store
    if handler is not None:
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(handler), base_url="https://api.example.com/3"
        )
        settings = Settings(
            _env_file=None,
            TMDB_API_KEY="key",
            TMDB_IMAGE_BASE_URL="https://images.example.com",
        )
        fastapi_app.state.tmdb_client = TMDBClient(settings, http_client)
    return fastapi_app, store


def test_search_endpoint_returns_page_with_next_page(movie_payload) -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"page": 1, "results": [movie_payload(1)], "total_pages": 2, "total_results": 21},
        )

    fastapi_app, _ = build_app(handler)
    with TestClient(fastapi_app) as client:
        response = client.get("/api/search", params={"query": "alien"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["next_page"] == 2
    assert payload["results"][0]["id"] == 1
    assert payload["recovered"] is False
    assert payload["results"][0]["poster_url"] == "https://images.example.com/w500/poster-1.jpg"
    assert payload["results"][0]["backdrop_url"] is None


def test_upstream_failures_map_to_bad_gateway() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={})

    fastapi_app, _ = build_app(handler)
    with TestClient(fastapi_app) as client:
        response = client.get("/api/movies/5")

    assert response.status_code == 502
    assert response.json()["detail"]["status"] == 500


def test_schema_mismatch_reports_path(detail_payload) -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=detail_payload(5, runtime="long"))

    fastapi_app, _ = build_app(handler)
    with TestClient(fastapi_app) as client:
        response = client.get("/api/movies/5")

    assert response.status_code == 502
    assert response.json()["detail"]["path"] == "runtime"


def test_blank_search_is_a_bad_request() -> None:
    fastapi_app, _ = build_app(lambda _: httpx.Response(200, json={}))
    with TestClient(fastapi_app) as client:
        response = client.get("/api/search", params={"query": "  "})

    assert response.status_code == 400


def test_lookups_without_api_key_are_unavailable() -> None:
    fastapi_app, _ = build_app()
    with TestClient(fastapi_app) as client:
        response = client.get("/api/movies/5/credits")

    assert response.status_code == 503


def test_watchlist_mutations_and_sorting(movie_payload) -> None:
    fastapi_app, store = build_app()
    with TestClient(fastapi_app) as client:
        assert client.post("/api/watchlist", json=movie_payload(1, vote_average=5.0)).json() == {
            "added": True,
            "total": 1,
        }
        assert client.post("/api/watchlist", json=movie_payload(1)).json()["added"] is False
        toggled = client.post("/api/watchlist/toggle", json=movie_payload(2, vote_average=9.0))
        assert toggled.json() == {"in_watchlist": True, "total": 2}

        sort_response = client.put("/api/watchlist/sort", json={"sort_by": "rating"})
        assert sort_response.json() == {"sort_by": "rating", "direction": "asc", "label": "Rating"}

        listing = client.get("/api/watchlist").json()
        assert [item["id"] for item in listing["items"]] == [1, 2]
        assert listing["items"][0]["poster_url"].endswith("/w500/poster-1.jpg")
        assert listing["items"][0]["dateAdded"]

        descending = client.get("/api/watchlist", params={"sort_by": "rating", "direction": "desc"})
        assert [item["id"] for item in descending.json()["items"]] == [2, 1]

        assert client.delete("/api/watchlist/1").json() == {"removed": True, "total": 1}
        assert client.delete("/api/watchlist").json() == {"cleared": True, "total": 0}
        assert client.delete("/api/watchlist").json() == {"cleared": False, "total": 0}

    assert len(store) == 0


def test_watchlist_rejects_invalid_movies(movie_payload) -> None:
    fastapi_app, store = build_app()
    with TestClient(fastapi_app) as client:
        response = client.post("/api/watchlist", json=movie_payload(1, id="one"))
        bad_sort = client.put("/api/watchlist/sort", json={"sort_by": "budget"})
        bad_view = client.get("/api/watchlist", params={"sort_by": "budget"})

    assert response.status_code == 400
    assert bad_sort.status_code == 400
    assert bad_view.status_code == 400
    assert len(store) == 0


def test_detail_endpoint_includes_artwork_and_display_values(detail_payload) -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=detail_payload(5, backdrop_path="/wide.jpg"))

    fastapi_app, _ = build_app(handler)
    with TestClient(fastapi_app) as client:
        payload = client.get("/api/movies/5").json()

    assert payload["poster_url"] == "https://images.example.com/w500/poster-5.jpg"
    assert payload["backdrop_url"] == "https://images.example.com/w1280/wide.jpg"
    assert payload["display"] == {
        "runtime": "2h 5m",
        "budget": "$1,000,000",
        "revenue": None,
        "release_year": "2020",
        "rating": "7.5",
    }
    assert payload["in_watchlist"] is False


def test_credits_endpoint_includes_profile_urls() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "cast": [
                    {
                        "id": 1,
                        "name": "Lead",
                        "character": "Hero",
                        "profile_path": "/lead.jpg",
                        "order": 0,
                    }
                ],
                "crew": [
                    {
                        "id": 2,
                        "name": "Auteur",
                        "job": "Director",
                        "department": "Directing",
                        "profile_path": None,
                    }
                ],
            },
        )

    fastapi_app, _ = build_app(handler)
    with TestClient(fastapi_app) as client:
        payload = client.get("/api/movies/5/credits").json()

    assert payload["cast"][0]["profile_url"] == "https://images.example.com/w185/lead.jpg"
    assert payload["crew"][0]["profile_url"] is None
    assert payload["director"]["name"] == "Auteur"
    assert payload["director"]["profile_url"] is None


def test_videos_endpoint_includes_trailer_link() -> None:
    video = {
        "id": "v1",
        "key": "abc123",
        "name": "Official Trailer",
        "site": "YouTube",
        "type": "Trailer",
        "official": True,
        "published_at": "2020-01-01T00:00:00.000Z",
    }

    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json={"results": [{**video, "id": "v0", "site": "Vimeo"}, video]}
        )

    fastapi_app, _ = build_app(handler)
    with TestClient(fastapi_app) as client:
        payload = client.get("/api/movies/5/videos").json()

    assert payload["results"][0]["youtube_url"] is None
    assert payload["trailer"]["id"] == "v1"
    assert payload["trailer"]["youtube_url"] == "https://www.youtube.com/watch?v=abc123"
