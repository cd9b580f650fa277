"""Tests for the schema algebra and the generic validator."""

from __future__ import annotations

import pytest

from moviedb import resources
from moviedb.errors import SchemaMismatch, format_path
from moviedb.models import MovieDetail, MovieSummary
from moviedb.schema import (
    BOOLEAN,
    INTEGER,
    NUMBER,
    STRING,
    array_of,
    conforming_fields,
    describe,
    is_valid,
    nullable,
    object_of,
    validate,
)


def test_validate_returns_typed_model(movie_payload) -> None:
    movie = validate(resources.MOVIE_SUMMARY, movie_payload(42))

    assert isinstance(movie, MovieSummary)
    assert movie.id == 42
    assert movie.genre_ids == (18, 35)
    assert movie.backdrop_path is None


def test_unknown_fields_are_ignored(movie_payload) -> None:
    movie = validate(resources.MOVIE_SUMMARY, movie_payload(1, brand_new_field={"x": 1}))

    assert movie.id == 1


def test_missing_required_field_fails(movie_payload) -> None:
    payload = movie_payload(1)
    del payload["overview"]

    with pytest.raises(SchemaMismatch) as excinfo:
        validate(resources.MOVIE_SUMMARY, payload)

    assert excinfo.value.path == ("overview",)
    assert excinfo.value.expected_kind == "string"
    assert excinfo.value.received == "missing"


def test_wrong_kind_reports_path_and_received_kind(movie_payload) -> None:
    with pytest.raises(SchemaMismatch) as excinfo:
        validate(resources.MOVIE_SUMMARY, movie_payload(1, id="1"))

    assert excinfo.value.location == "id"
    assert excinfo.value.received == "string"


def test_null_only_allowed_for_nullable_fields(movie_payload) -> None:
    assert validate(resources.MOVIE_SUMMARY, movie_payload(1, poster_path=None)).poster_path is None

    with pytest.raises(SchemaMismatch) as excinfo:
        validate(resources.MOVIE_SUMMARY, movie_payload(1, title=None))

    assert excinfo.value.received == "null"


def test_nullable_field_mismatch_describes_nullable_kind() -> None:
    schema = object_of({"tagline": nullable(STRING)})

    with pytest.raises(SchemaMismatch) as excinfo:
        validate(schema, {"tagline": 5})

    assert excinfo.value.expected_kind == "string | null"


def test_booleans_are_not_numbers() -> None:
    assert not is_valid(NUMBER, True)
    assert not is_valid(INTEGER, False)
    assert is_valid(BOOLEAN, False)
    assert is_valid(NUMBER, 7.25)


def test_integer_accepts_integral_floats_only() -> None:
    assert validate(INTEGER, 3.0) == 3
    assert not is_valid(INTEGER, 3.5)


def test_single_bad_array_element_fails_whole_array() -> None:
    schema = array_of(INTEGER)

    with pytest.raises(SchemaMismatch) as excinfo:
        validate(schema, [1, 2, "three", 4])

    assert excinfo.value.path == (2,)


def test_nested_paths_are_rendered(movie_payload) -> None:
    payload = {
        "page": 1,
        "results": [movie_payload(1), movie_payload(2, vote_count="many")],
        "total_pages": 1,
        "total_results": 2,
    }

    with pytest.raises(SchemaMismatch) as excinfo:
        validate(resources.MOVIE_PAGE, payload)

    assert excinfo.value.location == "results[1].vote_count"
    assert "results[1].vote_count" in str(excinfo.value)


def test_model_constraints_surface_as_schema_mismatch(movie_payload) -> None:
    with pytest.raises(SchemaMismatch) as excinfo:
        validate(resources.MOVIE_SUMMARY, movie_payload(1, vote_count=-3))

    assert excinfo.value.path == ("vote_count",)


def test_detail_schema_replaces_genre_ids_with_genres(detail_payload) -> None:
    assert "genre_ids" not in resources.MOVIE_DETAIL.fields
    detail = validate(resources.MOVIE_DETAIL, detail_payload(9))

    assert isinstance(detail, MovieDetail)
    assert detail.genres[0].name == "Drama"
    assert detail.spoken_languages[0].iso_639_1 == "en"


def test_non_object_root_fails() -> None:
    with pytest.raises(SchemaMismatch) as excinfo:
        validate(resources.VIDEO_LIST, ["not", "an", "object"])

    assert excinfo.value.path == ()
    assert excinfo.value.received == "array"


def test_plain_object_schema_returns_dict() -> None:
    schema = object_of({"name": STRING, "tags": array_of(STRING)})

    assert validate(schema, {"name": "x", "tags": ["a"], "extra": 1}) == {
        "name": "x",
        "tags": ["a"],
    }


def test_conforming_fields_keeps_only_valid_fields() -> None:
    kept = conforming_fields(
        resources.CAST_MEMBER,
        {"id": 1, "name": "Actor", "character": 12, "order": 3},
    )

    assert kept == {"id": 1, "name": "Actor", "order": 3}


def test_describe_and_format_path() -> None:
    assert describe(array_of(nullable(NUMBER))) == "array of number | null"
    assert format_path(()) == "$"
    assert format_path(("cast", 0, "name")) == "cast[0].name"
