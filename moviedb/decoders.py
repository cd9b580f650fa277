"""Decoders turning raw TMDB payloads into typed models.

List resources (search results and credits) are decoded leniently: when strict
validation fails, the valid rows are salvaged and the malformed ones dropped so
a single bad record never hides the rest of the page.  Single-object resources
(details, videos and reviews) are all-or-nothing.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, TypeVar

from pydantic import BaseModel

from . import resources
from .errors import SchemaMismatch, UnrecoverableSchemaMismatch
from .models import (
    CastMember,
    Credits,
    CrewMember,
    MovieDetail,
    MoviePage,
    MovieSummary,
    ReviewPage,
    VideoList,
)
from .schema import ObjectOf, build_model, conforming_fields, is_integer, validate

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def decode_search_results(raw: Any) -> MoviePage:
    """Decode a search response, salvaging valid rows when the page is malformed."""

    try:
        return validate(resources.MOVIE_PAGE, raw)
    except SchemaMismatch as exc:
        mismatch = exc

    results = raw.get("results") if isinstance(raw, dict) else None
    if not isinstance(results, list):
        raise UnrecoverableSchemaMismatch(
            "search results", "'results' is missing or not an array"
        ) from mismatch

    survivors: list[MovieSummary] = []
    for index, entry in enumerate(results):
        try:
            survivors.append(
                validate(resources.MOVIE_SUMMARY, entry, ("results", index))
            )
        except SchemaMismatch as exc:
            logger.debug("Dropping search result: %s", exc)

    dropped = len(results) - len(survivors)
    logger.warning(
        "Search response failed validation at %s; kept %d of %d results",
        mismatch.location,
        len(survivors),
        len(results),
    )
    # Totals keep the upstream values when well-formed, even if rows were dropped.
    return MoviePage(
        page=_count_or_default(raw.get("page"), 1),
        total_pages=_count_or_default(raw.get("total_pages"), 1),
        total_results=_count_or_default(raw.get("total_results"), len(survivors)),
        results=tuple(survivors),
        recovered=True,
        dropped=dropped,
    )


def decode_credits(raw: Any) -> Credits:
    """Decode a credits response, keeping every cast/crew entry with an id and name."""

    try:
        return validate(resources.CREDITS, raw)
    except SchemaMismatch as exc:
        mismatch = exc

    if not isinstance(raw, dict):
        raise UnrecoverableSchemaMismatch("credits", "payload is not an object") from mismatch

    cast = _salvage_people(raw.get("cast"), resources.CAST_MEMBER, CastMember, "cast")
    crew = _salvage_people(raw.get("crew"), resources.CREW_MEMBER, CrewMember, "crew")
    logger.warning(
        "Credits response failed validation at %s; kept %d cast and %d crew entries",
        mismatch.location,
        len(cast),
        len(crew),
    )
    return Credits(cast=tuple(cast), crew=tuple(crew), recovered=True)


def decode_movie_detail(raw: Any) -> MovieDetail:
    return validate(resources.MOVIE_DETAIL, raw)


def decode_videos(raw: Any) -> VideoList:
    return validate(resources.VIDEO_LIST, raw)


def decode_reviews(raw: Any) -> ReviewPage:
    return validate(resources.REVIEW_PAGE, raw)


def _salvage_people(
    entries: Any, schema: ObjectOf, model: type[ModelT], section: str
) -> list[ModelT]:
    if not isinstance(entries, list):
        if entries is not None:
            logger.debug("Credits %s is not an array; treating as empty", section)
        return []

    kept: list[ModelT] = []
    for index, entry in enumerate(entries):
        if not _has_identity(entry):
            continue
        fields = conforming_fields(schema, entry)
        if "order" in schema.fields:
            fields.setdefault("order", index)
        try:
            kept.append(build_model(model, fields, (section, index)))
        except SchemaMismatch as exc:
            logger.debug("Dropping credits entry: %s", exc)
    return kept


def _has_identity(entry: Any) -> bool:
    return (
        isinstance(entry, Mapping)
        and is_integer(entry.get("id"))
        and isinstance(entry.get("name"), str)
    )


def _count_or_default(value: Any, default: int) -> int:
    if is_integer(value) and value >= 0:
        return int(value)
    return default
