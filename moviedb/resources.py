"""Schema definitions for each TMDB resource, bound to their typed models."""

from __future__ import annotations

from .models import (
    CastMember,
    Credits,
    CrewMember,
    Genre,
    MovieDetail,
    MoviePage,
    MovieSummary,
    ProductionCompany,
    ProductionCountry,
    Review,
    ReviewAuthorDetails,
    ReviewPage,
    SpokenLanguage,
    Video,
    VideoList,
)
from .schema import (
    BOOLEAN,
    INTEGER,
    NUMBER,
    STRING,
    array_of,
    nullable,
    object_of,
)

MOVIE_SUMMARY = object_of(
    {
        "id": INTEGER,
        "title": STRING,
        "overview": STRING,
        "poster_path": nullable(STRING),
        "backdrop_path": nullable(STRING),
        "release_date": STRING,
        "vote_average": NUMBER,
        "vote_count": INTEGER,
        "genre_ids": array_of(INTEGER),
        "adult": BOOLEAN,
        "original_language": STRING,
        "original_title": STRING,
        "popularity": NUMBER,
        "video": BOOLEAN,
    },
    model=MovieSummary,
)

MOVIE_PAGE = object_of(
    {
        "page": INTEGER,
        "results": array_of(MOVIE_SUMMARY),
        "total_pages": INTEGER,
        "total_results": INTEGER,
    },
    model=MoviePage,
)

GENRE = object_of({"id": INTEGER, "name": STRING}, model=Genre)

PRODUCTION_COMPANY = object_of(
    {
        "id": INTEGER,
        "logo_path": nullable(STRING),
        "name": STRING,
        "origin_country": STRING,
    },
    model=ProductionCompany,
)

PRODUCTION_COUNTRY = object_of(
    {"iso_3166_1": STRING, "name": STRING}, model=ProductionCountry
)

SPOKEN_LANGUAGE = object_of(
    {"english_name": STRING, "iso_639_1": STRING, "name": STRING},
    model=SpokenLanguage,
)

# Details replace ``genre_ids`` with expanded ``genres`` objects.
MOVIE_DETAIL = MOVIE_SUMMARY.extend(
    {
        "runtime": nullable(INTEGER),
        "budget": INTEGER,
        "revenue": INTEGER,
        "homepage": nullable(STRING),
        "imdb_id": nullable(STRING),
        "status": STRING,
        "tagline": nullable(STRING),
        "genres": array_of(GENRE),
        "production_companies": array_of(PRODUCTION_COMPANY),
        "production_countries": array_of(PRODUCTION_COUNTRY),
        "spoken_languages": array_of(SPOKEN_LANGUAGE),
    },
    omit=("genre_ids",),
    model=MovieDetail,
)

CAST_MEMBER = object_of(
    {
        "id": INTEGER,
        "name": STRING,
        "character": STRING,
        "profile_path": nullable(STRING),
        "order": INTEGER,
    },
    model=CastMember,
)

CREW_MEMBER = object_of(
    {
        "id": INTEGER,
        "name": STRING,
        "job": STRING,
        "department": STRING,
        "profile_path": nullable(STRING),
    },
    model=CrewMember,
)

# The credits payload carries the movie id as well; it is not needed.
CREDITS = object_of(
    {"cast": array_of(CAST_MEMBER), "crew": array_of(CREW_MEMBER)},
    model=Credits,
)

VIDEO = object_of(
    {
        "id": STRING,
        "key": STRING,
        "name": STRING,
        "site": STRING,
        "type": STRING,
        "official": BOOLEAN,
        "published_at": STRING,
    },
    model=Video,
)

VIDEO_LIST = object_of({"results": array_of(VIDEO)}, model=VideoList)

REVIEW_AUTHOR_DETAILS = object_of(
    {
        "name": STRING,
        "username": STRING,
        "avatar_path": nullable(STRING),
        "rating": nullable(NUMBER),
    },
    model=ReviewAuthorDetails,
)

REVIEW = object_of(
    {
        "id": STRING,
        "author": STRING,
        "author_details": REVIEW_AUTHOR_DETAILS,
        "content": STRING,
        "created_at": STRING,
        "updated_at": STRING,
        "url": STRING,
    },
    model=Review,
)

REVIEW_PAGE = object_of(
    {
        "page": INTEGER,
        "results": array_of(REVIEW),
        "total_pages": INTEGER,
        "total_results": INTEGER,
    },
    model=ReviewPage,
)
