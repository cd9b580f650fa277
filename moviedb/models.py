"""Pydantic models describing the typed values produced by the decoders."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class FrozenModel(BaseModel):
    """Immutable base; unknown keys are ignored for forward compatibility."""

    model_config = ConfigDict(frozen=True, extra="ignore")


class MovieBase(FrozenModel):
    id: int
    title: str
    overview: str = ""
    poster_path: str | None = None
    backdrop_path: str | None = None
    release_date: str = ""
    vote_average: float = Field(default=0.0, ge=0, le=10)
    vote_count: int = Field(default=0, ge=0)
    adult: bool = False
    original_language: str = ""
    original_title: str = ""
    popularity: float = 0.0
    video: bool = False


class MovieSummary(MovieBase):
    """A movie as it appears in search results."""

    genre_ids: tuple[int, ...] = ()


class Genre(FrozenModel):
    id: int
    name: str


class ProductionCompany(FrozenModel):
    id: int
    logo_path: str | None = None
    name: str
    origin_country: str = ""


class ProductionCountry(FrozenModel):
    iso_3166_1: str
    name: str


class SpokenLanguage(FrozenModel):
    english_name: str
    iso_639_1: str
    name: str


class MovieDetail(MovieBase):
    """Full movie details.

    ``budget`` and ``revenue`` use ``0`` to mean unknown.
    """

    runtime: int | None = None
    budget: int = Field(default=0, ge=0)
    revenue: int = Field(default=0, ge=0)
    homepage: str | None = None
    imdb_id: str | None = None
    status: str = ""
    tagline: str | None = None
    genres: tuple[Genre, ...] = ()
    production_companies: tuple[ProductionCompany, ...] = ()
    production_countries: tuple[ProductionCountry, ...] = ()
    spoken_languages: tuple[SpokenLanguage, ...] = ()

    def to_summary(self) -> MovieSummary:
        """Return the summary view used when adding a detail page to the watchlist."""

        data = self.model_dump(include=set(MovieBase.model_fields))
        return MovieSummary(**data, genre_ids=tuple(genre.id for genre in self.genres))


class PagedResult(FrozenModel):
    page: int = 1
    total_pages: int = 1
    total_results: int = 0

    @property
    def next_page(self) -> int | None:
        """Return the page to request next, or ``None`` on the last page."""

        if self.page < self.total_pages:
            return self.page + 1
        return None


class MoviePage(PagedResult):
    """One page of search results.

    ``recovered`` is set when malformed rows were dropped to salvage the page;
    ``dropped`` counts them.
    """

    results: tuple[MovieSummary, ...] = ()
    recovered: bool = False
    dropped: int = 0


class CastMember(FrozenModel):
    id: int
    name: str
    character: str = ""
    profile_path: str | None = None
    order: int = 0


class CrewMember(FrozenModel):
    id: int
    name: str
    job: str = ""
    department: str = ""
    profile_path: str | None = None


class Credits(FrozenModel):
    cast: tuple[CastMember, ...] = ()
    crew: tuple[CrewMember, ...] = ()
    recovered: bool = False

    @property
    def director(self) -> CrewMember | None:
        return next(iter(self.crew_with_job("Director")), None)

    def crew_with_job(self, job: str) -> list[CrewMember]:
        return [member for member in self.crew if member.job == job]

    def top_cast(self, limit: int = 8) -> list[CastMember]:
        """Return the first ``limit`` cast members by billing order."""

        if limit <= 0:
            return []
        return sorted(self.cast, key=lambda member: member.order)[:limit]


class Video(FrozenModel):
    id: str
    key: str
    name: str
    site: str
    type: str
    official: bool
    published_at: str

    @property
    def is_trailer(self) -> bool:
        return self.type == "Trailer" and self.site == "YouTube"

    @property
    def youtube_url(self) -> str | None:
        if self.site != "YouTube":
            return None
        return f"https://www.youtube.com/watch?v={self.key}"


class VideoList(FrozenModel):
    results: tuple[Video, ...] = ()

    @property
    def trailer(self) -> Video | None:
        """Return the first playable trailer, if any."""

        return next((video for video in self.results if video.is_trailer), None)


class ReviewAuthorDetails(FrozenModel):
    name: str
    username: str
    avatar_path: str | None = None
    rating: float | None = Field(default=None, ge=0, le=10)


class Review(FrozenModel):
    id: str
    author: str
    author_details: ReviewAuthorDetails
    content: str
    created_at: str
    updated_at: str
    url: str


class ReviewPage(PagedResult):
    results: tuple[Review, ...] = ()

    def preview(self, limit: int = 3) -> tuple[Review, ...]:
        return self.results[: max(limit, 0)]


class WatchlistItem(MovieSummary):
    """A movie saved to the watchlist; ``date_added`` never changes after insertion."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    date_added: str = Field(alias="dateAdded")

    @classmethod
    def from_movie(cls, movie: MovieSummary, added_at: datetime | None = None) -> "WatchlistItem":
        moment = added_at or datetime.now(timezone.utc)
        data = movie.model_dump(include=set(MovieSummary.model_fields))
        return cls(**data, dateAdded=moment.isoformat().replace("+00:00", "Z"))

    def to_record(self) -> dict[str, object]:
        """Return the JSON-compatible record written to storage."""

        return self.model_dump(mode="json", by_alias=True)
