"""
Domain models using Pydantic.
All data structures for the movie discovery pipeline.
"""
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

ANY = "Any"
NEUTRAL = 5

SLIDERS: Tuple[str, ...] = (
    "mood_intensity",
    "humor_level",
    "violence_level",
    "romance_level",
    "complexity_level",
)

LANGUAGE_CODES: Dict[str, str] = {
    "English": "en",
    "Spanish": "es",
    "French": "fr",
    "German": "de",
    "Italian": "it",
    "Japanese": "ja",
    "Korean": "ko",
    "Mandarin": "zh",
    "Hindi": "hi",
}


class CamelModel(BaseModel):
    """Base model exposing camelCase JSON while keeping snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Domain Models (Internal)
# =============================================================================


class PreferenceProfile(CamelModel):
    """
    A user's per-search preferences.

    Range constraints are closed intervals; ``None`` means unconstrained.
    Sliders and genre affinities run 1-10 with 5 as neutral.
    """

    description: Optional[str] = Field(default=None, description="Free-text wish")
    year_range: Optional[Tuple[int, int]] = Field(default=None, description="Release years [min, max]")
    runtime_range: Optional[Tuple[int, int]] = Field(default=None, description="Runtime minutes [min, max]")
    rating_range: Optional[Tuple[float, float]] = Field(default=None, description="Rating 0-10 [min, max]")
    age_rating: str = Field(default=ANY, description="Certification, e.g. PG-13, or 'Any'")
    language: str = Field(default=ANY, description="Language name or ISO code, or 'Any'")
    genres: Dict[str, int] = Field(default_factory=dict, description="Genre name -> affinity (1-10)")

    mood_intensity: int = Field(default=NEUTRAL, ge=1, le=10)
    humor_level: int = Field(default=NEUTRAL, ge=1, le=10)
    violence_level: int = Field(default=NEUTRAL, ge=1, le=10)
    romance_level: int = Field(default=NEUTRAL, ge=1, le=10)
    complexity_level: int = Field(default=NEUTRAL, ge=1, le=10)

    @field_validator("year_range", "runtime_range", "rating_range")
    @classmethod
    def _check_range(cls, value: Optional[Tuple[Any, Any]]) -> Optional[Tuple[Any, Any]]:
        if value is not None and value[0] > value[1]:
            raise ValueError(f"range minimum {value[0]} exceeds maximum {value[1]}")
        return value

    @field_validator("genres")
    @classmethod
    def _check_affinities(cls, value: Dict[str, int]) -> Dict[str, int]:
        for genre, affinity in value.items():
            if not 1 <= affinity <= 10:
                raise ValueError(f"affinity for {genre!r} must be between 1 and 10")
        return value

    @field_validator("language")
    @classmethod
    def _check_language(cls, value: str) -> str:
        if value == ANY or value in LANGUAGE_CODES:
            return value
        if len(value) == 2 and value.isalpha():
            return value.lower()
        raise ValueError(f"unsupported language: {value!r}")

    def non_neutral_sliders(self) -> List[Tuple[str, int]]:
        """Sliders that differ from neutral, in declaration order."""
        return [
            (name, getattr(self, name))
            for name in SLIDERS
            if getattr(self, name) != NEUTRAL
        ]

    def has_subjective_signal(self) -> bool:
        """True when a description or any non-neutral slider is present."""
        if self.description and self.description.strip():
            return True
        return bool(self.non_neutral_sliders())

    def language_code(self) -> Optional[str]:
        """ISO 639-1 code for the language constraint, None for 'Any'."""
        if self.language == ANY:
            return None
        return LANGUAGE_CODES.get(self.language, self.language)


class Genre(CamelModel):
    """Catalog genre vocabulary entry."""

    id: int
    name: str


class CatalogSummary(CamelModel):
    """Discovery listing record; resolved to a CatalogItem before filtering."""

    id: int
    title: str = ""
    popularity: float = 0.0
    rating: float = 0.0
    release_date: Optional[date] = None


class DiscoverPage(CamelModel):
    """One page of discovery results."""

    page: int = 1
    total_pages: int = 0
    results: List[CatalogSummary] = Field(default_factory=list)


class DiscoverQuery(CamelModel):
    """Constraints the catalog's discovery endpoint can apply server-side."""

    year_range: Optional[Tuple[int, int]] = None
    rating_range: Optional[Tuple[float, float]] = None
    language: Optional[str] = None

    @classmethod
    def from_profile(cls, profile: PreferenceProfile) -> "DiscoverQuery":
        return cls(
            year_range=profile.year_range,
            rating_range=profile.rating_range,
            language=profile.language_code(),
        )


class CatalogItem(CamelModel):
    """
    Enriched movie record.
    Resolved from the catalog detail endpoint (cache-backed).
    """

    id: int = Field(..., description="Catalog identifier")
    title: str = Field(..., description="Movie title")
    overview: str = Field(default="", description="Plot overview")
    release_date: Optional[date] = Field(default=None)
    runtime: int = Field(default=0, ge=0, description="Runtime in minutes")
    rating: float = Field(default=0.0, ge=0, le=10, description="Aggregate vote average")
    vote_count: int = Field(default=0, ge=0)
    popularity: float = Field(default=0.0, ge=0)
    certification: str = Field(default="NR", description="US certification")
    language: str = Field(default="en", description="Original language code")
    genres: List[Genre] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    tagline: str = ""
    poster_path: Optional[str] = None
    cast: List[str] = Field(default_factory=list)
    director: str = ""

    @property
    def year(self) -> Optional[int]:
        return self.release_date.year if self.release_date else None

    @property
    def genre_names(self) -> List[str]:
        return [genre.name for genre in self.genres]


class RankedResult(CatalogItem):
    """A catalog item annotated by the ranking stage."""

    match_score: float = Field(..., ge=0.0, le=1.0)
    match_reason: str

    @classmethod
    def from_item(cls, item: CatalogItem, score: float, reason: str) -> "RankedResult":
        return cls(**item.model_dump(), match_score=score, match_reason=reason)


class RankedElement(BaseModel):
    """One element of the ranking service's JSON answer."""

    model_config = ConfigDict(extra="ignore")

    id: int = Field(..., validation_alias=AliasChoices("id", "tmdbId"))
    score: float = Field(..., ge=0.0, le=1.0)
    reason: str


# =============================================================================
# API Models (External)
# =============================================================================


class SearchResponse(CamelModel):
    """Search endpoint response; identical shape for every ranking branch."""

    count: int = Field(..., description="Number of movies returned")
    movies: List[RankedResult] = Field(..., description="Movies ordered by match score")


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: Dict[str, Any] = Field(..., description="Error details")
