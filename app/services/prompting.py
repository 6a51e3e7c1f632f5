"""
Ranking prompt construction and response validation.

The request side turns the non-neutral part of a preference profile plus a
compact candidate summary into prompt text. The response side strips code
fences and validates the answer against a strict schema; anything that does
not conform is treated as "no good matches" rather than raised.
"""
import json
import logging
import re
from typing import Collection, Dict, List, Optional

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from app.models.schemas import NEUTRAL, CatalogItem, PreferenceProfile, RankedElement

logger = logging.getLogger(__name__)

OVERVIEW_CHARS = 200
MAX_KEYWORDS = 6

# slider -> (label, high-end wording, low-end wording)
SLIDER_WORDING: Dict[str, tuple] = {
    "mood_intensity": ("Mood", "intense/dramatic", "calm/peaceful"),
    "humor_level": ("Humor", "comedic/funny", "serious/dramatic"),
    "violence_level": ("Violence", "action-heavy", "minimal violence"),
    "romance_level": ("Romance", "romantic focus", "minimal romance"),
    "complexity_level": ("Plot", "complex/layered", "simple/straightforward"),
}

_FENCED = re.compile(r"^```[\w-]*[ \t]*\n?(?P<body>.*?)\n?```$", re.DOTALL)
_ELEMENTS = TypeAdapter(List[RankedElement])


class CandidateSummary(BaseModel):
    """Compact per-movie payload sent to the ranking service."""

    id: int
    title: str
    year: Optional[int] = None
    overview: str = ""
    genres: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    rating: float = 0.0

    @classmethod
    def from_item(cls, item: CatalogItem) -> "CandidateSummary":
        return cls(
            id=item.id,
            title=item.title,
            year=item.year,
            overview=(item.overview or "No description")[:OVERVIEW_CHARS],
            genres=item.genre_names,
            keywords=item.keywords[:MAX_KEYWORDS],
            rating=item.rating,
        )


def preference_lines(profile: PreferenceProfile) -> List[str]:
    """Describe only the dimensions that carry signal; neutral ones are omitted."""
    lines = []
    if profile.description and profile.description.strip():
        lines.append(f'Description: "{profile.description.strip()}"')

    for name, value in profile.non_neutral_sliders():
        label, high, low = SLIDER_WORDING[name]
        lines.append(f"{label}: {high if value > NEUTRAL else low} ({value}/10)")

    liked = sorted(
        ((genre, affinity) for genre, affinity in profile.genres.items() if affinity > NEUTRAL),
        key=lambda pair: (-pair[1], pair[0]),
    )
    avoided = sorted(
        ((genre, affinity) for genre, affinity in profile.genres.items() if affinity < NEUTRAL),
        key=lambda pair: (pair[1], pair[0]),
    )
    if liked:
        lines.append("Genres liked: " + ", ".join(f"{g} ({a}/10)" for g, a in liked))
    if avoided:
        lines.append("Genres avoided: " + ", ".join(f"{g} ({a}/10)" for g, a in avoided))
    return lines


class RankingPrompt(BaseModel):
    """Structured ranking request; ``render()`` produces the prompt text."""

    preferences: List[str]
    candidates: List[CandidateSummary]
    min_score: float
    max_results: int

    @property
    def valid_ids(self) -> List[int]:
        return [candidate.id for candidate in self.candidates]

    def render(self) -> str:
        wants = "\n".join(f"- {line}" for line in self.preferences) or "- General recommendations"
        movies = json.dumps(
            [candidate.model_dump() for candidate in self.candidates],
            ensure_ascii=False,
            separators=(",", ":"),
        )
        ids = ", ".join(str(movie_id) for movie_id in self.valid_ids)
        return (
            f"Rank these {len(self.candidates)} movies by how well each matches the user "
            f"(score 0.0-1.0).\n\n"
            f"User preferences:\n{wants}\n\n"
            f"Movies (already filtered by year, rating, runtime, language and certification):\n"
            f"{movies}\n\n"
            f"Valid ids: {ids}\n\n"
            f"Return a JSON array only, no markdown:\n"
            f'[{{"id": 123, "score": 0.95, "reason": "One short sentence"}}]\n\n'
            f"Rules: use only valid ids; include only scores >= {self.min_score}; "
            f"at most {self.max_results} movies; sort by score descending."
        )


class RankingPromptBuilder:
    """Builds RankingPrompt objects with fixed output limits."""

    def __init__(self, min_score: float = 0.4, max_results: int = 30) -> None:
        self._min_score = min_score
        self._max_results = max_results

    def build(self, profile: PreferenceProfile, items: List[CatalogItem]) -> RankingPrompt:
        return RankingPrompt(
            preferences=preference_lines(profile),
            candidates=[CandidateSummary.from_item(item) for item in items],
            min_score=self._min_score,
            max_results=self._max_results,
        )


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` block if present."""
    stripped = text.strip()
    match = _FENCED.match(stripped)
    return match.group("body").strip() if match else stripped


def parse_ranking_response(text: str, valid_ids: Collection[int]) -> List[RankedElement]:
    """
    Validate ranking service output.

    Returns the elements that reference known ids, one per id (highest score
    wins). Empty, malformed or schema-violating output yields an empty list.
    """
    body = strip_code_fences(text or "")
    if not body:
        logger.warning("Ranking service returned an empty response")
        return []

    try:
        elements = _ELEMENTS.validate_json(body)
    except ValidationError as e:
        logger.warning(f"Discarding malformed ranking response: {e.error_count()} errors. Raw: {body[:300]}")
        return []

    allowed = set(valid_ids)
    best: Dict[int, RankedElement] = {}
    hallucinated = 0
    for element in elements:
        if element.id not in allowed:
            hallucinated += 1
            continue
        current = best.get(element.id)
        if current is None or element.score > current.score:
            best[element.id] = element

    if hallucinated:
        logger.warning(f"Dropped {hallucinated} ranked elements with unknown ids")
    return list(best.values())
