"""
TMDB catalog client.
- Async httpx client with bearer-token auth.
- Locale quirk: a request rejected because of the locale parameter is
  re-sent exactly once without it.
- 404 is an absence, never an exception.
- No in-module caching; see CachedCatalog.
"""
import logging
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from app.core.exceptions import CatalogUnavailableError
from app.models.schemas import CatalogItem, CatalogSummary, DiscoverPage, DiscoverQuery, Genre

TMDB_BASE = "https://api.themoviedb.org/3"
LOCALE_PARAM = "language"
DETAIL_APPENDS = "credits,keywords,release_dates"
CERTIFICATION_COUNTRY = "US"
MAX_CAST = 10

logger = logging.getLogger(__name__)


class CatalogFailure(Enum):
    """Why a catalog request did not produce a usable body."""
    NOT_FOUND = "not_found"
    LOCALE_REJECTED = "locale_rejected"
    UNAVAILABLE = "unavailable"


# Statuses TMDB answers with when a field conflicts with the requested locale
LOCALE_REJECTION_STATUSES = frozenset({400, 422})

# Raised while mapping a 200 body that does not have the documented shape
ENVELOPE_ERRORS = (AttributeError, KeyError, TypeError, ValidationError)


def classify_response(response: httpx.Response, sent_locale: bool) -> Optional[CatalogFailure]:
    """Map an HTTP response to a failure reason, or None on success."""
    if response.is_success:
        return None
    if response.status_code == 404:
        return CatalogFailure.NOT_FOUND
    if sent_locale and response.status_code in LOCALE_REJECTION_STATUSES:
        return CatalogFailure.LOCALE_REJECTED
    return CatalogFailure.UNAVAILABLE


def _parse_date(raw: Optional[str]) -> Optional[date]:
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return None


def _us_certification(release_dates: Dict[str, Any]) -> str:
    for country in release_dates.get("results", []):
        if country.get("iso_3166_1") != CERTIFICATION_COUNTRY:
            continue
        for release in country.get("release_dates", []):
            certification = (release.get("certification") or "").strip()
            if certification:
                return certification
    return "NR"


def to_catalog_item(data: Dict[str, Any]) -> CatalogItem:
    """Transform a TMDB detail payload (with appended responses) into a CatalogItem."""
    credits = data.get("credits") or {}
    director = next(
        (member.get("name", "") for member in credits.get("crew", []) if member.get("job") == "Director"),
        "",
    )
    return CatalogItem(
        id=data["id"],
        title=data.get("title") or "",
        overview=data.get("overview") or "",
        release_date=_parse_date(data.get("release_date")),
        runtime=data.get("runtime") or 0,
        rating=data.get("vote_average") or 0.0,
        vote_count=data.get("vote_count") or 0,
        popularity=data.get("popularity") or 0.0,
        certification=_us_certification(data.get("release_dates") or {}),
        language=data.get("original_language") or "en",
        genres=[Genre(id=g["id"], name=g["name"]) for g in data.get("genres", [])],
        keywords=[k["name"] for k in (data.get("keywords") or {}).get("keywords", [])],
        tagline=data.get("tagline") or "",
        poster_path=data.get("poster_path"),
        cast=[c.get("name", "") for c in credits.get("cast", [])[:MAX_CAST]],
        director=director,
    )


class CatalogClient:
    """Async client for the TMDB v3 API."""

    def __init__(
        self,
        access_token: Optional[str],
        base_url: str = TMDB_BASE,
        locale: Optional[str] = "en-US",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        self._locale = locale
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        GET a catalog resource.

        Returns the decoded body, or None when the resource does not exist.
        Raises CatalogUnavailableError on any infrastructure failure.
        """
        attempts = [params]
        if self._locale:
            attempts.insert(0, {**params, LOCALE_PARAM: self._locale})

        for attempt_params in attempts:
            sent_locale = LOCALE_PARAM in attempt_params
            try:
                response = await self._client.get(path, params=attempt_params)
            except httpx.TimeoutException as e:
                logger.error(f"Catalog request timeout for {path}: {e}")
                raise CatalogUnavailableError(f"timeout calling {path}") from e
            except httpx.HTTPError as e:
                logger.error(f"Catalog HTTP error for {path}: {e}")
                raise CatalogUnavailableError(f"network error calling {path}") from e

            failure = classify_response(response, sent_locale)
            if failure is None:
                try:
                    data = response.json()
                except ValueError as e:
                    raise CatalogUnavailableError(f"invalid JSON from {path}") from e
                if not isinstance(data, dict):
                    raise CatalogUnavailableError(f"unexpected response envelope from {path}")
                return data
            if failure is CatalogFailure.NOT_FOUND:
                return None
            if failure is CatalogFailure.LOCALE_REJECTED:
                logger.warning(
                    f"Catalog rejected locale {self._locale} for {path} "
                    f"(HTTP {response.status_code}), retrying without it"
                )
                continue
            raise CatalogUnavailableError(f"{path} returned HTTP {response.status_code}")

        raise CatalogUnavailableError(f"{path} rejected every locale variant")

    async def discover(self, query: DiscoverQuery, page: int) -> DiscoverPage:
        """Discover movies matching server-side constraints, most popular first."""
        params: Dict[str, Any] = {
            "sort_by": "popularity.desc",
            "include_adult": "false",
            "include_video": "false",
            "page": page,
        }
        if query.year_range:
            params["primary_release_date.gte"] = f"{query.year_range[0]}-01-01"
            params["primary_release_date.lte"] = f"{query.year_range[1]}-12-31"
        if query.rating_range:
            params["vote_average.gte"] = query.rating_range[0]
            params["vote_average.lte"] = query.rating_range[1]
        if query.language:
            params["with_original_language"] = query.language

        data = await self._get("/discover/movie", params)
        if data is None:
            return DiscoverPage(page=page, total_pages=0)

        try:
            results = [
                CatalogSummary(
                    id=raw["id"],
                    title=raw.get("title") or "",
                    popularity=raw.get("popularity") or 0.0,
                    rating=raw.get("vote_average") or 0.0,
                    release_date=_parse_date(raw.get("release_date")),
                )
                for raw in data.get("results", [])
                if raw.get("id") is not None
            ]
            return DiscoverPage(
                page=data.get("page", page),
                total_pages=data.get("total_pages", 0),
                results=results,
            )
        except ENVELOPE_ERRORS as e:
            raise CatalogUnavailableError(f"unexpected discover page shape: {e}") from e

    async def get_detail(self, movie_id: int) -> Optional[CatalogItem]:
        """Fetch one movie with credits, keywords and certifications embedded."""
        data = await self._get(f"/movie/{movie_id}", {"append_to_response": DETAIL_APPENDS})
        if data is None:
            return None
        try:
            return to_catalog_item(data)
        except ENVELOPE_ERRORS as e:
            logger.warning(f"Dropping malformed catalog record {movie_id}: {e}")
            return None

    async def get_genre_vocabulary(self) -> List[Genre]:
        """Fetch the movie genre list."""
        data = await self._get("/genre/movie/list", {})
        if data is None:
            return []
        try:
            return [Genre(id=g["id"], name=g["name"]) for g in data.get("genres", [])]
        except ENVELOPE_ERRORS as e:
            raise CatalogUnavailableError(f"unexpected genre list shape: {e}") from e
