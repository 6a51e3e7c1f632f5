"""
Unit tests for the TMDB catalog client.
Outbound HTTP is served by httpx.MockTransport.
"""
from datetime import date
from typing import List

import httpx
import pytest

from app.clients.catalog import CatalogClient, to_catalog_item
from app.core.exceptions import CatalogUnavailableError
from app.models.schemas import DiscoverQuery

DETAIL_PAYLOAD = {
    "id": 550,
    "title": "Fight Club",
    "overview": "An insomniac office worker...",
    "release_date": "1999-10-15",
    "runtime": 139,
    "vote_average": 8.4,
    "vote_count": 26000,
    "popularity": 61.4,
    "original_language": "en",
    "tagline": "Mischief. Mayhem. Soap.",
    "poster_path": "/pB8BM7pdSp6B6Ih7QZ4DrQ3PmJK.jpg",
    "genres": [{"id": 18, "name": "Drama"}],
    "keywords": {"keywords": [{"id": 825, "name": "support group"}, {"id": 851, "name": "dual identity"}]},
    "credits": {
        "cast": [{"name": "Edward Norton"}, {"name": "Brad Pitt"}],
        "crew": [{"name": "Jim Uhls", "job": "Screenplay"}, {"name": "David Fincher", "job": "Director"}],
    },
    "release_dates": {
        "results": [
            {"iso_3166_1": "DE", "release_dates": [{"certification": "18"}]},
            {"iso_3166_1": "US", "release_dates": [{"certification": ""}, {"certification": "R"}]},
        ]
    },
}


def make_client(handler, locale="en-US") -> CatalogClient:
    return CatalogClient(
        access_token="token",
        base_url="https://catalog.test/3",
        locale=locale,
        transport=httpx.MockTransport(handler),
    )


class TestCatalogMapping:
    def test_detail_payload_mapping(self):
        item = to_catalog_item(DETAIL_PAYLOAD)

        assert item.id == 550
        assert item.release_date == date(1999, 10, 15)
        assert item.year == 1999
        assert item.rating == 8.4
        assert item.certification == "R"
        assert item.language == "en"
        assert item.genre_names == ["Drama"]
        assert item.keywords == ["support group", "dual identity"]
        assert item.cast == ["Edward Norton", "Brad Pitt"]
        assert item.director == "David Fincher"

    def test_missing_us_certification_is_nr(self):
        payload = {**DETAIL_PAYLOAD, "release_dates": {"results": []}}
        assert to_catalog_item(payload).certification == "NR"

    def test_unparseable_release_date_is_none(self):
        payload = {**DETAIL_PAYLOAD, "release_date": ""}
        assert to_catalog_item(payload).year is None


class TestCatalogClient:
    @pytest.mark.asyncio
    async def test_discover_sends_server_side_constraints(self):
        requests: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={
                "page": 2,
                "total_pages": 7,
                "results": [{"id": 1, "title": "A", "popularity": 10.0, "vote_average": 7.1}],
            })

        client = make_client(handler)
        page = await client.discover(
            DiscoverQuery(year_range=(2000, 2010), rating_range=(7.0, 9.0), language="ko"),
            page=2,
        )

        params = requests[0].url.params
        assert requests[0].url.path == "/3/discover/movie"
        assert requests[0].headers["Authorization"] == "Bearer token"
        assert params["sort_by"] == "popularity.desc"
        assert params["primary_release_date.gte"] == "2000-01-01"
        assert params["primary_release_date.lte"] == "2010-12-31"
        assert params["with_original_language"] == "ko"
        assert params["language"] == "en-US"
        assert params["page"] == "2"
        assert page.total_pages == 7
        assert page.results[0].rating == 7.1
        await client.close()

    @pytest.mark.asyncio
    async def test_get_detail(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["append_to_response"] == "credits,keywords,release_dates"
            return httpx.Response(200, json=DETAIL_PAYLOAD)

        client = make_client(handler)
        item = await client.get_detail(550)

        assert item is not None
        assert item.title == "Fight Club"
        await client.close()

    @pytest.mark.asyncio
    async def test_not_found_is_absence(self):
        client = make_client(lambda request: httpx.Response(404, json={"status_code": 34}))

        assert await client.get_detail(999999) is None
        await client.close()

    @pytest.mark.asyncio
    async def test_locale_rejection_retried_once_without_locale(self):
        requests: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if "language" in request.url.params:
                return httpx.Response(422, json={"status_message": "Invalid language"})
            return httpx.Response(200, json=DETAIL_PAYLOAD)

        client = make_client(handler)
        item = await client.get_detail(550)

        assert item is not None
        assert len(requests) == 2
        assert "language" not in requests[1].url.params
        await client.close()

    @pytest.mark.asyncio
    async def test_locale_rejection_not_retried_twice(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(400)

        client = make_client(handler)
        with pytest.raises(CatalogUnavailableError):
            await client.get_detail(550)

        assert len(calls) == 2
        await client.close()

    @pytest.mark.asyncio
    async def test_server_error_not_retried(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503)

        client = make_client(handler)
        with pytest.raises(CatalogUnavailableError) as exc_info:
            await client.discover(DiscoverQuery(), page=1)

        assert len(calls) == 1
        assert exc_info.value.error_code == "CATALOG_UNAVAILABLE"
        await client.close()

    @pytest.mark.asyncio
    async def test_timeout_is_unavailable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = make_client(handler)
        with pytest.raises(CatalogUnavailableError):
            await client.get_genre_vocabulary()
        await client.close()

    @pytest.mark.asyncio
    async def test_malformed_detail_dropped(self):
        client = make_client(lambda request: httpx.Response(200, json={"title": "no id"}))

        assert await client.get_detail(1) is None
        await client.close()

    @pytest.mark.asyncio
    async def test_genre_vocabulary(self):
        client = make_client(
            lambda request: httpx.Response(200, json={"genres": [{"id": 28, "name": "Action"}]}),
            locale=None,
        )

        genres = await client.get_genre_vocabulary()

        assert [(g.id, g.name) for g in genres] == [(28, "Action")]
        await client.close()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [[], {"results": None}, {"results": [None]}, {"results": [{"id": "abc"}]}])
    async def test_unexpected_discover_shape_is_unavailable(self, body):
        client = make_client(lambda request: httpx.Response(200, json=body), locale=None)

        with pytest.raises(CatalogUnavailableError):
            await client.discover(DiscoverQuery(), page=1)
        await client.close()

    @pytest.mark.asyncio
    async def test_unexpected_genre_shape_is_unavailable(self):
        client = make_client(lambda request: httpx.Response(200, json={"genres": [None]}), locale=None)

        with pytest.raises(CatalogUnavailableError):
            await client.get_genre_vocabulary()
        await client.close()

    @pytest.mark.asyncio
    async def test_detail_with_wrongly_typed_sections_dropped(self):
        payload = {**DETAIL_PAYLOAD, "credits": "none", "release_dates": {"results": [None]}}
        client = make_client(lambda request: httpx.Response(200, json=payload), locale=None)

        assert await client.get_detail(550) is None
        await client.close()
