"""
Unit tests for the candidate filter stage.
"""
from datetime import date

import pytest

from app.core.exceptions import CatalogUnavailableError
from app.models.schemas import PreferenceProfile
from app.services.candidate_filter import CandidateFilter, dedupe_by_id, matches_constraints
from tests.fakes import FakeCatalog, make_item


class TestMatchesConstraints:
    def test_unconstrained_profile_accepts_everything(self):
        assert matches_constraints(make_item(1, release_date=None), PreferenceProfile())

    def test_bounds_are_inclusive(self):
        profile = PreferenceProfile(year_range=(2010, 2016), runtime_range=(110, 148), rating_range=(7.0, 8.4))

        assert matches_constraints(make_item(1, release_date=date(2010, 1, 1), runtime=148, rating=8.4), profile)
        assert matches_constraints(make_item(2, release_date=date(2016, 12, 31), runtime=110, rating=7.0), profile)
        assert not matches_constraints(make_item(3, release_date=date(2017, 1, 1)), profile)
        assert not matches_constraints(make_item(4, runtime=149, release_date=date(2012, 1, 1)), profile)

    def test_missing_year_rejected_when_year_constrained(self):
        profile = PreferenceProfile(year_range=(2000, 2020))
        assert not matches_constraints(make_item(1, release_date=None), profile)

    def test_certification_exact_match(self):
        profile = PreferenceProfile(age_rating="PG-13")

        assert matches_constraints(make_item(1, certification="PG-13"), profile)
        assert not matches_constraints(make_item(2, certification="PG"), profile)
        assert not matches_constraints(make_item(3, certification="NR"), profile)

    def test_language_by_name(self):
        profile = PreferenceProfile(language="Korean")

        assert matches_constraints(make_item(1, language="ko"), profile)
        assert not matches_constraints(make_item(2, language="en"), profile)


def test_dedupe_keeps_first_occurrence():
    items = [make_item(1, title="first"), make_item(2), make_item(1, title="second")]

    unique = dedupe_by_id(items)

    assert [(i.id, i.title) for i in unique] == [(1, "first"), (2, "Movie 2")]


class TestCandidateFilter:
    @pytest.mark.asyncio
    async def test_pool_applies_client_side_constraints(self, fake_catalog):
        candidate_filter = CandidateFilter(fake_catalog)
        profile = PreferenceProfile(runtime_range=(100, 140), age_rating="R")

        pool = await candidate_filter.build_pool(profile)

        assert [item.id for item in pool] == [2]

    @pytest.mark.asyncio
    async def test_discovery_query_carries_server_side_constraints(self, fake_catalog):
        candidate_filter = CandidateFilter(fake_catalog)
        profile = PreferenceProfile(year_range=(2010, 2020), rating_range=(7.0, 10.0), language="Korean")

        await candidate_filter.build_pool(profile)

        query = fake_catalog.queries[0]
        assert query.year_range == (2010, 2020)
        assert query.rating_range == (7.0, 10.0)
        assert query.language == "ko"

    @pytest.mark.asyncio
    async def test_scans_pages_until_last(self):
        catalog = FakeCatalog([make_item(i) for i in range(1, 8)], page_size=3)

        pool = await CandidateFilter(catalog, max_pages=10).build_pool(PreferenceProfile())

        assert catalog.discover_calls == [1, 2, 3]
        assert [item.id for item in pool] == list(range(1, 8))

    @pytest.mark.asyncio
    async def test_page_limit_caps_scan(self):
        catalog = FakeCatalog([make_item(i) for i in range(1, 8)], page_size=3)

        pool = await CandidateFilter(catalog, max_pages=2).build_pool(PreferenceProfile())

        assert catalog.discover_calls == [1, 2]
        assert len(pool) == 6

    @pytest.mark.asyncio
    async def test_duplicate_listings_resolved_once(self):
        item = make_item(1)
        catalog = FakeCatalog([item, make_item(2), item], page_size=2)

        pool = await CandidateFilter(catalog).build_pool(PreferenceProfile())

        assert [i.id for i in pool] == [1, 2]
        assert sorted(catalog.detail_calls) == [1, 2]

    @pytest.mark.asyncio
    async def test_missing_details_dropped(self, sample_items):
        catalog = FakeCatalog(sample_items, missing=[2, 4])

        pool = await CandidateFilter(catalog).build_pool(PreferenceProfile())

        assert [item.id for item in pool] == [1, 3, 5]

    @pytest.mark.asyncio
    async def test_empty_discovery_skips_detail_lookups(self):
        catalog = FakeCatalog([])

        assert await CandidateFilter(catalog).build_pool(PreferenceProfile()) == []
        assert catalog.detail_calls == []

    @pytest.mark.asyncio
    async def test_detail_failure_aborts_pool(self, fake_catalog):
        fake_catalog.failing_ids.add(3)

        with pytest.raises(CatalogUnavailableError):
            await CandidateFilter(fake_catalog).build_pool(PreferenceProfile())

    @pytest.mark.asyncio
    async def test_discovery_failure_propagates(self, fake_catalog):
        fake_catalog.fail_discovery = True

        with pytest.raises(CatalogUnavailableError):
            await CandidateFilter(fake_catalog).build_pool(PreferenceProfile())
