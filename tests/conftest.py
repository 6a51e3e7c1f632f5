"""
Pytest configuration and fixtures.
"""
from datetime import date
from typing import List

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import (
    clear_caches,
    get_history_repository,
    get_search_service,
)
from app.main import app
from app.models.schemas import CatalogItem, Genre
from app.repositories.memory import InMemoryHistoryRepository
from app.services.search import SearchService
from tests.fakes import FakeCatalog, FakeRankingService, build_search_service, make_item


@pytest.fixture
def sample_items() -> List[CatalogItem]:
    """Five movies with distinct popularity/rating composites."""
    return [
        make_item(1, title="Inception", release_date=date(2010, 7, 16), runtime=148,
                  rating=8.4, popularity=80.0, certification="PG-13",
                  genres=[Genre(id=28, name="Action"), Genre(id=878, name="Science Fiction")],
                  keywords=["dream", "heist", "subconscious", "mind", "architecture", "layers", "spinning top"]),
        make_item(2, title="Parasite", release_date=date(2019, 5, 30), runtime=132,
                  rating=8.5, popularity=60.0, certification="R", language="ko",
                  genres=[Genre(id=53, name="Thriller")]),
        make_item(3, title="The Room", release_date=date(2003, 6, 27), runtime=99,
                  rating=3.7, popularity=10.0, certification="R"),
        make_item(4, title="Arrival", release_date=date(2016, 11, 11), runtime=116,
                  rating=7.6, popularity=40.0, certification="PG-13",
                  genres=[Genre(id=18, name="Drama"), Genre(id=878, name="Science Fiction")]),
        make_item(5, title="Coco", release_date=date(2017, 10, 27), runtime=105,
                  rating=8.2, popularity=70.0, certification="PG",
                  genres=[Genre(id=16, name="Animation")]),
    ]


@pytest.fixture
def fake_catalog(sample_items) -> FakeCatalog:
    """Catalog listing the sample items on a single page."""
    return FakeCatalog(sample_items)


@pytest.fixture
def fake_ranking_service() -> FakeRankingService:
    """Ranking service answering with an empty array by default."""
    return FakeRankingService()


@pytest.fixture
def search_service(fake_catalog, fake_ranking_service) -> SearchService:
    """SearchService wired with fakes."""
    return build_search_service(fake_catalog, fake_ranking_service)


@pytest.fixture
def history_repo() -> InMemoryHistoryRepository:
    """History repository where user_judge liked movie 1 and disliked movie 5."""
    return InMemoryHistoryRepository(liked={"user_judge": [1]}, disliked={"user_judge": [5]})


@pytest.fixture
def test_client(search_service, history_repo):
    """
    TestClient fixture with dependency overrides.
    Uses fakes for the catalog and ranking service.
    """
    app.dependency_overrides[get_search_service] = lambda: search_service
    app.dependency_overrides[get_history_repository] = lambda: history_repo

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
    clear_caches()
