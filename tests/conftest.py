from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from glasscase.api.deps import get_listing_client, get_store
from glasscase.api.main import create_app
from glasscase.clients.ebay import SyntheticClient
from glasscase.db.store import InMemoryWishlistStore

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def store() -> InMemoryWishlistStore:
    return InMemoryWishlistStore()


@pytest.fixture()
def synthetic() -> SyntheticClient:
    return SyntheticClient(clock=lambda: FIXED_NOW)


@pytest.fixture()
def app(store: InMemoryWishlistStore, synthetic: SyntheticClient) -> FastAPI:
    app = create_app()
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_listing_client] = lambda: synthetic
    return app


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as c:
        yield c
