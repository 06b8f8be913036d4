from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from pcforge.api import create_app
from pcforge.db import CatalogStore, SQLiteBuildStore
from pcforge.schemas import ResolvedComponent
from pcforge.service import BuildService


ROOT = Path(__file__).resolve().parents[1]
CATALOG_PATH = ROOT / "data" / "components.json"


@pytest.fixture
def make_part():
    counter = {"n": 0}

    def _make(category: str, quantity: int = 1, **specs) -> ResolvedComponent:
        counter["n"] += 1
        return ResolvedComponent(
            component_id=f"{category.lower()}-{counter['n']}",
            category=category,
            specifications=specs,
            quantity=quantity,
        )

    return _make


@pytest.fixture
def catalog():
    return CatalogStore(CATALOG_PATH)


@pytest.fixture
def build_store(tmp_path):
    return SQLiteBuildStore(tmp_path / "builds.db")


@pytest.fixture
def build_service(catalog, build_store):
    return BuildService(catalog, build_store)


@pytest.fixture
def client(catalog, build_service):
    return TestClient(create_app(catalog, build_service))
