from __future__ import annotations

from fastapi import FastAPI

from .api import create_app
from .config import Settings, load_settings
from .db import CatalogStore, SQLiteBuildStore
from .service import BuildService


def build_app(settings: Settings) -> FastAPI:
    if not settings.catalog_path.exists():
        raise RuntimeError(f"required catalog file missing: {settings.catalog_path}")

    catalog = CatalogStore(settings.catalog_path)
    store = SQLiteBuildStore(settings.builds_db_path)
    print(
        f"[PCForge] Catalog loaded: {len(catalog.all_components())} components "
        f"from {settings.catalog_path.name}, builds stored in {settings.builds_db_path.name}"
    )
    return create_app(
        catalog,
        BuildService(catalog, store),
        cors_origins=settings.cors_origins,
        debug=settings.debug,
    )


app = build_app(load_settings())
