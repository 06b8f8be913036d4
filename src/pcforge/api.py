from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .db import CatalogStore
from .errors import CategoryNotFound, ComponentNotFound, InvalidSelection, NotFound
from .schemas import (
    BuildCreateRequest,
    BuildQuery,
    BuildSort,
    CompatibilityCheckRequest,
    ComponentQuery,
    ComponentSort,
    Pagination,
)
from .service import BuildService


def _error_details(errors: Sequence[Dict[str, Any]]) -> List[Dict[str, str]]:
    details = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query")]
        details.append({"field": ".".join(loc), "message": str(err.get("msg", ""))})
    return details


def _error(status_code: int, error: str, message: str, details: Optional[list] = None) -> JSONResponse:
    body: Dict[str, Any] = {"success": False, "error": error, "message": message}
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


def create_app(
    catalog: CatalogStore,
    builds: BuildService,
    *,
    cors_origins: Sequence[str] = ("*",),
    debug: bool = False,
) -> FastAPI:
    """
    创建 API 应用 - Create the API application

    目录与方案服务通过参数注入，路由处理函数不依赖模块级全局对象。
    Catalog and build service are injected; handlers use no module globals.
    """
    app = FastAPI(title="PCForge")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError):
        return _error(400, "Validation Error", "Invalid request data", _error_details(exc.errors()))

    @app.exception_handler(ValidationError)
    async def _model_validation_error(request: Request, exc: ValidationError):
        return _error(400, "Validation Error", "Invalid request data", _error_details(exc.errors()))

    @app.exception_handler(InvalidSelection)
    async def _invalid_selection(request: Request, exc: InvalidSelection):
        return _error(400, "Invalid Components", str(exc), exc.details)

    @app.exception_handler(NotFound)
    async def _not_found(request: Request, exc: NotFound):
        return _error(404, exc.error, str(exc))

    @app.exception_handler(Exception)
    async def _server_error(request: Request, exc: Exception):
        print(f"[PCForge] {request.method} {request.url.path} failed: {type(exc).__name__}: {exc}")
        message = str(exc) if debug else "Internal server error"
        return _error(500, "Server Error", message)

    @app.get("/api/health")
    def health():
        return {"status": "ok"}

    @app.get("/api/components/categories")
    def list_categories():
        return {
            "success": True,
            "data": [c.model_dump(by_alias=True) for c in catalog.categories()],
        }

    @app.get("/api/components")
    def list_components(
        category: Optional[str] = None,
        brand: Optional[str] = Query(default=None, max_length=50),
        search: Optional[str] = Query(default=None, min_length=1, max_length=100),
        price_min: Optional[Decimal] = Query(default=None, alias="priceMin", ge=0),
        price_max: Optional[Decimal] = Query(default=None, alias="priceMax", ge=0),
        in_stock: Optional[bool] = Query(default=None, alias="inStock"),
        sort_by: ComponentSort = Query(default="name-asc", alias="sortBy"),
        page: int = Query(default=1, ge=1),
        limit: int = Query(default=20, ge=1, le=100),
    ):
        query = ComponentQuery(
            category=category,
            brand=brand,
            search=search,
            price_min=price_min,
            price_max=price_max,
            in_stock=in_stock,
            sort_by=sort_by,
            page=page,
            limit=limit,
        )
        items, total = catalog.query(query)
        return {
            "success": True,
            "data": [c.model_dump(mode="json", by_alias=True) for c in items],
            "pagination": Pagination.build(page, limit, total).model_dump(by_alias=True),
        }

    @app.get("/api/components/category/{category_name}")
    def list_category_components(
        category_name: str,
        sort_by: ComponentSort = Query(default="name-asc", alias="sortBy"),
        page: int = Query(default=1, ge=1),
        limit: int = Query(default=20, ge=1, le=100),
    ):
        category = catalog.find_category(category_name)
        if category is None:
            raise CategoryNotFound("Component category does not exist")
        query = ComponentQuery(category=category.name, sort_by=sort_by, page=page, limit=limit)
        items, total = catalog.query(query)
        return {
            "success": True,
            "data": {
                "category": category.model_dump(by_alias=True),
                "components": [c.model_dump(mode="json", by_alias=True) for c in items],
            },
            "pagination": Pagination.build(page, limit, total).model_dump(by_alias=True),
        }

    @app.get("/api/components/{component_id}")
    def get_component(component_id: str):
        component = catalog.find_by_id(component_id)
        if component is None:
            raise ComponentNotFound(f"Component not found: {component_id}")
        return {"success": True, "data": component.model_dump(mode="json", by_alias=True)}

    @app.post("/api/compatibility/check")
    def check_compatibility(payload: CompatibilityCheckRequest):
        report = builds.check_compatibility(payload.components)
        return {"success": True, "data": report.to_payload()}

    @app.get("/api/builds")
    def list_builds(
        use_case: Optional[str] = Query(default=None, alias="useCase"),
        is_public: Optional[bool] = Query(default=None, alias="isPublic"),
        sort_by: BuildSort = Query(default="created-desc", alias="sortBy"),
        page: int = Query(default=1, ge=1),
        limit: int = Query(default=20, ge=1, le=50),
    ):
        query = BuildQuery(use_case=use_case, is_public=is_public, sort_by=sort_by, page=page, limit=limit)
        items, pagination = builds.list_builds(query)
        return {
            "success": True,
            "data": [b.to_payload() for b in items],
            "pagination": pagination.model_dump(by_alias=True),
        }

    @app.post("/api/builds", status_code=201)
    def create_build(payload: BuildCreateRequest):
        build, report = builds.create_build(payload)
        data = build.to_payload()
        data["compatibility"] = report.to_payload()
        return {"success": True, "data": data, "message": "Build created successfully"}

    @app.get("/api/builds/{build_id}")
    def get_build(build_id: str):
        return {"success": True, "data": builds.get_build(build_id).to_payload()}

    return app
