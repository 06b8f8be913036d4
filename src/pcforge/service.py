from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Protocol, Sequence, Tuple

from .engine import evaluate
from .errors import BuildNotFound, InvalidSelection
from .schemas import (
    Build,
    BuildComponent,
    BuildCreateRequest,
    BuildQuery,
    CompatibilityReport,
    Component,
    Pagination,
    ResolvedComponent,
    SelectionItem,
)


class CatalogProtocol(Protocol):
    def find_many(self, component_ids: Iterable[str]) -> Dict[str, Component]: ...


class BuildStoreProtocol(Protocol):
    def save(self, build: Build) -> Build: ...
    def get(self, build_id: str) -> Build | None: ...
    def query(self, query: BuildQuery) -> Tuple[List[Build], int]: ...


class BuildService:
    """
    装机方案服务 - Build Service

    解析配件选择、计算总价、调用兼容性引擎并保存方案。
    兼容性结论只作参考：不兼容的方案同样可以保存。
    Resolves selections, prices them, runs the engine and saves builds.
    Compatibility is advisory: incompatible builds are saved as well.
    """

    def __init__(self, catalog: CatalogProtocol, store: BuildStoreProtocol):
        self.catalog = catalog
        self.store = store

    def resolve_selection(self, items: Sequence[SelectionItem]) -> List[Tuple[Component, int]]:
        """
        将 (componentId, quantity) 解析为目录配件 - Resolve selection against the catalog

        异常 Raises:
            InvalidSelection: 存在目录中没有的 componentId
        """
        found = self.catalog.find_many([item.component_id for item in items])
        missing = [item.component_id for item in items if item.component_id not in found]
        if missing:
            raise InvalidSelection(
                "One or more components do not exist",
                details=[f"Unknown component: {component_id}" for component_id in missing],
            )
        return [(found[item.component_id], item.quantity) for item in items]

    def check_compatibility(self, items: Sequence[SelectionItem]) -> CompatibilityReport:
        resolved = self.resolve_selection(items)
        return evaluate([ResolvedComponent.from_component(c, qty) for c, qty in resolved])

    @staticmethod
    def total_price(resolved: Sequence[Tuple[Component, int]]) -> Decimal:
        """总价 = Σ 单价 × 数量；没有价格的配件按 0 计"""
        total = Decimal("0")
        for component, quantity in resolved:
            if component.price is not None:
                total += component.price * quantity
        return total

    def create_build(self, request: BuildCreateRequest) -> Tuple[Build, CompatibilityReport]:
        resolved = self.resolve_selection(request.components)
        report = evaluate([ResolvedComponent.from_component(c, qty) for c, qty in resolved])

        now = datetime.now(timezone.utc)
        build = Build(
            id=str(uuid.uuid4()),
            name=request.name,
            description=request.description,
            use_case=request.use_case,
            is_public=request.is_public,
            total_price=self.total_price(resolved),
            components=[
                BuildComponent(component_id=c.id, quantity=qty, component=c)
                for c, qty in resolved
            ],
            created_at=now,
            updated_at=now,
        )
        self.store.save(build)
        return build, report

    def get_build(self, build_id: str) -> Build:
        build = self.store.get(build_id)
        if build is None:
            raise BuildNotFound(f"Build not found: {build_id}")
        return build

    def list_builds(self, query: BuildQuery) -> Tuple[List[Build], Pagination]:
        builds, total = self.store.query(query)
        return builds, Pagination.build(query.page, query.limit, total)
