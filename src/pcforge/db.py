from __future__ import annotations

import json
import sqlite3
from decimal import Decimal
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from .schemas import (
    DEFAULT_CATEGORIES,
    Build,
    BuildQuery,
    Category,
    CategorySummary,
    Component,
    ComponentQuery,
)


class CatalogStore:
    """
    配件目录类 - Component Catalog Class

    从 JSON 文件加载配件与类别信息，加载后只读。
    Loads components and category metadata from a JSON file; read-only afterwards.

    文件格式 File format:
        {"categories": [...], "components": [...]}，或直接是配件列表
        {"categories": [...], "components": [...]}, or a bare list of components
    """

    def __init__(self, data_path: Path):
        """
        初始化配件目录 - Initialize component catalog

        参数 Parameters:
            data_path: 目录 JSON 文件路径
                       Path to the catalog JSON file
        """
        self.data_path = data_path
        self._components: List[Component] = []
        self._categories: List[Category] = list(DEFAULT_CATEGORIES)
        self.reload()

    def reload(self) -> None:
        """
        重新加载目录数据 - Reload catalog data

        整体替换配件列表，读取中的请求不会看到半更新状态。
        Replaces the component list wholesale.
        """
        with self.data_path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
        if isinstance(raw, list):
            raw = {"components": raw}
        categories = [Category.model_validate(item) for item in raw.get("categories", [])]
        components = [Component.model_validate(item) for item in raw.get("components", [])]
        self._categories = categories or list(DEFAULT_CATEGORIES)
        self._components = components

    def all_components(self) -> List[Component]:
        return self._components

    def categories(self) -> List[CategorySummary]:
        """
        获取类别及配件数量 - Get categories with component counts

        返回 Returns:
            按 sort_order 排序的类别列表
            Categories sorted by sort_order
        """
        counts: Dict[str, int] = {}
        for component in self._components:
            counts[component.category] = counts.get(component.category, 0) + 1
        ordered = sorted(self._categories, key=lambda c: c.sort_order)
        return [
            CategorySummary(**c.model_dump(), component_count=counts.get(c.name, 0))
            for c in ordered
        ]

    def find_category(self, name: str) -> Optional[Category]:
        """按名称查找类别，不区分大小写"""
        wanted = name.strip().lower()
        for category in self._categories:
            if category.name.lower() == wanted:
                return category
        return None

    def by_category(self, category: str) -> List[Component]:
        return [c for c in self._components if c.category == category]

    def find_by_id(self, component_id: str) -> Component | None:
        for component in self._components:
            if component.id == component_id:
                return component
        return None

    def find_many(self, component_ids: Iterable[str]) -> Dict[str, Component]:
        """
        按 ID 集合批量查找 - Look up by id set

        返回 Returns:
            {id: 配件}，不存在的 ID 不出现在结果中
            {id: component}; unknown ids are absent from the result
        """
        wanted = set(component_ids)
        return {c.id: c for c in self._components if c.id in wanted}

    def query(self, query: ComponentQuery) -> Tuple[List[Component], int]:
        """
        筛选、排序并分页 - Filter, sort and paginate

        未能识别的类别名不作为筛选条件。
        An unrecognised category name does not filter anything.

        返回 Returns:
            (当前页配件, 符合条件的总数)
            (components on the page, total matches)
        """
        items = list(self._components)

        if query.category:
            category = self.find_category(query.category)
            if category is not None:
                items = [c for c in items if c.category == category.name]

        if query.brand:
            brand = query.brand.strip().lower()
            items = [c for c in items if brand in c.brand.lower()]

        if query.search:
            needle = query.search.strip().lower()
            items = [
                c
                for c in items
                if needle in c.name.lower()
                or needle in c.description.lower()
                or needle in c.model.lower()
            ]

        if query.price_min is not None:
            items = [c for c in items if c.price is not None and c.price >= query.price_min]
        if query.price_max is not None:
            items = [c for c in items if c.price is not None and c.price <= query.price_max]

        if query.in_stock is not None:
            items = [c for c in items if c.in_stock == query.in_stock]

        if query.sort_by in ("price-asc", "price-desc"):
            items.sort(
                key=lambda c: (c.price if c.price is not None else Decimal("0"), c.name.lower()),
                reverse=query.sort_by == "price-desc",
            )
        else:
            items.sort(key=lambda c: c.name.lower(), reverse=query.sort_by == "name-desc")

        total = len(items)
        start = (query.page - 1) * query.limit
        return items[start:start + query.limit], total


BUILDS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS builds (
  id TEXT PRIMARY KEY,
  name TEXT NOT NULL,
  use_case TEXT,
  is_public INTEGER NOT NULL DEFAULT 0,
  total_price REAL NOT NULL DEFAULT 0,
  build_json TEXT NOT NULL,
  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL
)
"""

_BUILD_ORDER_BY = {
    "created-desc": "created_at DESC, rowid DESC",
    "created-asc": "created_at ASC, rowid ASC",
    "price-desc": "total_price DESC, rowid DESC",
    "price-asc": "total_price ASC, rowid ASC",
    "name-asc": "name COLLATE NOCASE ASC, rowid ASC",
}


class SQLiteBuildStore:
    """
    SQLite 装机方案仓库 - SQLite Build Store

    每次操作单独打开连接，多线程请求无需额外加锁。
    Opens a connection per operation so request threads need no extra locking.
    """

    def __init__(self, db_path: Path):
        """
        参数 Parameters:
            db_path: SQLite 数据库文件路径，不存在时自动创建
                     SQLite database path, created when missing
        """
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_table()

    def _init_table(self) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(BUILDS_TABLE_SQL)
            conn.commit()

    def save(self, build: Build) -> Build:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO builds (
                    id, name, use_case, is_public, total_price, build_json, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    build.id,
                    build.name,
                    build.use_case,
                    1 if build.is_public else 0,
                    float(build.total_price),
                    build.model_dump_json(),
                    build.created_at.isoformat(),
                    build.updated_at.isoformat(),
                ),
            )
            conn.commit()
        return build

    def get(self, build_id: str) -> Build | None:
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT build_json FROM builds WHERE id = ?",
                (build_id,),
            ).fetchone()
        if row is None:
            return None
        return Build.model_validate_json(row[0])

    def query(self, query: BuildQuery) -> Tuple[List[Build], int]:
        """
        按条件列出装机方案 - List builds

        返回 Returns:
            (当前页方案, 符合条件的总数)
            (builds on the page, total matches)
        """
        clauses: List[str] = []
        params: List[object] = []
        if query.use_case:
            clauses.append("lower(use_case) = lower(?)")
            params.append(query.use_case.strip())
        if query.is_public is not None:
            clauses.append("is_public = ?")
            params.append(1 if query.is_public else 0)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        order_by = _BUILD_ORDER_BY[query.sort_by]
        offset = (query.page - 1) * query.limit

        with sqlite3.connect(self.db_path) as conn:
            total = conn.execute(
                f"SELECT COUNT(*) FROM builds {where}",
                tuple(params),
            ).fetchone()[0]
            rows = conn.execute(
                f"SELECT build_json FROM builds {where} ORDER BY {order_by} LIMIT ? OFFSET ?",
                tuple(params) + (query.limit, offset),
            ).fetchall()
        return [Build.model_validate_json(r[0]) for r in rows], int(total)
