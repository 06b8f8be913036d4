from __future__ import annotations

import math
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator
from pydantic.alias_generators import to_camel


ComponentCategory = Literal[
    "CPU",
    "Motherboard",
    "RAM",
    "GPU",
    "Storage",
    "PSU",
    "Case",
    "Cooling",
]

CATEGORY_NAMES = (
    "CPU",
    "Motherboard",
    "RAM",
    "GPU",
    "Storage",
    "PSU",
    "Case",
    "Cooling",
)

# 单次兼容性检查 / 装机方案最多包含的条目数
MAX_SELECTION_ITEMS = 20
MAX_QUANTITY = 10


class CamelModel(BaseModel):
    # 对外 JSON 使用 camelCase，Python 内部使用 snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Category(CamelModel):
    name: ComponentCategory
    display_name: str
    description: str = ""
    icon: str = ""
    sort_order: int = 0


class CategorySummary(Category):
    component_count: int = 0


DEFAULT_CATEGORIES: List[Category] = [
    Category(name="CPU", display_name="Processor", description="Central Processing Unit - the brain of your computer", icon="cpu", sort_order=1),
    Category(name="Motherboard", display_name="Motherboard", description="Main circuit board that connects all components", icon="motherboard", sort_order=2),
    Category(name="RAM", display_name="Memory", description="Random Access Memory for temporary data storage", icon="memory", sort_order=3),
    Category(name="GPU", display_name="Graphics Card", description="Graphics Processing Unit for rendering visuals", icon="gpu", sort_order=4),
    Category(name="Storage", display_name="Storage", description="Solid State Drives and Hard Disk Drives", icon="storage", sort_order=5),
    Category(name="PSU", display_name="Power Supply", description="Power Supply Unit to power all components", icon="power", sort_order=6),
    Category(name="Case", display_name="PC Case", description="Housing for all your PC components", icon="case", sort_order=7),
    Category(name="Cooling", display_name="Cooling", description="CPU coolers and case fans", icon="cooling", sort_order=8),
]


class Component(CamelModel):
    id: str
    name: str
    model: str = ""
    brand: str = ""
    description: str = ""
    category: ComponentCategory
    price: Optional[Decimal] = Field(default=None, ge=0)
    in_stock: bool = True
    specifications: Dict[str, Any] = Field(default_factory=dict)

    @field_serializer("price")
    def _serialize_price(self, value: Optional[Decimal]) -> Optional[float]:
        return float(value) if value is not None else None


class ResolvedComponent(CamelModel):
    """兼容性引擎的输入条目：已从目录解析出类别与规格参数"""

    component_id: str
    category: str
    specifications: Dict[str, Any] = Field(default_factory=dict)
    quantity: int = Field(default=1, ge=1)
    name: str = ""

    @classmethod
    def from_component(cls, component: Component, quantity: int = 1) -> "ResolvedComponent":
        return cls(
            component_id=component.id,
            category=component.category,
            specifications=dict(component.specifications),
            quantity=quantity,
            name=component.name,
        )


class CompatibilityReport(CamelModel):
    """
    兼容性报告 - Compatibility Report

    每次检查新建的不可变结果；is_compatible 恒等于 errors 为空，构造时校验。
    Immutable result built per check; is_compatible always equals "no errors",
    checked at construction time.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    is_compatible: bool
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()
    component_count: int = 0
    checked_at: datetime
    total_power_draw: Optional[Union[int, float]] = None
    recommended_wattage: Optional[int] = None

    @model_validator(mode="after")
    def check_verdict_matches_errors(self) -> "CompatibilityReport":
        if self.is_compatible != (not self.errors):
            raise ValueError("is_compatible must be true exactly when errors is empty")
        return self

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SelectionItem(CamelModel):
    component_id: str = Field(min_length=1)
    quantity: int = Field(default=1, ge=1, le=MAX_QUANTITY)


class CompatibilityCheckRequest(CamelModel):
    components: List[SelectionItem] = Field(min_length=1, max_length=MAX_SELECTION_ITEMS)


class BuildCreateRequest(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    use_case: Optional[str] = None
    is_public: bool = False
    components: List[SelectionItem] = Field(min_length=1, max_length=MAX_SELECTION_ITEMS)


class BuildComponent(CamelModel):
    component_id: str
    quantity: int
    component: Component


class Build(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    use_case: Optional[str] = None
    is_public: bool = False
    total_price: Decimal = Decimal("0")
    components: List[BuildComponent] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @field_serializer("total_price")
    def _serialize_total_price(self, value: Decimal) -> float:
        return float(value)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


ComponentSort = Literal["price-asc", "price-desc", "name-asc", "name-desc"]
BuildSort = Literal["created-desc", "created-asc", "price-desc", "price-asc", "name-asc"]


class ComponentQuery(CamelModel):
    category: Optional[str] = None
    brand: Optional[str] = Field(default=None, max_length=50)
    search: Optional[str] = Field(default=None, min_length=1, max_length=100)
    price_min: Optional[Decimal] = Field(default=None, ge=0)
    price_max: Optional[Decimal] = Field(default=None, ge=0)
    in_stock: Optional[bool] = None
    sort_by: ComponentSort = "name-asc"
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)


class BuildQuery(CamelModel):
    use_case: Optional[str] = None
    is_public: Optional[bool] = None
    sort_by: BuildSort = "created-desc"
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=50)


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = math.ceil(total / limit) if limit else 0
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )
