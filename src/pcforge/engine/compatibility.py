"""
兼容性评估入口 - Compatibility Evaluation Entry Point

evaluate() 是引擎唯一的对外入口：纯函数、同步、无 I/O。
规则按固定顺序执行：插槽 -> 内存 -> 电源 -> 缺失建议。
evaluate() is the only public entry point: pure, synchronous, no I/O.
Rules run in a fixed order: socket -> memory -> power -> recommendations.
"""

from __future__ import annotations

from collections.abc import Mapping as MappingABC, Sequence as SequenceABC
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from ..errors import InvalidInput
from ..schemas import CATEGORY_NAMES, CompatibilityReport, ResolvedComponent
from .rules import (
    Applicable,
    PowerAssessment,
    RuleOutcome,
    check_memory,
    check_power,
    check_socket,
    recommend_missing,
)


def resolve_by_category(components: Iterable[ResolvedComponent]) -> Dict[str, ResolvedComponent]:
    """
    按类别归并配件 - Group components by category

    每个类别只保留一个代表配件；同一类别出现多次时，后出现的覆盖先出现的。
    这是有意保留的行为：规则只看每个类别最后选择的配件，
    而功耗估算仍然统计全部配件。未知类别不进入映射。
    One representative per category, last write wins. Rules only see the last
    component of a category while power estimation still counts all of them.
    """
    by_category: Dict[str, ResolvedComponent] = {}
    for component in components:
        if component.category in CATEGORY_NAMES:
            by_category[component.category] = component
    return by_category


def _coerce_components(components: Any) -> List[ResolvedComponent]:
    if isinstance(components, (str, bytes, MappingABC)) or not isinstance(components, SequenceABC):
        raise InvalidInput(
            f"components must be a list, got {type(components).__name__}"
        )

    resolved: List[ResolvedComponent] = []
    for index, item in enumerate(components):
        if isinstance(item, ResolvedComponent):
            resolved.append(item)
            continue
        if not isinstance(item, MappingABC):
            raise InvalidInput(
                f"components[{index}] must be a component mapping, got {type(item).__name__}"
            )
        try:
            resolved.append(ResolvedComponent.model_validate(item))
        except ValidationError as err:
            raise InvalidInput(f"components[{index}] is malformed: {err}") from err
    return resolved


def _collect(outcome: RuleOutcome, errors: List[str], warnings: List[str]) -> None:
    if isinstance(outcome, Applicable):
        errors.extend(outcome.errors)
        warnings.extend(outcome.warnings)


def evaluate(components: Any, *, now: Optional[datetime] = None) -> CompatibilityReport:
    """
    评估一组配件的兼容性 - Evaluate compatibility of a component list

    参数 Parameters:
        components: ResolvedComponent 列表，或可校验为 ResolvedComponent 的字典列表
                    List of ResolvedComponent, or mappings that validate into one
        now: 报告时间戳，默认当前 UTC 时间
             Report timestamp, defaults to the current UTC time

    返回 Returns:
        新建的 CompatibilityReport；兼容性冲突只会出现在 errors 中，不会抛出
        A fresh CompatibilityReport; conflicts are reported, never raised

    异常 Raises:
        InvalidInput: 参数不是列表，或条目结构无法解析
    """
    resolved = _coerce_components(components)
    by_category = resolve_by_category(resolved)

    cpu = by_category.get("CPU")
    motherboard = by_category.get("Motherboard")
    ram = by_category.get("RAM")
    psu = by_category.get("PSU")

    errors: List[str] = []
    warnings: List[str] = []

    _collect(check_socket(cpu, motherboard), errors, warnings)
    _collect(check_memory(ram, motherboard), errors, warnings)

    power = check_power(resolved, psu)
    _collect(power, errors, warnings)

    recommendations = recommend_missing(by_category)

    total_power_draw = None
    recommended = None
    if isinstance(power, PowerAssessment):
        total_power_draw = power.total_power_draw
        recommended = power.recommended_wattage

    return CompatibilityReport(
        is_compatible=not errors,
        errors=errors,
        warnings=warnings,
        recommendations=recommendations,
        component_count=len(resolved),
        checked_at=now or datetime.now(timezone.utc),
        total_power_draw=total_power_draw,
        recommended_wattage=recommended,
    )
