"""
功耗估算模块 - Power Draw Estimation Module

按类别估算每个配件的功耗，汇总后加上系统基础开销，并给出留 20% 余量的
推荐电源功率。计算使用 Decimal，避免 700 × 0.7 之类的浮点误差。
Estimate per-category power draw, add system overhead and derive the
recommended PSU wattage with 20% headroom. Decimal arithmetic throughout.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Iterable

from ..schemas import ResolvedComponent
from .specs import Number, as_number, get_number, get_str


SYSTEM_OVERHEAD_WATTS = Decimal("50")
"""
系统基础开销 - System Overhead

风扇、USB 外设等无法按配件计算的功耗。
Fans, USB devices and other draw not attributed to a component.
"""

HEADROOM_FACTOR = Decimal("1.2")
GPU_PSU_DRAW_RATIO = Decimal("0.7")

# 各类别的默认功耗（W） - Default draw per category (W)
CPU_DEFAULT_WATTS = Decimal("65")
GPU_DEFAULT_WATTS = Decimal("150")
MOTHERBOARD_WATTS = Decimal("50")
RAM_MODULE_WATTS = Decimal("10")
SSD_WATTS = Decimal("5")
HDD_WATTS = Decimal("10")
OTHER_WATTS = Decimal("10")


def _positive(value: Number | None) -> Decimal | None:
    if value is None or value <= 0:
        return None
    return Decimal(str(value))


def estimate_component_draw(component: ResolvedComponent) -> Decimal:
    """
    估算单个配件（单件）的功耗 - Estimate draw of one unit

    | 类别 | 取值 | 默认 |
    |---|---|---|
    | CPU | tdp | 65 |
    | GPU | powerConsumption，否则 recommendedPSU × 0.7 | 150 |
    | Motherboard | - | 50 |
    | RAM | - | 每根 10 |
    | Storage | - | 类型含 SSD 为 5，否则 10 |
    | PSU | - | 0（电源是供电方） |
    | 其他 | - | 10 |
    """
    specs = component.specifications
    category = component.category

    if category == "CPU":
        return _positive(get_number(specs, "tdp")) or CPU_DEFAULT_WATTS
    if category == "GPU":
        explicit = _positive(get_number(specs, "powerConsumption"))
        if explicit is not None:
            return explicit
        recommended_psu = _positive(get_number(specs, "recommendedPSU"))
        if recommended_psu is not None:
            return recommended_psu * GPU_PSU_DRAW_RATIO
        return GPU_DEFAULT_WATTS
    if category == "Motherboard":
        return MOTHERBOARD_WATTS
    if category == "RAM":
        return RAM_MODULE_WATTS
    if category == "Storage":
        storage_type = get_str(specs, "type") or ""
        return SSD_WATTS if "SSD" in storage_type.upper() else HDD_WATTS
    if category == "PSU":
        return Decimal("0")
    return OTHER_WATTS


def estimate_total_draw(components: Iterable[ResolvedComponent]) -> Number:
    """汇总所有配件（含重复类别、按数量计）的功耗并加上系统开销"""
    total = SYSTEM_OVERHEAD_WATTS
    for component in components:
        total += estimate_component_draw(component) * component.quantity
    return as_number(total)


def recommended_wattage(total_power_draw: Number) -> int:
    """推荐电源功率 = ceil(总功耗 × 1.2)"""
    return math.ceil(Decimal(str(total_power_draw)) * HEADROOM_FACTOR)
