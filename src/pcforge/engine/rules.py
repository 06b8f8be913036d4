"""兼容性规则"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, Tuple, Union

from ..schemas import ResolvedComponent
from .power import estimate_total_draw, recommended_wattage
from .specs import Number, get_number, get_str, parse_capacity_gb


@dataclass(frozen=True)
class Applicable:
    """规则已执行；compatible=False 表示存在硬性冲突"""

    compatible: bool
    message: str = ""
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PowerAssessment(Applicable):
    total_power_draw: Number = 0
    recommended_wattage: int = 0


@dataclass(frozen=True)
class Inapplicable:
    """规则缺少必要参数而未执行，不算错误"""

    reason: str


RuleOutcome = Union[Applicable, Inapplicable]


RECOMMEND_STORAGE = "Add storage (SSD/HDD) to complete your build"
RECOMMEND_CASE = "Select a PC case to house your components"
RECOMMEND_PSU = "Add a power supply unit (PSU) to power your system"
RECOMMEND_COOLER = "Add a CPU cooler for proper thermal management"


def check_socket(
    cpu: Optional[ResolvedComponent],
    motherboard: Optional[ResolvedComponent],
) -> RuleOutcome:
    """CPU 与主板插槽必须完全一致（区分大小写）"""
    if cpu is None or motherboard is None:
        return Inapplicable("CPU or motherboard not selected")

    cpu_socket = get_str(cpu.specifications, "socket")
    motherboard_socket = get_str(motherboard.specifications, "socket")
    if not cpu_socket or not motherboard_socket:
        return Inapplicable("Socket information missing")

    if cpu_socket == motherboard_socket:
        return Applicable(True, f"Compatible sockets ({cpu_socket})")

    message = (
        f"CPU socket ({cpu_socket}) is not compatible with "
        f"motherboard socket ({motherboard_socket})"
    )
    return Applicable(False, message, errors=(message,))


def check_memory(
    ram: Optional[ResolvedComponent],
    motherboard: Optional[ResolvedComponent],
) -> RuleOutcome:
    """
    内存兼容性检查 - Memory Compatibility Check

    1. 内存类型必须与主板一致，不一致时直接返回错误，不再比较频率和容量
    2. 频率超过主板上限：警告（内存会降频运行）
    3. 容量超过主板上限（如 "128GB"）：警告
    """
    if ram is None or motherboard is None:
        return Inapplicable("RAM or motherboard not selected")

    ram_specs = ram.specifications
    board_specs = motherboard.specifications
    ram_type = get_str(ram_specs, "type")
    board_type = get_str(board_specs, "memoryType")
    if not ram_type or not board_type:
        return Inapplicable("Memory type information missing")

    if ram_type != board_type:
        message = (
            f"RAM type ({ram_type}) is not compatible with "
            f"motherboard memory type ({board_type})"
        )
        return Applicable(False, message, errors=(message,))

    warnings: List[str] = []

    ram_speed = get_number(ram_specs, "speed")
    max_speed = get_number(board_specs, "maxMemorySpeed")
    if ram_speed and max_speed and ram_speed > max_speed:
        warnings.append(
            f"RAM speed ({ram_speed} MHz) exceeds motherboard maximum ({max_speed} MHz)"
        )

    ram_capacity = get_number(ram_specs, "capacity")
    max_capacity = parse_capacity_gb(board_specs.get("maxMemory"))
    if ram_capacity and max_capacity and ram_capacity > max_capacity:
        warnings.append(
            f"RAM capacity ({ram_capacity}GB) exceeds motherboard maximum ({max_capacity}GB)"
        )

    return Applicable(True, f"Compatible memory type ({ram_type})", warnings=tuple(warnings))


def check_power(
    components: Sequence[ResolvedComponent],
    psu: Optional[ResolvedComponent],
) -> RuleOutcome:
    """电源功率是否覆盖整机估算功耗，以及是否保留 20% 余量"""
    if psu is None:
        return Inapplicable("PSU not selected")

    wattage = get_number(psu.specifications, "wattage")
    if not wattage or wattage <= 0:
        return Inapplicable("PSU wattage information missing")

    total = estimate_total_draw(components)
    recommended = recommended_wattage(total)

    if wattage < total:
        message = f"PSU wattage ({wattage}W) insufficient for estimated power draw ({total}W)"
        return PowerAssessment(
            False,
            message,
            errors=(message,),
            total_power_draw=total,
            recommended_wattage=recommended,
        )
    if wattage < recommended:
        message = f"PSU wattage ({wattage}W) below recommended ({recommended}W for 20% headroom)"
        return PowerAssessment(
            True,
            message,
            warnings=(message,),
            total_power_draw=total,
            recommended_wattage=recommended,
        )
    return PowerAssessment(
        True,
        f"PSU wattage ({wattage}W) covers estimated power draw ({total}W)",
        total_power_draw=total,
        recommended_wattage=recommended,
    )


def recommend_missing(by_category: Mapping[str, ResolvedComponent]) -> List[str]:
    """缺少重要类别时给出建议；只与缺失有关，不产生错误"""
    recommendations: List[str] = []
    if "Storage" not in by_category:
        recommendations.append(RECOMMEND_STORAGE)
    if "Case" not in by_category:
        recommendations.append(RECOMMEND_CASE)
    if "PSU" not in by_category:
        recommendations.append(RECOMMEND_PSU)
    if "CPU" in by_category and "Cooling" not in by_category:
        recommendations.append(RECOMMEND_COOLER)
    return recommendations
