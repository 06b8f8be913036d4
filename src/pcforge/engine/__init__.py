"""Engine 模块：兼容性规则与功耗估算"""

from .compatibility import evaluate, resolve_by_category
from .power import estimate_component_draw, estimate_total_draw, recommended_wattage
from .rules import Applicable, Inapplicable, PowerAssessment, check_memory, check_power, check_socket

__all__ = [
    "evaluate",
    "resolve_by_category",
    "estimate_component_draw",
    "estimate_total_draw",
    "recommended_wattage",
    "Applicable",
    "Inapplicable",
    "PowerAssessment",
    "check_memory",
    "check_power",
    "check_socket",
]
