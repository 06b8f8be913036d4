"""PCForge：配件目录、装机方案与兼容性检查"""

from .engine import evaluate
from .errors import InvalidInput, InvalidSelection, PCForgeError
from .schemas import CompatibilityReport, ResolvedComponent

__all__ = [
    "evaluate",
    "InvalidInput",
    "InvalidSelection",
    "PCForgeError",
    "CompatibilityReport",
    "ResolvedComponent",
]

__version__ = "0.1.0"
