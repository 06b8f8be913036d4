"""
异常定义 - Exception Definitions

兼容性结论（errors / warnings）永远不会以异常形式抛出，这里只包含
调用形态错误、输入校验失败以及资源不存在三类。
Compatibility verdicts are never raised; only malformed calls, failed
validation and missing resources are modelled as exceptions.
"""

from __future__ import annotations

from typing import List


class PCForgeError(Exception):
    """所有包内异常的基类 - Base class for package errors"""


class InvalidInput(PCForgeError, ValueError):
    """引擎收到无法解释的输入（非列表、条目结构错误）"""


class InvalidSelection(PCForgeError, ValueError):
    """配件选择无效，例如引用了目录中不存在的配件"""

    def __init__(self, message: str, details: List[str] | None = None):
        super().__init__(message)
        self.details = list(details or [])


class NotFound(PCForgeError, LookupError):
    """资源不存在；error 为响应中的错误标题"""

    error = "Not Found"


class ComponentNotFound(NotFound):
    pass


class CategoryNotFound(NotFound):
    error = "Category Not Found"


class BuildNotFound(NotFound):
    pass
