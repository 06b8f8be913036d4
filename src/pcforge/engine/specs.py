"""
规格参数读取 - Specification Accessors

配件的 specifications 是一个无类型的键值包，不同类别的键各不相同，
值可能是字符串、数字或布尔值（种子数据里还有列表）。
所有规则只通过这里的函数读取参数，集中处理类型转换。
The specification bag is untyped; every rule reads it through these
accessors so coercion lives in one place.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Any, Mapping, Optional, Union

Number = Union[int, float]

_NUMERIC_PREFIX = re.compile(r"^\s*(\d+(?:\.\d+)?)")
_INTEGER_PREFIX = re.compile(r"^\s*(\d+)")


def as_number(value: Union[int, float, Decimal]) -> Number:
    """整数值返回 int，其余返回 float；Decimal 整数保持精确，不经过 float"""
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    number = float(value)
    if number.is_integer():
        return int(number)
    return number


def to_number(value: Any) -> Optional[Number]:
    """
    将规格值转换为数字 - Coerce a specification value to a number

    - 布尔值不视为数字
    - 字符串取开头的数字部分，如 "125W" -> 125、"5600 MHz" -> 5600
    - 无法解析、超出 float 范围或非有限值（NaN、inf）时返回 None
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        match = _NUMERIC_PREFIX.match(value)
        if not match:
            return None
        value = match.group(1)
    elif not isinstance(value, (int, float, Decimal)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    if not math.isfinite(number):
        return None
    return as_number(number)


def get_number(specs: Mapping[str, Any] | None, key: str) -> Optional[Number]:
    return to_number((specs or {}).get(key))


def get_str(specs: Mapping[str, Any] | None, key: str) -> Optional[str]:
    """读取非空字符串；数字按文本返回，布尔值、列表等返回 None"""
    value = (specs or {}).get(key)
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = to_number(value)
        return str(number) if number is not None else None
    if isinstance(value, str):
        # 原样返回，比较时不去空白；全是空白的值视为缺失
        return value if value.strip() else None
    return None


def parse_capacity_gb(value: Any) -> Optional[int]:
    """解析 "128GB" 形式的容量：去掉非数字后缀，取整数前缀"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return int(value)
    if isinstance(value, str):
        match = _INTEGER_PREFIX.match(value)
        if not match:
            return None
        try:
            return int(match.group(1))
        except ValueError:
            # 超过解释器的整数位数上限
            return None
    return None
