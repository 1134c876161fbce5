"""
单位换算 (Unit Normalization)

把上游返回的原始字节数换算为 GiB 字符串。纯函数，无副作用。
"""
import math

from telemetry_gateway.core.exceptions import NotNumeric

BYTES_PER_GIB = 1024 ** 3
SIZE_SUFFIX = "GB"
UNAVAILABLE = "N/A"


def bytes_to_gib(value: str) -> str:
    """
    字节数字符串 → 两位小数的 GiB 字符串 (Byte-count string to a two-decimal GiB string)

    Raises:
        NotNumeric: 不是数值、为负数或非有限值
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise NotNumeric(f"Not a numeric byte count: {value!r}") from None
    if not math.isfinite(number) or number < 0:
        raise NotNumeric(f"Not a valid byte count: {value!r}")
    return f"{number / BYTES_PER_GIB:.2f}"
