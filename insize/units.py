"""Byte count conversion and formatting."""

import logging
from typing import Union

logger = logging.getLogger(__name__)

Number = Union[int, float]

UNIT_EXPONENTS = {
    "b": 0,
    "kb": 1,
    "Mb": 2,
    "Gb": 3,
}


def convert_size(num_bytes: Number, unit: str = "b") -> Number:
    exponent = UNIT_EXPONENTS.get(unit) if isinstance(unit, str) else None
    if exponent is None:
        logger.warning(f"Unknown size unit {unit!r}. Using bytes.")
        exponent = 0
    if exponent == 0:
        return num_bytes
    return num_bytes / 1024**exponent


def format_bytes(num_bytes: Number, precision: int = 2) -> str:
    size = float(num_bytes)
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024:
            return f"{size:.{precision}f} {unit}"
        size /= 1024
    return f"{size:.{precision}f} TB"
