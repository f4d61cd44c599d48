"""Byte costs assigned to the fixed-size value kinds."""

from dataclasses import dataclass, fields


@dataclass(frozen=True)
class SizingPolicy:
    """Fixed costs, in bytes, used by the estimator.

    Text, patterns, symbols and buffers are priced from their length and are
    not configurable. Containers and objects cost only what their contents
    cost.
    """

    boolean_size: int = 4
    number_size: int = 8
    date_size: int = 8
    callable_size: int = 64

    def __post_init__(self):
        for field in fields(self):
            value = getattr(self, field.name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{field.name} must be an integer, got {value!r}")
            if value < 0:
                raise ValueError(f"{field.name} must not be negative, got {value}")
