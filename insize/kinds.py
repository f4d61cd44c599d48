"""Classification of Python values into the kinds the estimator knows how to price."""

import array
import collections
import datetime
import enum
import functools
import inspect
import numbers
import re
import types
from collections.abc import Mapping, Set, ValuesView
from typing import Any

import numpy as np


class ValueKind(enum.Enum):
    ABSENT = "absent"
    BOOLEAN = "boolean"
    SYMBOL = "symbol"
    DATE = "date"
    NUMBER = "number"
    TEXT = "text"
    PATTERN = "pattern"
    CALLABLE = "callable"
    BUFFER = "buffer"
    MAPPING = "mapping"
    SET = "set"
    SEQUENCE = "sequence"
    OBJECT = "object"
    UNKNOWN = "unknown"


# Kinds priced by reference identity: counted once per traversal.
COMPOSITE_KINDS = frozenset(
    {
        ValueKind.BUFFER,
        ValueKind.MAPPING,
        ValueKind.SET,
        ValueKind.SEQUENCE,
        ValueKind.OBJECT,
    }
)

_DATE_TYPES = (
    datetime.date,
    datetime.time,
    datetime.timedelta,
    np.datetime64,
    np.timedelta64,
)
_BUFFER_TYPES = (bytes, bytearray, memoryview, array.array)
_SEQUENCE_TYPES = (list, tuple, collections.deque, ValuesView)


def _is_callable_value(value: Any) -> bool:
    return (
        inspect.isroutine(value)
        or inspect.isclass(value)
        or isinstance(value, functools.partial)
    )


def _has_own_attributes(value: Any) -> bool:
    try:
        attributes = getattr(value, "__dict__", None)
    except Exception:
        # An unreadable __dict__ leaves only the slots to walk.
        attributes = None
    if isinstance(attributes, Mapping):
        return True
    return any("__slots__" in vars(cls) for cls in type(value).__mro__[:-1])


def classify(value: Any) -> ValueKind:
    """Map a value onto exactly one ValueKind.

    The checks run in a fixed order: bool before numbers (bool is an int),
    enum members before numbers (IntEnum), dates before numbers
    (numpy.timedelta64 is an integer scalar), and buffers and containers
    before the generic attribute walk.
    """
    if value is None:
        return ValueKind.ABSENT
    if isinstance(value, (bool, np.bool_)):
        return ValueKind.BOOLEAN
    if isinstance(value, enum.Enum):
        return ValueKind.SYMBOL
    if isinstance(value, _DATE_TYPES):
        return ValueKind.DATE
    if isinstance(value, numbers.Number):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.TEXT
    if isinstance(value, re.Pattern):
        return ValueKind.PATTERN
    if _is_callable_value(value):
        return ValueKind.CALLABLE
    if isinstance(value, np.ndarray):
        if value.dtype == np.dtype(object):
            return ValueKind.SEQUENCE
        return ValueKind.BUFFER
    if isinstance(value, _BUFFER_TYPES):
        return ValueKind.BUFFER
    if isinstance(value, Mapping):
        return ValueKind.MAPPING
    if isinstance(value, Set):
        return ValueKind.SET
    if isinstance(value, _SEQUENCE_TYPES):
        return ValueKind.SEQUENCE
    if isinstance(value, types.ModuleType):
        return ValueKind.UNKNOWN
    if _has_own_attributes(value):
        return ValueKind.OBJECT
    return ValueKind.UNKNOWN
