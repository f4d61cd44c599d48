"""Approximate in-memory size of arbitrary Python values.

The estimate follows a deliberately simple cost model rather than CPython's
real object layout:

* ``None`` costs nothing, booleans, numbers and dates cost a fixed amount
  (see :class:`SizingPolicy`), and every callable costs a fixed overhead.
* Text costs its UTF-8 encoded length, patterns the length of their source,
  enum members the length of their name.
* Byte buffers cost exactly their length in bytes.
* Containers and objects cost nothing themselves; they cost the sum of their
  elements, or of their keys and values, or of their attribute names and
  attribute values.

Composite values are priced by reference identity: a container reached twice
in one traversal, whether through a cycle or through sharing, is counted the
first time only.
"""

import logging
from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

import numpy as np

from .kinds import COMPOSITE_KINDS, ValueKind, classify
from .policy import SizingPolicy
from .units import convert_size

logger = logging.getLogger(__name__)

Sizer = Callable[[Any], Tuple[int, Iterable[Any]]]

_NO_CHILDREN: Tuple[Any, ...] = ()


def _utf8_length(text: str) -> int:
    return len(text.encode("utf-8", "surrogatepass"))


def _mangle(cls: type, name: str) -> str:
    if name.startswith("__") and not name.endswith("__"):
        return f"_{cls.__name__.lstrip('_')}{name}"
    return name


def _own_attributes(value: Any) -> Iterator[Any]:
    """Yield attribute names and values, alternating, for an object.

    Covers the instance ``__dict__`` and every ``__slots__`` entry declared
    along the MRO. Slots that were never assigned are skipped.
    """
    try:
        attributes = getattr(value, "__dict__", None)
    except Exception as e:
        logger.debug(f"Could not read {type(value).__name__}.__dict__: {e}")
        attributes = None
    if isinstance(attributes, Mapping):
        for name, attribute in attributes.items():
            yield name
            yield attribute
    seen_names = set()
    for cls in type(value).__mro__[:-1]:
        slots = vars(cls).get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for slot in slots:
            if slot in ("__dict__", "__weakref__"):
                continue
            name = _mangle(cls, slot)
            if name in seen_names:
                continue
            seen_names.add(name)
            try:
                attribute = getattr(value, name)
            except AttributeError:
                continue
            yield name
            yield attribute


def _mapping_entries(value: Mapping) -> Iterator[Any]:
    for key, item in value.items():
        yield key
        yield item


def _elements(value: Any) -> Iterator[Any]:
    if isinstance(value, np.ndarray):
        yield from value.flat
    else:
        yield from value


class SizeEstimator:
    """Walks a value and adds up the estimated size of everything it reaches.

    The walk uses an explicit worklist, so deeply nested values do not hit the
    interpreter's recursion limit. All traversal state lives in a single call;
    an estimator can be shared freely.
    """

    def __init__(self, policy: Optional[SizingPolicy] = None):
        self.policy = policy or SizingPolicy()
        self._sizers: Dict[ValueKind, Sizer] = {
            ValueKind.ABSENT: self._size_absent,
            ValueKind.BOOLEAN: self._size_boolean,
            ValueKind.SYMBOL: self._size_symbol,
            ValueKind.DATE: self._size_date,
            ValueKind.NUMBER: self._size_number,
            ValueKind.TEXT: self._size_text,
            ValueKind.PATTERN: self._size_pattern,
            ValueKind.CALLABLE: self._size_callable,
            ValueKind.BUFFER: self._size_buffer,
            ValueKind.MAPPING: self._size_mapping,
            ValueKind.SET: self._size_collection,
            ValueKind.SEQUENCE: self._size_collection,
            ValueKind.OBJECT: self._size_object,
            ValueKind.UNKNOWN: self._size_unknown,
        }

    def size_of(self, value: Any) -> int:
        """Estimated size of ``value`` in bytes."""
        return sum(self.breakdown(value).values())

    def breakdown(self, value: Any) -> Dict[ValueKind, int]:
        """Estimated size of ``value`` split by the kind that contributed it.

        Only kinds that were reached appear in the result, including kinds
        that contributed 0 bytes.
        """
        totals: Dict[ValueKind, int] = {}
        # id -> object; holding the object keeps its id from being reused.
        seen: Dict[int, Any] = {}
        pending: List[Any] = [value]
        while pending:
            item = pending.pop()
            try:
                kind = classify(item)
            except Exception as e:
                logger.debug(f"Could not classify {type(item).__name__}: {e}")
                kind = ValueKind.UNKNOWN
            if kind in COMPOSITE_KINDS:
                if id(item) in seen:
                    continue
                seen[id(item)] = item
            size, children = self._sizers[kind](item)
            totals[kind] = totals.get(kind, 0) + size
            pending.extend(children)
        return totals

    def _collect(self, value: Any, children: Iterator[Any]) -> List[Any]:
        collected = []
        try:
            for child in children:
                collected.append(child)
        except Exception as e:
            logger.debug(
                f"Could not enumerate {type(value).__name__} contents, "
                f"keeping {len(collected)} items: {e}"
            )
        return collected

    def _size_absent(self, value: Any) -> Tuple[int, Iterable[Any]]:
        return 0, _NO_CHILDREN

    def _size_boolean(self, value: Any) -> Tuple[int, Iterable[Any]]:
        return self.policy.boolean_size, _NO_CHILDREN

    def _size_symbol(self, value: Any) -> Tuple[int, Iterable[Any]]:
        # Flag pseudo-members such as Perm(0) have no name.
        name = value.name if value.name is not None else str(value.value)
        return _utf8_length(name), _NO_CHILDREN

    def _size_date(self, value: Any) -> Tuple[int, Iterable[Any]]:
        return self.policy.date_size, _NO_CHILDREN

    def _size_number(self, value: Any) -> Tuple[int, Iterable[Any]]:
        return self.policy.number_size, _NO_CHILDREN

    def _size_text(self, value: str) -> Tuple[int, Iterable[Any]]:
        return _utf8_length(value), _NO_CHILDREN

    def _size_pattern(self, value: Any) -> Tuple[int, Iterable[Any]]:
        source = value.pattern
        if isinstance(source, str):
            return _utf8_length(source), _NO_CHILDREN
        return len(source), _NO_CHILDREN

    def _size_callable(self, value: Any) -> Tuple[int, Iterable[Any]]:
        return self.policy.callable_size, _NO_CHILDREN

    def _size_buffer(self, value: Any) -> Tuple[int, Iterable[Any]]:
        if isinstance(value, np.ndarray):
            return int(value.nbytes), _NO_CHILDREN
        try:
            with memoryview(value) as view:
                return view.nbytes, _NO_CHILDREN
        except ValueError as e:
            # Released memoryviews can no longer be measured.
            logger.debug(f"Could not measure {type(value).__name__}: {e}")
            return 0, _NO_CHILDREN

    def _size_mapping(self, value: Mapping) -> Tuple[int, Iterable[Any]]:
        return 0, self._collect(value, _mapping_entries(value))

    def _size_collection(self, value: Any) -> Tuple[int, Iterable[Any]]:
        return 0, self._collect(value, _elements(value))

    def _size_object(self, value: Any) -> Tuple[int, Iterable[Any]]:
        return 0, self._collect(value, _own_attributes(value))

    def _size_unknown(self, value: Any) -> Tuple[int, Iterable[Any]]:
        logger.debug(f"No size rule for {type(value).__name__}, counting 0 bytes")
        return 0, _NO_CHILDREN


_default_estimator = SizeEstimator()


def estimate(
    value: Any, unit: str = "b", policy: Optional[SizingPolicy] = None
) -> float:
    """
    Estimate the memory size of a value, including nested values.

    Args:
        value: The value to measure
        unit: "b" (default), "kb", "Mb" or "Gb"; anything else means bytes
        policy: Costs for fixed-size kinds; defaults to SizingPolicy()

    Returns:
        Estimated size in the requested unit
    """
    estimator = _default_estimator if policy is None else SizeEstimator(policy)
    return convert_size(estimator.size_of(value), unit)
