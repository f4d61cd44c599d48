from .bounded_store import BoundedStore
from .kinds import ValueKind, classify
from .memory_estimator import SizeEstimator, estimate
from .policy import SizingPolicy
from .units import convert_size, format_bytes

__version__ = "0.1.0"

__all__ = [
    "BoundedStore",
    "SizeEstimator",
    "SizingPolicy",
    "ValueKind",
    "classify",
    "convert_size",
    "estimate",
    "format_bytes",
]
