"""
Core module: ID registry and compilation errors.
"""

from msgpass.core.errors import (
    CompilationError,
    AmbiguousRuleError,
    NoMatchingRuleError,
    UnresolvedParameterError,
    InvalidPinError,
    IncompleteScheduleError,
    MalformedTopologyError,
)
from msgpass.core.registry import IDRegistry

__all__ = [
    "CompilationError",
    "AmbiguousRuleError",
    "NoMatchingRuleError",
    "UnresolvedParameterError",
    "InvalidPinError",
    "IncompleteScheduleError",
    "MalformedTopologyError",
    "IDRegistry",
]
