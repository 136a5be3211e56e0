"""
msgpass/core/errors.py

Compilation errors.

Every failure of rule resolution or code generation is raised immediately
as a subclass of CompilationError. Context (schedule entry index, node id,
attempted inbound types) is attached where it becomes known.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence, Tuple


def format_types(types: Sequence[Any]) -> str:
    """Format a sequence of message types, showing absent inbounds as `None`."""
    return "[" + ", ".join("None" if t is None else str(t) for t in types) + "]"


class CompilationError(Exception):
    """
    Base class for all compilation failures.

    Attributes:
        message: Description of the failure
        entry_index: Index of the offending schedule entry (if known)
        node_id: Id of the node the entry belongs to (if known)
        inbound_types: Concrete inbound types that were tried (if known)
    """

    def __init__(
        self,
        message: str,
        *,
        entry_index: Optional[int] = None,
        node_id: Optional[str] = None,
        inbound_types: Optional[Sequence[Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.entry_index = entry_index
        self.node_id = node_id
        self.inbound_types: Optional[Tuple[Any, ...]] = (
            tuple(inbound_types) if inbound_types is not None else None
        )

    def add_context(
        self,
        *,
        entry_index: Optional[int] = None,
        node_id: Optional[str] = None,
        inbound_types: Optional[Sequence[Any]] = None,
    ) -> "CompilationError":
        """Fill in context fields that are still unknown; existing values are kept."""
        if self.entry_index is None:
            self.entry_index = entry_index
        if self.node_id is None:
            self.node_id = node_id
        if self.inbound_types is None and inbound_types is not None:
            self.inbound_types = tuple(inbound_types)
        return self

    def __str__(self) -> str:
        lines = [self.message]
        if self.entry_index is not None:
            lines.append(f"Schedule entry: {self.entry_index}")
        if self.node_id is not None:
            lines.append(f"Node: {self.node_id}")
        if self.inbound_types is not None:
            lines.append(f"Inbound types: {format_types(self.inbound_types)}")
        return "\n".join(lines)


class AmbiguousRuleError(CompilationError):
    """More than one rule matches at a single resolution stage."""

    def __init__(self, message: str, *, outbound_types: Sequence[Any] = (), **context):
        super().__init__(message, **context)
        self.outbound_types = tuple(outbound_types)


class NoMatchingRuleError(CompilationError):
    """Neither an exact nor an approximate rule matches."""


class UnresolvedParameterError(CompilationError):
    """An outbound type parameter has no binding from inbounds or node metadata."""

    def __init__(self, message: str, *, parameter: Optional[str] = None, **context):
        super().__init__(message, **context)
        self.parameter = parameter


class InvalidPinError(CompilationError):
    """A pinned outbound type is produced by no matching rule."""

    def __init__(self, message: str, *, pinned: Any = None, **context):
        super().__init__(message, **context)
        self.pinned = pinned


class IncompleteScheduleError(CompilationError):
    """A requested marginal needs a message direction the schedule never computes."""

    def __init__(self, message: str, *, variable_id: Optional[str] = None, **context):
        super().__init__(message, **context)
        self.variable_id = variable_id


class MalformedTopologyError(CompilationError):
    """A partnership or ordering invariant of the graph or schedule is violated."""
