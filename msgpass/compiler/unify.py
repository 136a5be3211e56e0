"""
msgpass/compiler/unify.py

Parameter extraction for rule patterns.

A rule's inbound patterns are walked against the concrete inbound types.
Each free parameter is bound at its first occurrence; any later
occurrence must carry the same value. The bindings are then substituted
into the outbound pattern, asking the node for parameters that no inbound
type carries.
"""

from __future__ import annotations

from typing import Dict, Optional, Sequence, Tuple

from msgpass.core.errors import UnresolvedParameterError
from msgpass.ir.types import Absent, MessageType, Pattern, TypeParam, Wildcard

Bindings = Dict[str, int]


def match(pattern: Pattern, concrete: Optional[MessageType], bindings: Bindings) -> bool:
    """
    Match one pattern against one concrete inbound type.

    Args:
        pattern: Rule pattern
        concrete: Concrete inbound type, or None for an absent inbound
        bindings: Parameter bindings so far; extended in place on success

    Returns:
        True if the pattern matches under the (extended) bindings
    """
    if isinstance(pattern, Wildcard):
        return True
    if isinstance(pattern, Absent):
        return concrete is None
    if concrete is None:
        return False
    if pattern.family != concrete.family or len(pattern.params) != len(concrete.params):
        return False
    for p, c in zip(pattern.params, concrete.params):
        if isinstance(p, TypeParam):
            if p.name not in bindings:
                bindings[p.name] = c
            elif bindings[p.name] != c:
                return False
        elif p != c:
            return False
    return True


def unify_inbounds(
    patterns: Sequence[Pattern],
    concrete_types: Sequence[Optional[MessageType]],
) -> Optional[Bindings]:
    """
    Unify a rule's inbound patterns with concrete inbound types.

    Returns:
        Parameter bindings, or None if the rule does not match
    """
    if len(patterns) != len(concrete_types):
        return None
    bindings: Bindings = {}
    for pattern, concrete in zip(patterns, concrete_types):
        if not match(pattern, concrete, bindings):
            return None
    return bindings


def substitute(pattern: MessageType, bindings: Bindings, node=None) -> MessageType:
    """
    Substitute bindings into an outbound pattern.

    Parameters missing from `bindings` are requested from
    `node.static_parameter(name)`.

    Raises:
        UnresolvedParameterError: If a parameter stays unbound
    """
    if pattern.is_concrete:
        return pattern
    values = []
    for p in pattern.params:
        if not isinstance(p, TypeParam):
            values.append(p)
        elif p.name in bindings:
            values.append(bindings[p.name])
        else:
            value = node.static_parameter(p.name) if node is not None else None
            if value is None:
                raise UnresolvedParameterError(
                    f"Outbound parameter {p.name} of {pattern} is bound neither by the inbound types "
                    f"nor by static data of the node",
                    parameter=p.name,
                    node_id=getattr(node, "id", None),
                )
            values.append(int(value))
    return MessageType(pattern.family, tuple(values))


def agrees_with_node(bindings: Bindings, requires: Sequence[Tuple[str, int]], node) -> bool:
    """
    Check a match against the static parameters of the node.

    A parameter bound by the inbound types must equal the node's own value
    for it, where the node has one; each `(name, value)` in `requires`
    must hold on the node.
    """
    for name, value in bindings.items():
        static = node.static_parameter(name)
        if static is not None and static != value:
            return False
    return all(node.static_parameter(name) == value for name, value in requires)


def substitute_known(pattern: MessageType, bindings: Bindings) -> MessageType:
    """Substitute the bound parameters only; unbound ones stay free."""
    return MessageType(
        pattern.family,
        tuple(bindings.get(p.name, p) if isinstance(p, TypeParam) else p for p in pattern.params),
    )
