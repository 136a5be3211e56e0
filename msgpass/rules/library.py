"""
msgpass/rules/library.py

Rule library: a rule registry paired with the implementation of each rule.

Exact rule implementations are called as `impl(node, *inbounds)`;
approximate ones as `impl(node, *inbounds, marginals=marginals)`, where
`inbounds` holds one message (or None) per non-outbound interface.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional, Sequence, Tuple

from msgpass.compiler.registry import Rule, RuleRegistry
from msgpass.ir.types import Absent, Category, MessageType, Pattern, Wildcard
from msgpass.vm.vm import RuleImplementation

_ABBREVIATIONS = {
    "PointMass": "pm",
    "MvPointMass": "mvpm",
    "MatrixPointMass": "mxpm",
    "Gaussian": "g",
    "MvGaussian": "mvg",
    "Gamma": "gam",
    "InverseGamma": "ig",
    "StudentsT": "st",
}


def pattern_tag(pattern: Pattern) -> str:
    """Short tag of a pattern, used to build readable rule ids."""
    if isinstance(pattern, Wildcard):
        return "any"
    if isinstance(pattern, Absent):
        return "none"
    return _ABBREVIATIONS.get(pattern.family, pattern.family.lower())


def rule_id(prefix: str, inbound: Sequence[Pattern]) -> str:
    """Rule id `<prefix>_<tag>_<tag>...` from the inbound patterns."""
    return "_".join([prefix] + [pattern_tag(p) for p in inbound])


class RuleLibrary:
    """
    Registry plus implementations.

    Attributes:
        registry: Rule catalog consumed by the resolver
        implementations: Rule id -> implementation consumed by the VM
    """

    def __init__(self, registry: Optional[RuleRegistry] = None):
        self.registry = registry if registry is not None else RuleRegistry()
        self.implementations: Dict[str, RuleImplementation] = {}

    def add(
        self,
        id: str,
        implementation: RuleImplementation,
        node_kind: str,
        slot: int,
        inbound: Sequence[Pattern],
        outbound: MessageType,
        category: Category = Category.EXACT,
        approximation: Optional[str] = None,
        requires: Sequence[Tuple[str, int]] = (),
    ) -> Rule:
        """Register a rule and its implementation."""
        rule = self.registry.register(id, node_kind, slot, inbound, outbound, category, approximation, requires)
        self.implementations[id] = implementation
        return rule

    def rule(
        self,
        id: str,
        node_kind: str,
        slot: int,
        inbound: Sequence[Pattern],
        outbound: MessageType,
        category: Category = Category.EXACT,
        approximation: Optional[str] = None,
        requires: Sequence[Tuple[str, int]] = (),
    ) -> Callable[[RuleImplementation], RuleImplementation]:
        """Decorator form of `add`."""
        def decorator(fn: RuleImplementation) -> RuleImplementation:
            self.add(id, fn, node_kind, slot, inbound, outbound, category, approximation, requires)
            return fn
        return decorator

    def __len__(self) -> int:
        return len(self.implementations)

    def __repr__(self) -> str:
        return f"RuleLibrary(rules={len(self.implementations)})"
