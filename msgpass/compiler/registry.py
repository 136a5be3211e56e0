"""
msgpass/compiler/registry.py

Rule registry.

A pure catalog of message update rules indexed by
(node kind, outbound slot, category). Lookup matches inbound patterns
against concrete inbound types and returns every matching candidate;
deciding between zero, one and many candidates is the resolver's job.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from msgpass.compiler.unify import Bindings, agrees_with_node, substitute, substitute_known, unify_inbounds
from msgpass.core.errors import UnresolvedParameterError
from msgpass.ir.types import Approximation, Category, MessageType, Pattern


@dataclass(frozen=True)
class Rule:
    """
    A registered message update rule.

    Attributes:
        id: Unique rule id, the key of its implementation
        node_kind: Node kind the rule applies to
        slot: Outbound interface index
        inbound: One pattern per other interface, in interface order
        outbound: Outbound type pattern
        category: EXACT or APPROXIMATE
        approximation: Approximation method tag (approximate rules only)
        requires: Static parameter values the node must have, as (name, value)
    """
    id: str
    node_kind: str
    slot: int
    inbound: Tuple[Pattern, ...]
    outbound: MessageType
    category: Category = Category.EXACT
    approximation: Optional[str] = None
    requires: Tuple[Tuple[str, int], ...] = ()


@dataclass(frozen=True)
class Candidate:
    """A rule that matched, with the parameter bindings of the match."""
    rule: Rule
    bindings: Bindings

    def outbound_type(self, node=None) -> MessageType:
        """Concrete outbound type; node supplies parameters no inbound carries."""
        return substitute(self.rule.outbound, self.bindings, node)

    def produces(self, outbound: MessageType, node=None) -> bool:
        """True if the candidate's concrete outbound type is `outbound`."""
        try:
            return self.outbound_type(node) == outbound
        except UnresolvedParameterError:
            return False

    def describe(self, node=None):
        """
        Outbound type as reported in diagnostics (tagged for approximate rules).

        Falls back to the partially substituted pattern when a parameter
        cannot be bound.
        """
        try:
            outbound = self.outbound_type(node)
        except UnresolvedParameterError:
            outbound = substitute_known(self.rule.outbound, self.bindings)
        if self.rule.approximation is not None:
            return Approximation(outbound, self.rule.approximation)
        return outbound


class RuleRegistry:
    """
    Catalog of rules.

    Maintains:
    - Rules by id
    - (node kind, slot, category) -> rules in registration order
    """

    def __init__(self):
        self._rules: Dict[str, Rule] = {}
        self._index: Dict[Tuple[str, int, Category], List[Rule]] = {}

    def register(
        self,
        id: str,
        node_kind: str,
        slot: int,
        inbound: Sequence[Pattern],
        outbound: MessageType,
        category: Category = Category.EXACT,
        approximation: Optional[str] = None,
        requires: Sequence[Tuple[str, int]] = (),
    ) -> Rule:
        """
        Add a rule to the catalog.

        Raises:
            ValueError: On a duplicate id or an inconsistent category/approximation pair
        """
        if id in self._rules:
            raise ValueError(f"Rule {id!r} is already registered")
        if category is Category.APPROXIMATE and approximation is None:
            raise ValueError(f"Approximate rule {id!r} needs an approximation method")
        if category is Category.EXACT and approximation is not None:
            raise ValueError(f"Exact rule {id!r} cannot carry an approximation method")
        if not isinstance(outbound, MessageType):
            raise ValueError(f"Outbound pattern of rule {id!r} must be a MessageType, got {outbound!r}")

        rule = Rule(
            id=id,
            node_kind=node_kind,
            slot=slot,
            inbound=tuple(inbound),
            outbound=outbound,
            category=category,
            approximation=approximation,
            requires=tuple(requires),
        )
        self._rules[id] = rule
        self._index.setdefault((node_kind, slot, category), []).append(rule)
        return rule

    def lookup(
        self,
        node_kind: str,
        slot: int,
        inbound_types: Sequence[Optional[MessageType]],
        category: Category,
        approximation: Optional[str] = None,
        node=None,
    ) -> List[Candidate]:
        """
        Find all rules matching a call signature.

        Args:
            node_kind: Node kind
            slot: Outbound interface index
            inbound_types: Concrete inbound types (None for absent inbounds)
            category: Rule category to search
            approximation: Restrict approximate rules to this method
            node: When given, drop matches that disagree with its static
                parameters or miss the rule's requirements

        Returns:
            Matching candidates in registration order
        """
        candidates: List[Candidate] = []
        for rule in self._index.get((node_kind, slot, category), ()):
            if approximation is not None and rule.approximation != approximation:
                continue
            bindings = unify_inbounds(rule.inbound, inbound_types)
            if bindings is None:
                continue
            if node is not None and not agrees_with_node(bindings, rule.requires, node):
                continue
            candidates.append(Candidate(rule=rule, bindings=bindings))
        return candidates

    def rule(self, id: str) -> Rule:
        """Get a rule by id."""
        return self._rules[id]

    def rules_for(self, node_kind: str) -> List[Rule]:
        """All rules registered for a node kind."""
        return [r for r in self._rules.values() if r.node_kind == node_kind]

    def __contains__(self, id: str) -> bool:
        return id in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules.values())

    def __repr__(self) -> str:
        return f"RuleRegistry(rules={len(self._rules)})"
