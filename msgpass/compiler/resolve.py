"""
msgpass/compiler/resolve.py

Outbound type resolution.

Per schedule entry, in schedule order:

    UNRESOLVED -> exact lookup -> 1 candidate  -> EXACT
                               -> 2+           -> AmbiguousRuleError
                               -> 0 -> approximate lookup -> 1  -> APPROXIMATE
                                                          -> 2+ -> AmbiguousRuleError
                                                          -> 0  -> NoMatchingRuleError

A pinned entry (outbound type given by the caller) is validated instead:
the pinned type must be produced by an exact candidate, or else be the
primary type of an approximate candidate, or InvalidPinError is raised.
There is no fallback to another approximation method.

Lookups pass the node, so a match must agree with its static parameters
(the gain shape of a FixedGainNode, for one).

Resolution never mutates entries; each resolved entry is a new value.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from msgpass.compiler.registry import Candidate, RuleRegistry
from msgpass.core.errors import (
    AmbiguousRuleError,
    CompilationError,
    InvalidPinError,
    MalformedTopologyError,
    NoMatchingRuleError,
)
from msgpass.ir.types import Category, MessageType
from msgpass.runtime.schedule import Resolution, Schedule, ScheduleEntry
from msgpass.topology.nodes import CompositeNode, Terminal

logger = logging.getLogger(__name__)

InboundTypes = Tuple[Optional[MessageType], ...]


class OutboundTypeResolver:
    """
    Selects the rule and infers the outbound type of schedule entries.

    Attributes:
        registry: Rule catalog
        leaf_types: Node id -> externally supplied message type for leaf
            nodes (terminals, or placeholders whose held value is only a
            stand-in)
    """

    def __init__(
        self,
        registry: RuleRegistry,
        *,
        leaf_types: Optional[Mapping[str, MessageType]] = None,
    ):
        self.registry = registry
        self.leaf_types: Dict[str, MessageType] = dict(leaf_types or {})

    def resolve(self, schedule: Schedule) -> Schedule:
        """Resolve every entry in order and return the resolved schedule."""
        resolved: Dict[int, ScheduleEntry] = {}
        for index in range(len(schedule)):
            resolved[index] = self.resolve_entry(schedule, index, resolved)
        return Schedule(resolved[i] for i in range(len(schedule)))

    def resolve_entry(
        self,
        schedule: Schedule,
        index: int,
        resolved: Mapping[int, ScheduleEntry],
    ) -> ScheduleEntry:
        """
        Resolve a single entry.

        Args:
            schedule: Schedule the entry belongs to
            index: Entry index
            resolved: Already resolved entries by index; every inbound
                reference of the entry must be present

        Returns:
            New entry with rule id, outbound type and approximation filled in
        """
        entry = schedule[index]
        node = entry.node
        try:
            inbound_types = self._inbound_types(schedule, index, resolved)
            if node.is_leaf:
                result = self._resolve_leaf(entry)
            elif isinstance(node, CompositeNode) and entry.outbound_slot in node.inner_schedules:
                result = self._resolve_composite(entry, inbound_types)
            elif entry.is_pinned:
                result = self._validate_pin(entry, inbound_types)
            else:
                result = self._infer(entry, inbound_types)
        except CompilationError as exc:
            exc.add_context(entry_index=index, node_id=node.id)
            raise

        logger.debug("Resolved entry %d: %s", index, result)
        return result

    def _inbound_types(
        self,
        schedule: Schedule,
        index: int,
        resolved: Mapping[int, ScheduleEntry],
    ) -> InboundTypes:
        entry = schedule[index]
        others = entry.inbound_interfaces()
        if len(entry.inbounds) != len(others):
            raise MalformedTopologyError(
                f"Entry has {len(entry.inbounds)} inbound references, "
                f"{entry.node.kind} requires {len(others)}"
            )

        types: List[Optional[MessageType]] = []
        for iface, ref in zip(others, entry.inbounds):
            if ref is None:
                types.append(None)
                continue
            if not 0 <= ref < index:
                raise MalformedTopologyError(f"Inbound reference {ref} does not point to an earlier schedule entry")
            upstream = resolved.get(ref)
            if upstream is None or not upstream.is_resolved:
                raise MalformedTopologyError(f"Inbound reference {ref} points to an entry that is not resolved yet")
            if iface.partner is None or upstream.interface is not iface.partner:
                raise MalformedTopologyError(f"Entry {ref} does not compute the message arriving at {iface}")
            types.append(upstream.outbound_type)
        return tuple(types)

    def _resolve_leaf(self, entry: ScheduleEntry) -> ScheduleEntry:
        node = entry.node
        if node.id in self.leaf_types:
            outbound = self.leaf_types[node.id]
        elif isinstance(node, Terminal):
            raise MalformedTopologyError(f"No message type supplied for terminal {node.id}")
        else:
            outbound = node.message_type

        if entry.is_pinned and entry.pinned != outbound:
            raise InvalidPinError(
                f"Pinned type {entry.pinned} differs from the type {outbound} of the held value",
                pinned=entry.pinned,
            )
        return replace(entry, outbound_type=outbound, resolution=Resolution.LEAF)

    def _resolve_composite(self, entry: ScheduleEntry, inbound_types: InboundTypes) -> ScheduleEntry:
        node: CompositeNode = entry.node
        slot = entry.outbound_slot
        leaf_types = {
            terminal.id: t
            for terminal, t in zip(
                (tm for idx, tm in enumerate(node.terminals) if idx != slot),
                inbound_types,
            )
            if t is not None
        }
        inner = OutboundTypeResolver(self.registry, leaf_types=leaf_types).resolve(node.inner_schedules[slot])
        result_index = inner.index_of(node.terminals[slot].interfaces[0].partner)
        outbound = inner[result_index].outbound_type

        if entry.is_pinned and entry.pinned != outbound:
            raise InvalidPinError(
                f"Pinned type {entry.pinned} differs from the inner schedule result {outbound}",
                pinned=entry.pinned,
                inbound_types=inbound_types,
            )
        return replace(
            entry,
            outbound_type=outbound,
            rule_id=f"{node.kind}.{entry.interface.name}",
            resolution=Resolution.COMPOSITE,
            inner=inner,
        )

    def _infer(self, entry: ScheduleEntry, inbound_types: InboundTypes) -> ScheduleEntry:
        node = entry.node
        slot = entry.outbound_slot

        candidates = self.registry.lookup(node.kind, slot, inbound_types, Category.EXACT, node=node)
        if len(candidates) == 1:
            return self._accept(entry, candidates[0], Resolution.EXACT)
        if len(candidates) > 1:
            raise self._ambiguous(entry, candidates, inbound_types, "Please pin the outbound message type.")

        candidates = self.registry.lookup(
            node.kind, slot, inbound_types, Category.APPROXIMATE, entry.approximation, node=node
        )
        if len(candidates) == 1:
            return self._accept(entry, candidates[0], Resolution.APPROXIMATE)
        if len(candidates) > 1:
            raise self._ambiguous(
                entry,
                candidates,
                inbound_types,
                "Please pin the outbound message type and if required also an approximation method.",
            )

        raise NoMatchingRuleError(
            f"No calculation rule available for {node.kind} {node.id}.{entry.interface.name}",
            inbound_types=inbound_types,
        )

    def _validate_pin(self, entry: ScheduleEntry, inbound_types: InboundTypes) -> ScheduleEntry:
        node = entry.node
        slot = entry.outbound_slot
        pinned = entry.pinned

        exact = [
            c for c in self.registry.lookup(node.kind, slot, inbound_types, Category.EXACT, node=node)
            if c.produces(pinned, node)
        ]
        if len(exact) == 1:
            return self._accept(entry, exact[0], Resolution.EXACT, pinned)
        if len(exact) > 1:
            raise self._ambiguous(entry, exact, inbound_types, "Several exact rules produce the pinned type.")

        approximate = [
            c for c in self.registry.lookup(
                node.kind, slot, inbound_types, Category.APPROXIMATE, entry.approximation, node=node
            )
            if c.produces(pinned, node)
        ]
        if len(approximate) == 1:
            return self._accept(entry, approximate[0], Resolution.APPROXIMATE, pinned)
        if len(approximate) > 1:
            raise self._ambiguous(
                entry,
                approximate,
                inbound_types,
                "Several approximate rules produce the pinned type; please pin an approximation method.",
            )

        raise InvalidPinError(
            f"No suitable calculation rule produces pinned type {pinned} "
            f"for {node.kind} {node.id}.{entry.interface.name}",
            pinned=pinned,
            inbound_types=inbound_types,
        )

    def _accept(
        self,
        entry: ScheduleEntry,
        candidate: Candidate,
        resolution: Resolution,
        outbound: Optional[MessageType] = None,
    ) -> ScheduleEntry:
        if outbound is None:
            outbound = candidate.outbound_type(entry.node)
        return replace(
            entry,
            outbound_type=outbound,
            rule_id=candidate.rule.id,
            approximation=candidate.rule.approximation,
            resolution=resolution,
        )

    def _ambiguous(
        self,
        entry: ScheduleEntry,
        candidates: Sequence[Candidate],
        inbound_types: InboundTypes,
        hint: str,
    ) -> AmbiguousRuleError:
        described = [c.describe(entry.node) for c in candidates]
        listing = ", ".join(f"{c.rule.id} -> {d}" for c, d in zip(candidates, described))
        return AmbiguousRuleError(
            f"There are multiple outbound type possibilities for {entry.node.kind} "
            f"{entry.node.id}.{entry.interface.name}: {listing}. {hint}",
            outbound_types=described,
            inbound_types=inbound_types,
        )


def resolve_schedule(
    schedule: Schedule,
    registry: RuleRegistry,
    *,
    leaf_types: Optional[Mapping[str, MessageType]] = None,
) -> Schedule:
    """Resolve a whole schedule against `registry`."""
    return OutboundTypeResolver(registry, leaf_types=leaf_types).resolve(schedule)
