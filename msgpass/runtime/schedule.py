"""
msgpass/runtime/schedule.py

Message passing schedules.

A schedule is an ordered list of entries; entry k computes the outbound
message on one interface from inbound messages computed by earlier entries.
The order is the dependency order.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, Mapping, Optional, Sequence, Tuple, overload

import networkx as nx

from msgpass.core.errors import MalformedTopologyError
from msgpass.ir.types import MessageType
from msgpass.topology.graph import Interface
from msgpass.topology.nodes import Node


class Resolution(Enum):
    """Resolution state of a schedule entry."""
    UNRESOLVED = "unresolved"
    LEAF = "leaf"                # Constant / terminal / placeholder
    EXACT = "exact"              # Sum-product rule
    APPROXIMATE = "approximate"  # Variational / EP rule
    COMPOSITE = "composite"      # Inner schedule of a composite node


@dataclass(frozen=True)
class ScheduleEntry:
    """
    One message computation.

    Attributes:
        interface: Interface whose outbound message is computed
        inbounds: One reference per other interface of the node, in
            interface order: index of an earlier entry, or None
        outbound_type: Pinned type before resolution, inferred type after
        approximation: Approximation method tag (pinned or inferred)
        rule_id: Selected rule after resolution
        resolution: Resolution state
        inner: Resolved inner schedule for composite nodes
        pinned: Caller-specified outbound type; survives resolution
    """
    interface: Interface
    inbounds: Tuple[Optional[int], ...] = ()
    outbound_type: Optional[MessageType] = None
    approximation: Optional[str] = None
    rule_id: Optional[str] = None
    resolution: Resolution = Resolution.UNRESOLVED
    inner: Optional["Schedule"] = None
    pinned: Optional[MessageType] = None

    def __post_init__(self):
        if self.pinned is None and self.resolution is Resolution.UNRESOLVED and self.outbound_type is not None:
            object.__setattr__(self, "pinned", self.outbound_type)

    @property
    def node(self) -> Node:
        return self.interface.node

    @property
    def outbound_slot(self) -> int:
        return self.interface.index

    @property
    def is_resolved(self) -> bool:
        return self.resolution is not Resolution.UNRESOLVED

    @property
    def is_pinned(self) -> bool:
        """The caller specified the outbound type."""
        return self.pinned is not None

    def inbound_interfaces(self) -> Tuple[Interface, ...]:
        """The node's interfaces other than the outbound one, in order."""
        return tuple(iface for iface in self.node.interfaces if iface is not self.interface)

    def __str__(self) -> str:
        text = f"{self.node.kind} {self.node.id}.{self.interface.name} <- {list(self.inbounds)}"
        if self.outbound_type is not None:
            text += f" : {self.outbound_type}"
        if self.rule_id is not None:
            text += f" via {self.rule_id}"
        if self.approximation is not None:
            text += f" ({self.approximation})"
        return text


class Schedule(Sequence[ScheduleEntry]):
    """Immutable ordered sequence of schedule entries."""

    def __init__(self, entries: Iterable[ScheduleEntry]):
        self.entries: Tuple[ScheduleEntry, ...] = tuple(entries)

    @classmethod
    def from_interfaces(
        cls,
        interfaces: Iterable[Interface],
        *,
        pins: Optional[Mapping[Interface, MessageType]] = None,
        approximations: Optional[Mapping[Interface, str]] = None,
    ) -> "Schedule":
        """
        Build a schedule from interfaces in computation order.

        Each inbound reference points at the most recent earlier entry that
        computed the message on the partner interface; inbounds never
        computed earlier are None.

        Args:
            interfaces: Outbound interfaces in dependency order
            pins: Optional pinned outbound types per interface
            approximations: Optional approximation tags per interface
        """
        pins = pins or {}
        approximations = approximations or {}
        entries = []
        interface_to_idx: Dict[Interface, int] = {}
        for idx, iface in enumerate(interfaces):
            inbounds = tuple(
                interface_to_idx.get(other.partner) if other.partner is not None else None
                for other in iface.node.interfaces
                if other is not iface
            )
            entries.append(ScheduleEntry(
                interface=iface,
                inbounds=inbounds,
                outbound_type=pins.get(iface),
                pinned=pins.get(iface),
                approximation=approximations.get(iface),
            ))
            interface_to_idx[iface] = idx
        return cls(entries)

    @overload
    def __getitem__(self, idx: int) -> ScheduleEntry: ...

    @overload
    def __getitem__(self, idx: slice) -> Tuple[ScheduleEntry, ...]: ...

    def __getitem__(self, idx):
        return self.entries[idx]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[ScheduleEntry]:
        return iter(self.entries)

    @property
    def is_resolved(self) -> bool:
        return all(e.is_resolved for e in self.entries)

    def index_of(self, interface: Interface) -> Optional[int]:
        """Index of the last entry computing the outbound message on `interface`."""
        found = None
        for idx, entry in enumerate(self.entries):
            if entry.interface is interface:
                found = idx
        return found

    def dependency_graph(self) -> nx.DiGraph:
        """Directed graph with an arc j -> k whenever entry k reads the output of entry j."""
        g = nx.DiGraph()
        g.add_nodes_from(range(len(self.entries)))
        for k, entry in enumerate(self.entries):
            for j in entry.inbounds:
                if j is not None:
                    g.add_edge(j, k)
        return g

    def assert_dependency_order(self) -> None:
        """
        Check that every inbound reference points strictly backwards and
        that each entry has one reference per non-outbound interface.

        Raises:
            MalformedTopologyError: On the first violation
        """
        for k, entry in enumerate(self.entries):
            expected = len(entry.node.interfaces) - 1
            if len(entry.inbounds) != expected:
                raise MalformedTopologyError(
                    f"Entry has {len(entry.inbounds)} inbound references, {entry.node.kind} requires {expected}",
                    entry_index=k,
                    node_id=entry.node.id,
                )
        for j, k in self.dependency_graph().edges:
            if not 0 <= j < k:
                raise MalformedTopologyError(
                    f"Inbound reference {j} does not point to an earlier schedule entry",
                    entry_index=k,
                    node_id=self.entries[k].node.id,
                )

    def __repr__(self) -> str:
        lines = [f"Schedule({len(self.entries)} entries)"]
        lines.extend(f"  {idx}: {entry}" for idx, entry in enumerate(self.entries))
        return "\n".join(lines)
