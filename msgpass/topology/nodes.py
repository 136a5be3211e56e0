"""
msgpass/topology/nodes.py

Factor node kinds.

Every node has a `kind` (the key rules are registered under) and a fixed
ordered list of interfaces. Leaf nodes (Constant, Terminal) produce their
outbound message without a rule.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence, Tuple, Union

import numpy as np

from msgpass.core.errors import MalformedTopologyError
from msgpass.distributions.dists import message_type_of
from msgpass.ir.types import MessageType
from msgpass.topology.graph import FactorGraph, Interface, current_graph

if TYPE_CHECKING:
    from msgpass.runtime.schedule import Schedule


class Node:
    """
    Base factor node.

    Attributes:
        id: Unique id within the owning graph
        graph: Owning graph
        interfaces: Ordered interfaces
        i: Interfaces by name
    """
    kind: str = "Node"
    interface_names: Tuple[str, ...] = ()
    is_leaf: bool = False
    holds_value: bool = False

    def __init__(self, *, id: Optional[str] = None, graph: Optional[FactorGraph] = None):
        self.graph = graph if graph is not None else current_graph()
        self.interfaces = [Interface(self, idx, name) for idx, name in enumerate(self.interface_names)]
        self.i: Dict[str, Interface] = {iface.name: iface for iface in self.interfaces}
        self.id = self.graph.add_node(self, id)

    def interface(self, key: Union[int, str]) -> Interface:
        """Interface by index or name."""
        if isinstance(key, int):
            return self.interfaces[key]
        if key not in self.i:
            raise KeyError(f"{self.kind} {self.id} has no interface {key!r}")
        return self.i[key]

    def static_parameter(self, name: str) -> Optional[int]:
        """Value of an outbound type parameter taken from node-local data, if any."""
        return None

    def __repr__(self) -> str:
        return f"{self.kind}({self.id})"


class Constant(Node):
    """Leaf node holding a fixed value; placeholders feed it from data instead."""
    kind = "Constant"
    interface_names = ("out",)
    is_leaf = True
    holds_value = True

    def __init__(self, value: Any, *, id: Optional[str] = None, graph: Optional[FactorGraph] = None):
        self.value = value
        super().__init__(id=id, graph=graph)

    @property
    def message_type(self) -> MessageType:
        return message_type_of(self.value)


class Terminal(Node):
    """Inner end-point of an exposed composite-node interface."""
    kind = "Terminal"
    interface_names = ("out",)
    is_leaf = True


class GaussianNode(Node):
    """Gaussian factor N(out | mean, variance)."""
    kind = "GaussianNode"
    interface_names = ("mean", "variance", "out")


class AdditionNode(Node):
    """Deterministic out = in1 + in2."""
    kind = "AdditionNode"
    interface_names = ("in1", "in2", "out")


class EqualityNode(Node):
    """Equality constraint a = b = c."""
    kind = "EqualityNode"
    interface_names = ("a", "b", "c")


def ensure_matrix(gain: Any) -> np.ndarray:
    """Coerce a scalar, length-1 vector or matrix to a 2-D float array."""
    arr = np.asarray(gain, dtype=np.float64)
    if arr.ndim == 2:
        return arr
    if arr.size == 1:
        return arr.reshape(1, 1)
    raise ValueError(f"Gain must be a scalar or a matrix, got shape {arr.shape}")


class FixedGainNode(Node):
    """
    Deterministic out = A * in with a fixed gain matrix A of shape n x m.

    The outbound dimensions `dims_n` and `dims_m` are read off A when the
    inbound message does not carry them.
    """
    kind = "FixedGainNode"
    interface_names = ("in", "out")

    def __init__(self, gain: Any, *, id: Optional[str] = None, graph: Optional[FactorGraph] = None):
        self.gain = ensure_matrix(gain)
        super().__init__(id=id, graph=graph)

    def static_parameter(self, name: str) -> Optional[int]:
        if name == "dims_n":
            return int(self.gain.shape[0])
        if name == "dims_m":
            return int(self.gain.shape[1])
        return None


class CompositeNode(Node):
    """
    Node that owns an inner graph and exposes one interface per terminal.

    Message computation for an exposed interface is defined by an inner
    schedule whose result is the message arriving at that interface's
    terminal from inside.
    """
    kind = "CompositeNode"

    def __init__(
        self,
        inner_graph: FactorGraph,
        terminals: Sequence[Terminal],
        *,
        kind: Optional[str] = None,
        id: Optional[str] = None,
        graph: Optional[FactorGraph] = None,
    ):
        for terminal in terminals:
            if not isinstance(terminal, Terminal) or terminal.graph is not inner_graph:
                raise MalformedTopologyError(f"{terminal!r} is not a terminal of the inner graph")
        self.inner_graph = inner_graph
        self.terminals: Tuple[Terminal, ...] = tuple(terminals)
        self.interface_names = tuple(t.id for t in self.terminals)
        if kind is not None:
            self.kind = kind
        self.inner_schedules: Dict[int, "Schedule"] = {}
        super().__init__(id=id, graph=graph)
        if self.graph is inner_graph:
            raise MalformedTopologyError(f"Composite node {self.id} cannot own the graph it lives in", node_id=self.id)

    def terminal(self, slot: Union[int, str]) -> Terminal:
        """Terminal behind the exposed interface `slot`."""
        return self.terminals[self.interface(slot).index]

    def define_schedule(self, slot: Union[int, str], schedule: "Schedule") -> None:
        """Register the inner schedule that computes the outbound message on `slot`."""
        index = self.interface(slot).index
        target = self.terminals[index].interfaces[0].partner
        if target is None or schedule.index_of(target) is None:
            raise MalformedTopologyError(
                f"Inner schedule of {self.id} never computes the message toward terminal {self.terminals[index].id}",
                node_id=self.id,
            )
        self.inner_schedules[index] = schedule
