"""
msgpass/topology/graph.py

Factor graph topology.

A factor graph consists of:
- Nodes (factors), each with a fixed ordered list of Interfaces
- Edges, each joining two Interfaces of distinct nodes
- Variables, each associated with one or more Edges

Composite nodes own an inner graph, so graphs form an ownership tree:
graph -> node -> (composite) inner graph -> node -> ...
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional, Tuple, Union

import networkx as nx

from msgpass.core.errors import MalformedTopologyError
from msgpass.core.registry import IDRegistry

if TYPE_CHECKING:
    from msgpass.topology.nodes import Node


class Interface:
    """
    A slot on a node.

    Attributes:
        node: Owning node
        index: Position in `node.interfaces`
        name: Slot name (e.g. "out")
        edge: Edge this interface joins, if connected
    """

    def __init__(self, node: "Node", index: int, name: str):
        self.node = node
        self.index = index
        self.name = name
        self.edge: Optional[Edge] = None

    @property
    def partner(self) -> Optional["Interface"]:
        """The interface on the other end of the edge."""
        if self.edge is None:
            return None
        return self.edge.b if self.edge.a is self else self.edge.a

    @property
    def variable(self) -> Optional["Variable"]:
        if self.edge is None:
            return None
        return self.edge.variable

    def __repr__(self) -> str:
        return f"Interface({self.node.id}.{self.name})"


class Variable:
    """
    A named random quantity.

    Attributes:
        id: Variable id, used as the key of its marginal
        edges: Edges carrying this variable; the first one is used for marginals
    """

    def __init__(self, id: str):
        self.id = id
        self.edges: List[Edge] = []

    def __repr__(self) -> str:
        return f"Variable({self.id})"


class Edge:
    """An edge joining interfaces `a` and `b` of two distinct nodes."""

    def __init__(self, a: Interface, b: Interface, variable: Variable, id: str):
        if a.node is b.node:
            raise MalformedTopologyError(f"Edge {id} would be a self-loop on node {a.node.id}", node_id=a.node.id)
        for iface in (a, b):
            if iface.edge is not None:
                raise MalformedTopologyError(f"{iface} is already connected", node_id=iface.node.id)
        self.id = id
        self.a = a
        self.b = b
        self.variable = variable
        a.edge = self
        b.edge = self
        variable.edges.append(self)

    @property
    def interfaces(self) -> Tuple[Interface, Interface]:
        return (self.a, self.b)

    def __repr__(self) -> str:
        return f"Edge({self.id}: {self.a} -- {self.b}, {self.variable.id})"


class FactorGraph:
    """
    Nodes, edges and variables of one (possibly inner) graph.

    Maintains:
    - Nodes by id, in creation order
    - Edges in creation order
    - Variables by id
    - Placeholder bindings: Constant node id -> (buffer id, optional index)

    Node, variable and edge ids live in separate namespaces.
    """

    def __init__(self, name: Optional[str] = None):
        self.name = name
        self.node_ids = IDRegistry()
        self.variable_ids = IDRegistry()
        self.edge_ids = IDRegistry()
        self._nodes: Dict[str, "Node"] = {}
        self._edges: List[Edge] = []
        self.variables: Dict[str, Variable] = {}
        self.placeholders: Dict[str, Tuple[str, Optional[int]]] = {}

    def add_node(self, node: "Node", id: Optional[str] = None) -> str:
        """Register `node` and return its id."""
        node_id = self.node_ids.assign(id, node.kind)
        self._nodes[node_id] = node
        return node_id

    def add_variable(self, id: Optional[str] = None) -> Variable:
        """Create a new variable."""
        var_id = self.variable_ids.assign(id, "variable")
        variable = Variable(var_id)
        self.variables[var_id] = variable
        return variable

    def connect(
        self,
        a: Interface,
        b: Interface,
        variable: Union[Variable, str, None] = None,
    ) -> Edge:
        """
        Join two interfaces with an edge.

        Args:
            a: First interface
            b: Second interface
            variable: Variable carried by the edge; a string names a variable
                that is created if needed, None creates an anonymous one

        Returns:
            The new edge
        """
        for iface in (a, b):
            if iface.node.graph is not self:
                raise MalformedTopologyError(f"{iface} does not belong to this FactorGraph", node_id=iface.node.id)
        if variable is None:
            variable = self.add_variable()
        elif isinstance(variable, str):
            variable = self.variables.get(variable) or self.add_variable(variable)
        edge = Edge(a, b, variable, id=self.edge_ids.generate("edge"))
        self._edges.append(edge)
        return edge

    def placeholder(self, node: "Node", buffer: str, index: Optional[int] = None) -> "Node":
        """
        Bind a Constant node to an external data buffer.

        The node's held value only determines the message type at compile
        time; at run time the value is read from `data[buffer]` (or
        `data[buffer][index]`).
        """
        if not getattr(node, "holds_value", False) or node.graph is not self:
            raise ValueError(f"Only Constant nodes of this graph can be placeholders, got {node!r}")
        self.placeholders[node.id] = (buffer, index)
        return node

    def is_placeholder(self, node: "Node") -> bool:
        return node.graph is self and node.id in self.placeholders

    @property
    def edges(self) -> Tuple[Edge, ...]:
        return tuple(self._edges)

    def ownership_tree(self) -> nx.DiGraph:
        """
        Ownership tree rooted at this graph.

        Vertices are graphs and nodes; a graph owns its nodes and a
        composite node owns its inner graph.
        """
        tree = nx.DiGraph()
        tree.add_node(self)
        stack = [self]
        while stack:
            graph = stack.pop()
            for node in graph._nodes.values():
                tree.add_edge(graph, node)
                inner = getattr(node, "inner_graph", None)
                if inner is not None:
                    tree.add_edge(node, inner)
                    stack.append(inner)
        return tree

    def nodes(self, open_composites: bool = False) -> List["Node"]:
        """
        Nodes of this graph.

        Args:
            open_composites: Also return all nodes nested inside composite nodes
        """
        if not open_composites:
            return list(self._nodes.values())
        from msgpass.topology.nodes import Node
        tree = self.ownership_tree()
        return [v for v in nx.dfs_preorder_nodes(tree, self) if isinstance(v, Node)]

    def node(self, id: str) -> "Node":
        """Return the node with the given id, searching composite nodes as well."""
        if id in self._nodes:
            return self._nodes[id]
        for n in self.nodes(open_composites=True):
            if n.id == id:
                return n
        raise KeyError(f"No node with id {id!r} in this FactorGraph")

    def __repr__(self) -> str:
        top = len(self._nodes)
        total = len(self.nodes(open_composites=True))
        return f"FactorGraph(nodes={top} ({total} including child nodes), edges={len(self._edges)})"


_current_graph: Optional[FactorGraph] = None


def current_graph() -> FactorGraph:
    """The process-wide current graph, created on first use."""
    global _current_graph
    if _current_graph is None:
        _current_graph = FactorGraph()
    return _current_graph


def set_current_graph(graph: FactorGraph) -> Optional[FactorGraph]:
    """Replace the current graph; returns the previous one."""
    global _current_graph
    previous = _current_graph
    _current_graph = graph
    return previous


@contextmanager
def graph_scope(graph: Optional[FactorGraph] = None) -> Iterator[FactorGraph]:
    """Make `graph` (or a fresh graph) current for the duration of the block."""
    if graph is None:
        graph = FactorGraph()
    previous = set_current_graph(graph)
    try:
        yield graph
    finally:
        set_current_graph(previous)
