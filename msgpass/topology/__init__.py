"""
Topology module: Factor graph primitives and node kinds.
"""

from msgpass.topology.graph import (
    Interface,
    Edge,
    Variable,
    FactorGraph,
    current_graph,
    set_current_graph,
    graph_scope,
)
from msgpass.topology.nodes import (
    Node,
    Constant,
    Terminal,
    GaussianNode,
    AdditionNode,
    EqualityNode,
    FixedGainNode,
    CompositeNode,
    ensure_matrix,
)

__all__ = [
    "Interface",
    "Edge",
    "Variable",
    "FactorGraph",
    "current_graph",
    "set_current_graph",
    "graph_scope",
    "Node",
    "Constant",
    "Terminal",
    "GaussianNode",
    "AdditionNode",
    "EqualityNode",
    "FixedGainNode",
    "CompositeNode",
    "ensure_matrix",
]
