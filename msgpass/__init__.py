"""
msgpass: Message passing algorithm compiler for factor graphs

Turns a factor graph plus an ordered message schedule into an executable
message passing procedure. Every schedule step is matched against a
catalog of update rules, the structural type of its outbound message is
inferred, and a program is emitted that computes the messages and the
requested marginals from run-time data.

Key components:
- core: Compilation errors and id generation
- ir: Message type descriptors and the instruction set
- distributions: Message payloads and the distribution product
- topology: Factor graph, nodes, interfaces, edges and variables
- runtime: Schedules and external data buffers
- compiler: Rule registry, unification, type resolution and emission
- vm: Virtual machine executing compiled programs
- rules: Bundled update rules
"""

__version__ = "1.0.0"

from msgpass.core.errors import (
    CompilationError,
    AmbiguousRuleError,
    NoMatchingRuleError,
    UnresolvedParameterError,
    InvalidPinError,
    IncompleteScheduleError,
    MalformedTopologyError,
)
from msgpass.ir.types import (
    Category,
    TypeParam,
    MessageType,
    ANY,
    ABSENT,
    POINT_MASS,
    GAUSSIAN,
    GAMMA,
    INVERSE_GAMMA,
    STUDENTS_T,
    mv_point_mass,
    matrix_point_mass,
    mv_gaussian,
)
from msgpass.distributions import PointMass, Gaussian, MvGaussian, Gamma, InverseGamma, StudentsT, multiply
from msgpass.topology import (
    FactorGraph,
    Variable,
    Constant,
    Terminal,
    GaussianNode,
    AdditionNode,
    EqualityNode,
    FixedGainNode,
    CompositeNode,
    current_graph,
    set_current_graph,
    graph_scope,
)
from msgpass.runtime import Schedule, ScheduleEntry, Resolution
from msgpass.compiler import RuleRegistry, OutboundTypeResolver, resolve_schedule, emit_message_passing_program
from msgpass.rules import RuleLibrary, default_library
from msgpass.algorithm import MessagePassingAlgorithm, compile_algorithm

__all__ = [
    # Errors
    "CompilationError",
    "AmbiguousRuleError",
    "NoMatchingRuleError",
    "UnresolvedParameterError",
    "InvalidPinError",
    "IncompleteScheduleError",
    "MalformedTopologyError",
    # Types
    "Category",
    "TypeParam",
    "MessageType",
    "ANY",
    "ABSENT",
    "POINT_MASS",
    "GAUSSIAN",
    "GAMMA",
    "INVERSE_GAMMA",
    "STUDENTS_T",
    "mv_point_mass",
    "matrix_point_mass",
    "mv_gaussian",
    # Distributions
    "PointMass",
    "Gaussian",
    "MvGaussian",
    "Gamma",
    "InverseGamma",
    "StudentsT",
    "multiply",
    # Topology
    "FactorGraph",
    "Variable",
    "Constant",
    "Terminal",
    "GaussianNode",
    "AdditionNode",
    "EqualityNode",
    "FixedGainNode",
    "CompositeNode",
    "current_graph",
    "set_current_graph",
    "graph_scope",
    # Schedules
    "Schedule",
    "ScheduleEntry",
    "Resolution",
    # Compiler
    "RuleRegistry",
    "OutboundTypeResolver",
    "resolve_schedule",
    "emit_message_passing_program",
    "RuleLibrary",
    "default_library",
    "MessagePassingAlgorithm",
    "compile_algorithm",
]
