"""
msgpass/algorithm.py

High-level compiler interface for message passing algorithms.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from msgpass.compiler.emit import emit_message_passing_program
from msgpass.compiler.registry import RuleRegistry
from msgpass.compiler.render import render_source
from msgpass.compiler.resolve import OutboundTypeResolver
from msgpass.distributions.dists import Distribution
from msgpass.distributions.product import multiply
from msgpass.ir.ops import Program
from msgpass.ir.types import MessageType
from msgpass.rules import default_library
from msgpass.runtime.schedule import Schedule
from msgpass.topology.graph import Variable
from msgpass.vm.vm import RuleImplementation, VirtualMachine


@dataclass(frozen=True)
class MessagePassingAlgorithm:
    """
    Result of compiling a schedule.

    Calling the algorithm runs one pass of the schedule:
    `algorithm(data, marginals) -> marginals`. The prior marginals are
    copied, never modified.
    """
    schedule: Schedule
    program: Program
    targets: Tuple[Variable, ...]
    implementations: Mapping[str, RuleImplementation]
    product: Callable[[Any, Any], Distribution]

    def __call__(
        self,
        data: Optional[Mapping[str, Any]] = None,
        marginals: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        vm = VirtualMachine(self.implementations, product=self.product)
        return vm.run(self.program, data or {}, marginals)

    @property
    def source(self) -> str:
        """The procedure rendered as Python source."""
        return render_source(self.program)


def compile_algorithm(
    schedule: Schedule,
    targets: Sequence[Variable] = (),
    *,
    registry: Optional[RuleRegistry] = None,
    implementations: Optional[Mapping[str, RuleImplementation]] = None,
    product: Optional[Callable[[Any, Any], Distribution]] = None,
    leaf_types: Optional[Mapping[str, MessageType]] = None,
) -> MessagePassingAlgorithm:
    """
    Resolve a schedule and compile it into a runnable algorithm.

    Args:
        schedule: Schedule in dependency order; entries may carry pins
        targets: Variables whose marginals are computed after the pass
        registry: Rule catalog (default: the bundled rule library)
        implementations: Rule id -> implementation (default: the bundled
            rule library; required when a custom registry is given)
        product: Distribution product for marginals (default: multiply)
        leaf_types: Message types of terminals and stand-in leaf values

    Returns:
        MessagePassingAlgorithm

    Raises:
        CompilationError: If resolution or emission fails
    """
    if registry is None or implementations is None:
        library = default_library()
        if registry is None:
            registry = library.registry
        if implementations is None:
            implementations = library.implementations
    if product is None:
        product = multiply

    resolved = OutboundTypeResolver(registry, leaf_types=leaf_types).resolve(schedule)
    program = emit_message_passing_program(resolved, targets)

    return MessagePassingAlgorithm(
        schedule=resolved,
        program=program,
        targets=tuple(targets),
        implementations=implementations,
        product=product,
    )
