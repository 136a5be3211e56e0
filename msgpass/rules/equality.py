"""
msgpass/rules/equality.py

Rules for the EqualityNode: the outbound message is the product of the
two other inbound messages.
"""

from __future__ import annotations

from msgpass.distributions.product import multiply
from msgpass.ir.types import GAMMA, GAUSSIAN, INVERSE_GAMMA, POINT_MASS, TypeParam, mv_gaussian, mv_point_mass
from msgpass.rules.library import RuleLibrary, rule_id
from msgpass.topology.nodes import EqualityNode

KIND = EqualityNode.kind

N = TypeParam("N")


def _product(node, x, y):
    return multiply(x, y)


def _signatures():
    for point, gauss in ((POINT_MASS, GAUSSIAN), (mv_point_mass(N), mv_gaussian(N))):
        yield (gauss, gauss), gauss
        yield (point, gauss), point
        yield (gauss, point), point
        yield (point, point), point
    yield (GAMMA, GAMMA), GAMMA
    yield (INVERSE_GAMMA, INVERSE_GAMMA), INVERSE_GAMMA


def install(library: RuleLibrary) -> None:
    """Register the EqualityNode rules for every outbound slot."""
    for slot, name in enumerate(EqualityNode.interface_names):
        for inbound, outbound in _signatures():
            library.add(rule_id(f"equality_{name}_sp", inbound), _product, KIND, slot, inbound, outbound)
