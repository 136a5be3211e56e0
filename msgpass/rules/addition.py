"""
msgpass/rules/addition.py

Rules for the AdditionNode out = in1 + in2.

The outbound is a point mass only when both inbounds are point masses.
"""

from __future__ import annotations

from typing import Iterator, Tuple

from msgpass.distributions.dists import Distribution, PointMass, gaussian_like
from msgpass.ir.types import GAUSSIAN, POINT_MASS, MessageType, TypeParam, mv_gaussian, mv_point_mass
from msgpass.rules.library import RuleLibrary, rule_id
from msgpass.topology.nodes import AdditionNode

IN1, IN2, OUT = range(3)
KIND = AdditionNode.kind

N = TypeParam("N")


def _result(m, V, point: bool) -> Distribution:
    return PointMass(m) if point else gaussian_like(m, V)


def _forward(node, in1: Distribution, in2: Distribution) -> Distribution:
    point = isinstance(in1, PointMass) and isinstance(in2, PointMass)
    return _result(in1.mean + in2.mean, in1.variance + in2.variance, point)


def _backward(node, other: Distribution, out: Distribution) -> Distribution:
    point = isinstance(other, PointMass) and isinstance(out, PointMass)
    return _result(out.mean - other.mean, out.variance + other.variance, point)


def _combinations(point: MessageType, gauss: MessageType) -> Iterator[Tuple[Tuple[MessageType, MessageType], MessageType]]:
    for a in (point, gauss):
        for b in (point, gauss):
            yield (a, b), (point if a == point and b == point else gauss)


def install(library: RuleLibrary) -> None:
    """Register the AdditionNode rules."""
    for point, gauss in ((POINT_MASS, GAUSSIAN), (mv_point_mass(N), mv_gaussian(N))):
        for inbound, outbound in _combinations(point, gauss):
            library.add(rule_id("addition_out_sp", inbound), _forward, KIND, OUT, inbound, outbound)
            library.add(rule_id("addition_in1_sp", inbound), _backward, KIND, IN1, inbound, outbound)
            library.add(rule_id("addition_in2_sp", inbound), _backward, KIND, IN2, inbound, outbound)
