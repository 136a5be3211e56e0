"""
msgpass/rules/fixed_gain.py

Rules for the FixedGainNode out = A * in, with A of shape n x m.

The forward multivariate rules only see `dims_m` on their inbound; the
outbound `dims_n` comes from the gain matrix, and vice versa backwards.
Univariate rules only apply to a 1x1 gain.
"""

from __future__ import annotations

import scipy.linalg as la

from msgpass.distributions.dists import Gaussian, MvGaussian, PointMass
from msgpass.ir.types import GAUSSIAN, POINT_MASS, TypeParam, mv_gaussian, mv_point_mass
from msgpass.rules.library import RuleLibrary, rule_id
from msgpass.topology.nodes import FixedGainNode

IN, OUT = 0, 1
KIND = FixedGainNode.kind

DIMS_N = TypeParam("dims_n")
DIMS_M = TypeParam("dims_m")

SCALAR_GAIN = (("dims_n", 1), ("dims_m", 1))


def _scalar_gain(node) -> float:
    if node.gain.shape != (1, 1):
        raise ValueError(f"{node!r} has a {node.gain.shape} gain; univariate messages need a 1x1 gain")
    return float(node.gain[0, 0])


def _forward_point_mass(node, x: PointMass) -> PointMass:
    return PointMass(_scalar_gain(node) * x.value)


def _forward_gaussian(node, x: Gaussian) -> Gaussian:
    a = _scalar_gain(node)
    return Gaussian(m=a * x.m, V=a * a * x.V)


def _backward_point_mass(node, y: PointMass) -> PointMass:
    return PointMass(y.value / _scalar_gain(node))


def _backward_gaussian(node, y: Gaussian) -> Gaussian:
    a = _scalar_gain(node)
    return Gaussian(m=y.m / a, V=y.V / (a * a))


def _forward_mv_point_mass(node, x: PointMass) -> PointMass:
    return PointMass(node.gain @ x.value)


def _forward_mv_gaussian(node, x: MvGaussian) -> MvGaussian:
    A = node.gain
    return MvGaussian(m=A @ x.m, V=A @ x.V @ A.T)


def _backward_mv_point_mass(node, y: PointMass) -> PointMass:
    return PointMass(la.pinv(node.gain) @ y.value)


def _backward_mv_gaussian(node, y: MvGaussian) -> MvGaussian:
    A_inv = la.pinv(node.gain)
    return MvGaussian(m=A_inv @ y.m, V=A_inv @ y.V @ A_inv.T)


def install(library: RuleLibrary) -> None:
    """Register the FixedGainNode rules."""
    forward = (
        (POINT_MASS, POINT_MASS, _forward_point_mass, SCALAR_GAIN),
        (GAUSSIAN, GAUSSIAN, _forward_gaussian, SCALAR_GAIN),
        (mv_point_mass(DIMS_M), mv_point_mass(DIMS_N), _forward_mv_point_mass, ()),
        (mv_gaussian(DIMS_M), mv_gaussian(DIMS_N), _forward_mv_gaussian, ()),
    )
    backward = (
        (POINT_MASS, POINT_MASS, _backward_point_mass, SCALAR_GAIN),
        (GAUSSIAN, GAUSSIAN, _backward_gaussian, SCALAR_GAIN),
        (mv_point_mass(DIMS_N), mv_point_mass(DIMS_M), _backward_mv_point_mass, ()),
        (mv_gaussian(DIMS_N), mv_gaussian(DIMS_M), _backward_mv_gaussian, ()),
    )
    for inbound_type, outbound_type, impl, requires in forward:
        library.add(
            rule_id("fixed_gain_out_sp", (inbound_type,)), impl, KIND, OUT, (inbound_type,), outbound_type,
            requires=requires,
        )
    for inbound_type, outbound_type, impl, requires in backward:
        library.add(
            rule_id("fixed_gain_in_sp", (inbound_type,)), impl, KIND, IN, (inbound_type,), outbound_type,
            requires=requires,
        )
