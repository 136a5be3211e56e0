"""
msgpass/rules/gaussian.py

Rules for the GaussianNode N(out | mean, variance).

Sum-product rules cover a known (point-mass) variance, scalar and
multivariate. Mean-field rules read the prior marginals of the other
edges instead of their messages.
"""

from __future__ import annotations

from typing import Any, Mapping

from msgpass.distributions.dists import Distribution, Gaussian, InverseGamma, as_message, gaussian_like
from msgpass.ir.types import (
    ANY,
    GAUSSIAN,
    INVERSE_GAMMA,
    POINT_MASS,
    Category,
    TypeParam,
    matrix_point_mass,
    mv_gaussian,
    mv_point_mass,
)
from msgpass.rules.library import RuleLibrary, rule_id
from msgpass.topology.nodes import GaussianNode

MEAN, VARIANCE, OUT = range(3)
KIND = GaussianNode.kind
MEAN_FIELD = "MeanField"

N = TypeParam("N")


def _sum_product_out(node, mean: Distribution, variance: Distribution) -> Distribution:
    return gaussian_like(mean.mean, mean.variance + variance.value)


def _sum_product_mean(node, variance: Distribution, out: Distribution) -> Distribution:
    return gaussian_like(out.mean, out.variance + variance.value)


def _marginal(node, slot: int, marginals: Mapping[str, Any]) -> Distribution:
    variable = node.interfaces[slot].variable
    if variable is None:
        raise KeyError(f"{node!r}.{node.interfaces[slot].name} is not connected to a variable")
    if variable.id not in marginals:
        raise KeyError(f"Mean-field rule on {node!r} needs the marginal of {variable.id!r}")
    return as_message(marginals[variable.id])


def _mean_field_out(node, mean, variance, *, marginals) -> Gaussian:
    q_mean = _marginal(node, MEAN, marginals)
    q_variance = _marginal(node, VARIANCE, marginals)
    return Gaussian(m=q_mean.mean, V=1.0 / q_variance.inverse_mean)


def _mean_field_mean(node, variance, out, *, marginals) -> Gaussian:
    q_variance = _marginal(node, VARIANCE, marginals)
    q_out = _marginal(node, OUT, marginals)
    return Gaussian(m=q_out.mean, V=1.0 / q_variance.inverse_mean)


def _mean_field_variance(node, mean, out, *, marginals) -> InverseGamma:
    q_mean = _marginal(node, MEAN, marginals)
    q_out = _marginal(node, OUT, marginals)
    spread = q_out.variance + q_mean.variance + (q_out.mean - q_mean.mean) ** 2
    return InverseGamma(a=-0.5, b=0.5 * spread)


def install(library: RuleLibrary) -> None:
    """Register the GaussianNode rules."""
    for mean_type in (POINT_MASS, GAUSSIAN):
        inbound = (mean_type, POINT_MASS)
        library.add(rule_id("gaussian_out_sp", inbound), _sum_product_out, KIND, OUT, inbound, GAUSSIAN)
    for out_type in (POINT_MASS, GAUSSIAN):
        inbound = (POINT_MASS, out_type)
        library.add(rule_id("gaussian_mean_sp", inbound), _sum_product_mean, KIND, MEAN, inbound, GAUSSIAN)

    # Multivariate: the covariance must be N x N for an N-dimensional mean
    for mean_type in (mv_point_mass(N), mv_gaussian(N)):
        inbound = (mean_type, matrix_point_mass(N, N))
        library.add(rule_id("gaussian_out_sp", inbound), _sum_product_out, KIND, OUT, inbound, mv_gaussian(N))
    for out_type in (mv_point_mass(N), mv_gaussian(N)):
        inbound = (matrix_point_mass(N, N), out_type)
        library.add(rule_id("gaussian_mean_sp", inbound), _sum_product_mean, KIND, MEAN, inbound, mv_gaussian(N))

    approximate = dict(category=Category.APPROXIMATE, approximation=MEAN_FIELD)
    library.add("gaussian_out_mf", _mean_field_out, KIND, OUT, (ANY, ANY), GAUSSIAN, **approximate)
    library.add("gaussian_mean_mf", _mean_field_mean, KIND, MEAN, (ANY, ANY), GAUSSIAN, **approximate)
    library.add("gaussian_variance_mf", _mean_field_variance, KIND, VARIANCE, (ANY, ANY), INVERSE_GAMMA, **approximate)
