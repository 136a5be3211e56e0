"""
msgpass/distributions/product.py

Distribution product, used to combine the two directional messages on an
edge into a marginal and by the equality node rules.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Tuple

import numpy as np
import scipy.linalg as la

from msgpass.distributions.dists import (
    Distribution,
    Gamma,
    Gaussian,
    InverseGamma,
    MvGaussian,
    PointMass,
    StudentsT,
    as_message,
)

ProductRule = Callable[[Any, Any], Distribution]

_PRODUCTS: Dict[Tuple[type, type], ProductRule] = {}


def product_rule(left: type, right: type):
    """Register the product of a `left` and a `right` distribution."""
    def decorator(fn: ProductRule) -> ProductRule:
        _PRODUCTS[(left, right)] = fn
        return fn
    return decorator


def multiply(a: Any, b: Any) -> Distribution:
    """
    Normalized product of two distributions.

    Args:
        a: Distribution or raw value (raw values are point masses)
        b: Distribution or raw value

    Returns:
        The product distribution

    Raises:
        TypeError: If no product is defined for the pair of families
        ValueError: If two point masses disagree
    """
    a = as_message(a)
    b = as_message(b)

    if isinstance(a, PointMass) or isinstance(b, PointMass):
        return _point_mass_product(a, b)

    rule = _PRODUCTS.get((type(a), type(b)))
    if rule is None:
        raise TypeError(f"No product defined for {type(a).__name__} and {type(b).__name__}")
    return rule(a, b)


def _point_mass_product(a: Distribution, b: Distribution) -> PointMass:
    if isinstance(a, PointMass) and isinstance(b, PointMass):
        if np.shape(a.value) != np.shape(b.value) or not np.allclose(a.value, b.value):
            raise ValueError(f"Product of point masses at {a.value} and {b.value} is empty")
        return a
    return a if isinstance(a, PointMass) else b


@product_rule(Gaussian, Gaussian)
def _gaussian_gaussian(a: Gaussian, b: Gaussian) -> Gaussian:
    return Gaussian.from_precision(xi=a.xi + b.xi, W=a.W + b.W)


@product_rule(MvGaussian, MvGaussian)
def _mv_gaussian_mv_gaussian(a: MvGaussian, b: MvGaussian) -> MvGaussian:
    if a.dims != b.dims:
        raise ValueError(f"Cannot multiply MvGaussians of dimension {a.dims} and {b.dims}")
    W_a = la.inv(a.V)
    W_b = la.inv(b.V)
    return MvGaussian.from_precision(xi=W_a @ a.m + W_b @ b.m, W=W_a + W_b)


@product_rule(Gamma, Gamma)
def _gamma_gamma(a: Gamma, b: Gamma) -> Gamma:
    return Gamma(a=a.a + b.a - 1.0, b=a.b + b.b)


@product_rule(InverseGamma, InverseGamma)
def _inverse_gamma_inverse_gamma(a: InverseGamma, b: InverseGamma) -> InverseGamma:
    return InverseGamma(a=a.a + b.a + 1.0, b=a.b + b.b)


@product_rule(Gaussian, StudentsT)
def _gaussian_students_t(a: Gaussian, b: StudentsT) -> Gaussian:
    # Laplace approximation of the t factor around its mode
    W_b = b.mode_precision
    return Gaussian.from_precision(xi=a.xi + W_b * b.m, W=a.W + W_b)


@product_rule(StudentsT, Gaussian)
def _students_t_gaussian(a: StudentsT, b: Gaussian) -> Gaussian:
    return _gaussian_students_t(b, a)
