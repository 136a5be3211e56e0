"""
Distributions module: Message payloads and the distribution product.
"""

from msgpass.distributions.dists import (
    Distribution,
    PointMass,
    Gaussian,
    MvGaussian,
    Gamma,
    InverseGamma,
    StudentsT,
    as_message,
    message_type_of,
    gaussian_like,
)
from msgpass.distributions.product import multiply, product_rule

__all__ = [
    "Distribution",
    "PointMass",
    "Gaussian",
    "MvGaussian",
    "Gamma",
    "InverseGamma",
    "StudentsT",
    "as_message",
    "message_type_of",
    "gaussian_like",
    "multiply",
    "product_rule",
]
