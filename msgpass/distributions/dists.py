"""
msgpass/distributions/dists.py

Message payloads.

Each distribution is an immutable value that knows its structural
MessageType, which is what rule resolution works with.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Tuple

import numpy as np
import scipy.linalg as la

from msgpass.ir.types import (
    GAMMA,
    GAUSSIAN,
    INVERSE_GAMMA,
    STUDENTS_T,
    POINT_MASS,
    MessageType,
    matrix_point_mass,
    mv_gaussian,
    mv_point_mass,
)


class Distribution:
    """Base class: field-wise equality over scalars and numpy arrays."""

    __slots__ = ()

    def parameters(self) -> Tuple[Any, ...]:
        """Field values in declaration order."""
        return tuple(getattr(self, f.name) for f in fields(self))

    @property
    def message_type(self) -> MessageType:
        raise NotImplementedError

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return all(np.array_equal(a, b) for a, b in zip(self.parameters(), other.parameters()))

    __hash__ = None

    def is_close(self, other: "Distribution", rtol: float = 1e-9, atol: float = 1e-12) -> bool:
        """Approximate field-wise equality."""
        if type(self) is not type(other):
            return False
        return all(
            np.shape(a) == np.shape(b) and np.allclose(a, b, rtol=rtol, atol=atol)
            for a, b in zip(self.parameters(), other.parameters())
        )


def _as_float_or_array(value: Any) -> Any:
    if np.ndim(value) == 0:
        return float(value)
    return np.asarray(value, dtype=np.float64)


@dataclass(frozen=True, eq=False)
class PointMass(Distribution):
    """Dirac measure on a scalar, vector or matrix value."""
    value: Any

    def __post_init__(self):
        object.__setattr__(self, "value", _as_float_or_array(self.value))

    @property
    def message_type(self) -> MessageType:
        ndim = np.ndim(self.value)
        if ndim == 0:
            return POINT_MASS
        if ndim == 1:
            return mv_point_mass(len(self.value))
        if ndim == 2:
            rows, cols = self.value.shape
            return matrix_point_mass(rows, cols)
        raise ValueError(f"PointMass value with {ndim} dimensions has no message type")

    @property
    def mean(self) -> Any:
        return self.value

    @property
    def variance(self) -> Any:
        ndim = np.ndim(self.value)
        if ndim == 0:
            return 0.0
        if ndim == 1:
            n = len(self.value)
            return np.zeros((n, n))
        raise ValueError("variance of a matrix-valued PointMass is undefined")

    @property
    def inverse_mean(self) -> float:
        """E[1/x] for a scalar point mass."""
        return 1.0 / self.value


@dataclass(frozen=True, eq=False)
class Gaussian(Distribution):
    """Univariate Gaussian in (mean, variance) parametrization."""
    m: float
    V: float

    def __post_init__(self):
        object.__setattr__(self, "m", float(self.m))
        object.__setattr__(self, "V", float(self.V))

    @classmethod
    def from_precision(cls, xi: float, W: float) -> "Gaussian":
        """Build from weighted mean xi = W*m and precision W."""
        return cls(m=xi / W, V=1.0 / W)

    @property
    def message_type(self) -> MessageType:
        return GAUSSIAN

    @property
    def mean(self) -> float:
        return self.m

    @property
    def variance(self) -> float:
        return self.V

    @property
    def W(self) -> float:
        return 1.0 / self.V

    @property
    def xi(self) -> float:
        return self.m / self.V


@dataclass(frozen=True, eq=False)
class MvGaussian(Distribution):
    """Multivariate Gaussian in (mean vector, covariance matrix) parametrization."""
    m: np.ndarray
    V: np.ndarray

    def __post_init__(self):
        m = np.asarray(self.m, dtype=np.float64).reshape(-1)
        V = np.asarray(self.V, dtype=np.float64)
        if V.shape != (len(m), len(m)):
            raise ValueError(f"MvGaussian: covariance shape {V.shape} does not match mean length {len(m)}")
        object.__setattr__(self, "m", m)
        object.__setattr__(self, "V", V)

    @classmethod
    def from_precision(cls, xi: np.ndarray, W: np.ndarray) -> "MvGaussian":
        V = la.inv(np.asarray(W, dtype=np.float64))
        return cls(m=V @ np.asarray(xi, dtype=np.float64), V=V)

    @property
    def message_type(self) -> MessageType:
        return mv_gaussian(len(self.m))

    @property
    def dims(self) -> int:
        return len(self.m)

    @property
    def mean(self) -> np.ndarray:
        return self.m

    @property
    def variance(self) -> np.ndarray:
        return self.V

    @property
    def W(self) -> np.ndarray:
        return la.inv(self.V)


@dataclass(frozen=True, eq=False)
class Gamma(Distribution):
    """Gamma distribution with shape a and rate b."""
    a: float
    b: float

    def __post_init__(self):
        object.__setattr__(self, "a", float(self.a))
        object.__setattr__(self, "b", float(self.b))

    @property
    def message_type(self) -> MessageType:
        return GAMMA

    @property
    def mean(self) -> float:
        return self.a / self.b


@dataclass(frozen=True, eq=False)
class InverseGamma(Distribution):
    """Inverse-gamma distribution with shape a and scale b."""
    a: float
    b: float

    def __post_init__(self):
        object.__setattr__(self, "a", float(self.a))
        object.__setattr__(self, "b", float(self.b))

    @property
    def message_type(self) -> MessageType:
        return INVERSE_GAMMA

    @property
    def mean(self) -> float:
        return self.b / (self.a - 1.0)

    @property
    def inverse_mean(self) -> float:
        """E[1/x]."""
        return self.a / self.b


@dataclass(frozen=True, eq=False)
class StudentsT(Distribution):
    """Univariate Student's t with location m, precision W and nu degrees of freedom."""
    m: float
    W: float
    nu: float

    def __post_init__(self):
        object.__setattr__(self, "m", float(self.m))
        object.__setattr__(self, "W", float(self.W))
        object.__setattr__(self, "nu", float(self.nu))

    @property
    def message_type(self) -> MessageType:
        return STUDENTS_T

    @property
    def mean(self) -> float:
        return self.m

    @property
    def mode_precision(self) -> float:
        """Negative curvature of the log-density at its mode, W * (nu + 1) / nu."""
        return self.W * (self.nu + 1.0) / self.nu


def as_message(value: Any) -> Distribution:
    """Return `value` if it is a distribution, otherwise wrap it in a PointMass."""
    if isinstance(value, Distribution):
        return value
    return PointMass(value)


def message_type_of(value: Any) -> MessageType:
    """Structural type of a held value or distribution."""
    return as_message(value).message_type


def gaussian_like(m: Any, V: Any) -> Distribution:
    """Gaussian or MvGaussian depending on the dimensionality of the mean."""
    if np.ndim(m) == 0:
        return Gaussian(m=m, V=V)
    return MvGaussian(m=m, V=V)
