"""
Tests for distributions and the distribution product.
"""

import numpy as np
import pytest

from msgpass.distributions import (
    Gamma,
    Gaussian,
    InverseGamma,
    MvGaussian,
    PointMass,
    StudentsT,
    as_message,
    gaussian_like,
    multiply,
)
from msgpass.ir.types import GAUSSIAN, POINT_MASS, STUDENTS_T, matrix_point_mass, mv_gaussian, mv_point_mass


class TestMessageTypes:
    def test_point_mass(self):
        assert PointMass(1.0).message_type == POINT_MASS
        assert PointMass([1.0, 2.0, 3.0]).message_type == mv_point_mass(3)
        assert PointMass(np.eye(2)).message_type == matrix_point_mass(2, 2)

    def test_gaussians(self):
        assert Gaussian(m=0.0, V=1.0).message_type == GAUSSIAN
        assert MvGaussian(m=np.zeros(3), V=np.eye(3)).message_type == mv_gaussian(3)

    def test_mv_gaussian_shape_check(self):
        with pytest.raises(ValueError):
            MvGaussian(m=np.zeros(3), V=np.eye(2))

    def test_as_message(self):
        g = Gaussian(m=0.0, V=1.0)
        assert as_message(g) is g
        assert as_message(2.5) == PointMass(2.5)

    def test_gaussian_like(self):
        assert gaussian_like(1.0, 2.0) == Gaussian(m=1.0, V=2.0)
        assert isinstance(gaussian_like(np.zeros(2), np.eye(2)), MvGaussian)


class TestDistribution:
    def test_equality_with_arrays(self):
        assert PointMass([1.0, 2.0]) == PointMass(np.array([1.0, 2.0]))
        assert PointMass([1.0, 2.0]) != PointMass([1.0, 3.0])
        assert Gaussian(m=0.0, V=1.0) != Gamma(a=0.0, b=1.0)

    def test_unhashable(self):
        with pytest.raises(TypeError):
            hash(Gaussian(m=0.0, V=1.0))

    def test_is_close(self):
        assert Gaussian(m=1.0, V=2.0).is_close(Gaussian(m=1.0 + 1e-13, V=2.0))
        assert not Gaussian(m=1.0, V=2.0).is_close(PointMass(1.0))

    def test_moments(self):
        assert Gamma(a=2.0, b=4.0).mean == pytest.approx(0.5)
        assert InverseGamma(a=3.0, b=4.0).mean == pytest.approx(2.0)
        assert InverseGamma(a=3.0, b=4.0).inverse_mean == pytest.approx(0.75)
        assert PointMass(4.0).inverse_mean == pytest.approx(0.25)

    def test_precision_form(self):
        g = Gaussian.from_precision(xi=1.0, W=2.0)
        assert g.m == pytest.approx(0.5)
        assert g.V == pytest.approx(0.5)
        assert g.xi == pytest.approx(1.0)
        assert g.W == pytest.approx(2.0)


class TestProduct:
    def test_gaussian(self):
        result = multiply(Gaussian.from_precision(xi=1.0, W=2.0), Gaussian.from_precision(xi=3.0, W=4.0))
        assert result.is_close(Gaussian.from_precision(xi=4.0, W=6.0))

    def test_mv_gaussian(self):
        a = MvGaussian.from_precision(xi=[1.0, 2.0], W=2.0 * np.eye(2))
        b = MvGaussian.from_precision(xi=[3.0, 4.0], W=4.0 * np.eye(2))
        result = multiply(a, b)
        assert result.is_close(MvGaussian.from_precision(xi=[4.0, 6.0], W=6.0 * np.eye(2)))

    def test_gamma(self):
        assert multiply(Gamma(a=1.0, b=2.0), Gamma(a=3.0, b=4.0)) == Gamma(a=3.0, b=6.0)

    def test_inverse_gamma(self):
        assert multiply(InverseGamma(a=1.0, b=2.0), InverseGamma(a=3.0, b=4.0)) == InverseGamma(a=5.0, b=6.0)

    def test_gaussian_students_t(self):
        g = Gaussian.from_precision(xi=0.0, W=1.0)
        t = StudentsT(m=0.0, W=1.0, nu=1.0)
        expected = Gaussian.from_precision(xi=0.0, W=3.0)

        assert t.message_type == STUDENTS_T
        assert multiply(g, t).is_close(expected)
        assert multiply(t, g).is_close(expected)

    def test_students_t_location(self):
        result = multiply(Gaussian(m=0.0, V=1.0), StudentsT(m=4.0, W=2.0, nu=4.0))
        assert result.is_close(Gaussian.from_precision(xi=10.0, W=3.5))

    def test_point_mass_wins(self):
        g = Gaussian(m=0.0, V=1.0)
        assert multiply(PointMass(3.0), g) == PointMass(3.0)
        assert multiply(g, PointMass(3.0)) == PointMass(3.0)
        assert multiply(g, 3.0) == PointMass(3.0)

    def test_matching_point_masses(self):
        assert multiply(PointMass(2.0), PointMass(2.0)) == PointMass(2.0)

    def test_disagreeing_point_masses(self):
        with pytest.raises(ValueError):
            multiply(PointMass(2.0), PointMass(3.0))

    def test_undefined_product(self):
        with pytest.raises(TypeError):
            multiply(Gamma(a=1.0, b=1.0), Gaussian(m=0.0, V=1.0))
