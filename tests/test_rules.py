"""
Tests for the bundled update rules.
"""

import numpy as np
import pytest
import scipy.linalg as la

from msgpass.distributions import Gamma, Gaussian, InverseGamma, MvGaussian, PointMass
from msgpass.topology import AdditionNode, EqualityNode, FactorGraph, FixedGainNode, GaussianNode


class TestFixedGain:
    @pytest.fixture
    def scalar(self):
        return FixedGainNode(2.0, graph=FactorGraph())

    @pytest.fixture
    def matrix(self):
        return FixedGainNode([[1.0, 0.5], [-0.5, 2.0]], graph=FactorGraph())

    def test_backward_point_mass(self, library, scalar):
        result = library.implementations["fixed_gain_in_sp_pm"](scalar, PointMass(3.0))
        assert result == PointMass(1.5)

    def test_forward_point_mass(self, library, scalar):
        result = library.implementations["fixed_gain_out_sp_pm"](scalar, PointMass(3.0))
        assert result == PointMass(6.0)

    def test_backward_gaussian(self, library, scalar):
        result = library.implementations["fixed_gain_in_sp_g"](scalar, Gaussian(m=3.0, V=5.0))
        assert result.is_close(Gaussian(m=1.5, V=1.25))

    def test_forward_gaussian(self, library, scalar):
        result = library.implementations["fixed_gain_out_sp_g"](scalar, Gaussian(m=3.0, V=5.0))
        assert result.is_close(Gaussian(m=6.0, V=20.0))

    def test_scalar_rule_needs_scalar_gain(self, library, matrix):
        with pytest.raises(ValueError):
            library.implementations["fixed_gain_out_sp_pm"](matrix, PointMass(3.0))

    def test_forward_mv_point_mass(self, library, matrix):
        result = library.implementations["fixed_gain_out_sp_mvpm"](matrix, PointMass([30.0, 10.0]))
        assert result.is_close(PointMass([35.0, 5.0]))

    def test_backward_mv_point_mass(self, library, matrix):
        result = library.implementations["fixed_gain_in_sp_mvpm"](matrix, PointMass([30.0, 10.0]))
        expected = la.inv(matrix.gain) @ np.array([30.0, 10.0])
        assert np.allclose(result.value, expected)

    def test_forward_mv_gaussian(self, library, matrix):
        A = matrix.gain
        x = MvGaussian(m=[1.0, 2.0], V=[[2.0, 0.5], [0.5, 1.0]])
        result = library.implementations["fixed_gain_out_sp_mvg"](matrix, x)
        assert result.is_close(MvGaussian(m=A @ x.m, V=A @ x.V @ A.T))

    def test_backward_mv_gaussian(self, library, matrix):
        A = matrix.gain
        y = MvGaussian(m=[1.0, 2.0], V=[[2.0, 0.5], [0.5, 1.0]])
        result = library.implementations["fixed_gain_in_sp_mvg"](matrix, y)

        # Precision form: W_in = A' W A
        assert np.allclose(la.inv(result.V), A.T @ la.inv(y.V) @ A)
        assert np.allclose(result.m, la.solve(A, y.m))

    def test_rectangular_gain_backward(self, library):
        A = np.array([[1.0, 0.0], [0.0, 2.0], [1.0, 1.0]])
        node = FixedGainNode(A, graph=FactorGraph())
        result = library.implementations["fixed_gain_in_sp_mvpm"](node, PointMass(A @ [1.0, 2.0]))
        assert np.allclose(result.value, [1.0, 2.0])


class TestGaussianNode:
    @pytest.fixture
    def node(self):
        return GaussianNode(graph=FactorGraph())

    def test_forward_known_variance(self, library, node):
        result = library.implementations["gaussian_out_sp_g_pm"](node, Gaussian(m=1.0, V=2.0), PointMass(3.0))
        assert result == Gaussian(m=1.0, V=5.0)

    def test_backward_known_variance(self, library, node):
        result = library.implementations["gaussian_mean_sp_pm_pm"](node, PointMass(3.0), PointMass(4.0))
        assert result == Gaussian(m=4.0, V=3.0)

    def test_multivariate(self, library, node):
        result = library.implementations["gaussian_out_sp_mvpm_mxpm"](node, PointMass([1.0, 2.0]), PointMass(np.eye(2)))
        assert result.is_close(MvGaussian(m=[1.0, 2.0], V=np.eye(2)))

    def test_mean_field_variance(self, library):
        graph = FactorGraph()
        g = GaussianNode(graph=graph)
        m = GaussianNode(graph=graph)
        y = GaussianNode(graph=graph)
        graph.connect(m.i["out"], g.i["mean"], "m")
        graph.connect(y.i["mean"], g.i["out"], "y")

        marginals = {"m": Gaussian(m=1.0, V=0.5), "y": Gaussian(m=2.0, V=1.5)}
        result = library.implementations["gaussian_variance_mf"](g, None, None, marginals=marginals)

        assert result.is_close(InverseGamma(a=-0.5, b=0.5 * (1.5 + 0.5 + 1.0)))


class TestAddition:
    @pytest.fixture
    def node(self):
        return AdditionNode(graph=FactorGraph())

    def test_forward(self, library, node):
        result = library.implementations["addition_out_sp_g_g"](node, Gaussian(m=1.0, V=2.0), Gaussian(m=3.0, V=4.0))
        assert result == Gaussian(m=4.0, V=6.0)

    def test_backward(self, library, node):
        result = library.implementations["addition_in1_sp_pm_g"](node, PointMass(1.0), Gaussian(m=5.0, V=2.0))
        assert result == Gaussian(m=4.0, V=2.0)

    def test_point_masses(self, library, node):
        result = library.implementations["addition_out_sp_pm_pm"](node, PointMass(1.0), PointMass(2.0))
        assert result == PointMass(3.0)

    def test_multivariate(self, library, node):
        x = MvGaussian(m=[1.0, 1.0], V=np.eye(2))
        result = library.implementations["addition_out_sp_mvg_mvpm"](node, x, PointMass([1.0, 2.0]))
        assert result.is_close(MvGaussian(m=[2.0, 3.0], V=np.eye(2)))


class TestEquality:
    @pytest.fixture
    def node(self):
        return EqualityNode(graph=FactorGraph())

    def test_gaussians(self, library, node):
        a = Gaussian.from_precision(xi=1.0, W=2.0)
        b = Gaussian.from_precision(xi=3.0, W=4.0)
        result = library.implementations["equality_c_sp_g_g"](node, a, b)
        assert result.is_close(Gaussian.from_precision(xi=4.0, W=6.0))

    def test_gamma(self, library, node):
        result = library.implementations["equality_a_sp_gam_gam"](node, Gamma(a=1.0, b=2.0), Gamma(a=3.0, b=4.0))
        assert result == Gamma(a=3.0, b=6.0)

    def test_point_mass(self, library, node):
        result = library.implementations["equality_b_sp_pm_g"](node, PointMass(2.0), Gaussian(m=0.0, V=1.0))
        assert result == PointMass(2.0)
