"""
Tests for type descriptors and unification.
"""

import numpy as np
import pytest

from msgpass.compiler.unify import match, substitute, unify_inbounds
from msgpass.core.errors import UnresolvedParameterError
from msgpass.ir.types import (
    ABSENT,
    ANY,
    GAUSSIAN,
    POINT_MASS,
    Approximation,
    MessageType,
    TypeParam,
    matrix_point_mass,
    mv_gaussian,
    mv_point_mass,
    parse_message_type,
)
from msgpass.topology import FactorGraph, FixedGainNode, GaussianNode

N = TypeParam("N")


class TestMessageType:
    def test_str(self):
        assert str(GAUSSIAN) == "Gaussian"
        assert str(mv_gaussian(3)) == "MvGaussian{3}"
        assert str(matrix_point_mass(2, 3)) == "MatrixPointMass{2, 3}"
        assert str(mv_gaussian(N)) == "MvGaussian{N}"
        assert str(Approximation(GAUSSIAN, "MeanField")) == "Approximation{Gaussian, MeanField}"

    def test_concrete(self):
        assert mv_gaussian(3).is_concrete
        assert not mv_gaussian(N).is_concrete
        assert matrix_point_mass(N, N).free_parameters() == (N,)

    def test_structural_equality(self):
        assert mv_gaussian(3) == MessageType("MvGaussian", (3,))
        assert mv_gaussian(3) != mv_gaussian(2)
        assert mv_gaussian(3) != mv_point_mass(3)

    def test_parse(self):
        assert parse_message_type("Gaussian") == GAUSSIAN
        assert parse_message_type("MvGaussian{3}") == mv_gaussian(3)
        assert parse_message_type("MatrixPointMass{2, 2}") == matrix_point_mass(2, 2)
        assert parse_message_type("MvGaussian{N}") == mv_gaussian(N)

    def test_parse_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_message_type("MvGaussian{3")


class TestMatch:
    def test_wildcard_matches_everything(self):
        assert match(ANY, GAUSSIAN, {})
        assert match(ANY, None, {})

    def test_absent_matches_only_missing_inbound(self):
        assert match(ABSENT, None, {})
        assert not match(ABSENT, GAUSSIAN, {})

    def test_concrete_pattern_needs_a_message(self):
        assert not match(GAUSSIAN, None, {})

    def test_family_mismatch(self):
        assert not match(GAUSSIAN, POINT_MASS, {})
        assert not match(mv_gaussian(N), mv_point_mass(3), {})

    def test_binds_first_occurrence(self):
        bindings = {}
        assert match(mv_gaussian(N), mv_gaussian(3), bindings)
        assert bindings == {"N": 3}

    def test_recurring_parameter_must_agree(self):
        assert match(matrix_point_mass(N, N), matrix_point_mass(3, 3), {})
        assert not match(matrix_point_mass(N, N), matrix_point_mass(2, 3), {})


class TestUnifyInbounds:
    def test_shared_parameter_across_inbounds(self):
        patterns = (mv_point_mass(N), matrix_point_mass(N, N))
        assert unify_inbounds(patterns, (mv_point_mass(3), matrix_point_mass(3, 3))) == {"N": 3}
        assert unify_inbounds(patterns, (mv_point_mass(2), matrix_point_mass(3, 3))) is None

    def test_arity_mismatch(self):
        assert unify_inbounds((GAUSSIAN,), (GAUSSIAN, GAUSSIAN)) is None

    def test_absent_inbound(self):
        assert unify_inbounds((ABSENT, GAUSSIAN), (None, GAUSSIAN)) == {}
        assert unify_inbounds((GAUSSIAN, GAUSSIAN), (None, GAUSSIAN)) is None


class TestSubstitute:
    def test_concrete_pattern_unchanged(self):
        assert substitute(GAUSSIAN, {}) == GAUSSIAN

    def test_from_bindings(self):
        assert substitute(mv_gaussian(N), {"N": 4}) == mv_gaussian(4)

    def test_from_node_static_data(self):
        node = FixedGainNode(np.ones((3, 2)), graph=FactorGraph())
        assert substitute(mv_gaussian(TypeParam("dims_n")), {}, node) == mv_gaussian(3)
        assert substitute(mv_gaussian(TypeParam("dims_m")), {}, node) == mv_gaussian(2)

    def test_bindings_take_precedence_over_static_data(self):
        node = FixedGainNode(np.ones((3, 2)), graph=FactorGraph())
        assert substitute(mv_gaussian(TypeParam("dims_n")), {"dims_n": 5}, node) == mv_gaussian(5)

    def test_unbound_parameter(self):
        node = GaussianNode(id="g", graph=FactorGraph())
        with pytest.raises(UnresolvedParameterError) as info:
            substitute(mv_gaussian(TypeParam("K")), {}, node)
        assert info.value.parameter == "K"
        assert info.value.node_id == "g"
