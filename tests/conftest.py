"""
Shared models for the test suite.
"""

from types import SimpleNamespace

import pytest

from msgpass import (
    CompositeNode,
    Constant,
    FactorGraph,
    GaussianNode,
    Schedule,
    Terminal,
    default_library,
)


@pytest.fixture
def library():
    return default_library()


@pytest.fixture
def gaussian_model():
    """y ~ N(0, 1) with y read from the data buffer "y"."""
    graph = FactorGraph()
    m0 = Constant(0.0, id="m0", graph=graph)
    v0 = Constant(1.0, id="v0", graph=graph)
    g = GaussianNode(id="g", graph=graph)
    obs = graph.placeholder(Constant(0.0, id="obs", graph=graph), "y")
    graph.connect(m0.i["out"], g.i["mean"], "m")
    graph.connect(v0.i["out"], g.i["variance"], "v")
    graph.connect(g.i["out"], obs.i["out"], "y")
    return SimpleNamespace(graph=graph, m0=m0, v0=v0, g=g, obs=obs)


@pytest.fixture
def chain_model():
    """x ~ N(0, 1), y ~ N(x, 1) with y read from the data buffer "y"."""
    graph = FactorGraph()
    m0 = Constant(0.0, id="m0", graph=graph)
    v0 = Constant(1.0, id="v0", graph=graph)
    v1 = Constant(1.0, id="v1", graph=graph)
    g1 = GaussianNode(id="g1", graph=graph)
    g2 = GaussianNode(id="g2", graph=graph)
    obs = graph.placeholder(Constant(0.0, id="obs", graph=graph), "y")
    graph.connect(m0.i["out"], g1.i["mean"], "m")
    graph.connect(v0.i["out"], g1.i["variance"], "v")
    graph.connect(g1.i["out"], g2.i["mean"], "x")
    graph.connect(v1.i["out"], g2.i["variance"], "w")
    graph.connect(g2.i["out"], obs.i["out"], "y")
    return SimpleNamespace(graph=graph, m0=m0, v0=v0, v1=v1, g1=g1, g2=g2, obs=obs)


@pytest.fixture
def composite_model():
    """
    mu ~ N(0, 4) feeding a composite node N(y | mu, 1), y read from "y".

    The composite node defines inner schedules for both of its interfaces.
    """
    inner = FactorGraph(name="unit_gaussian")
    mean_t = Terminal(id="mean", graph=inner)
    out_t = Terminal(id="out", graph=inner)
    var = Constant(1.0, id="var", graph=inner)
    inner_g = GaussianNode(id="inner_g", graph=inner)
    inner.connect(mean_t.i["out"], inner_g.i["mean"])
    inner.connect(var.i["out"], inner_g.i["variance"])
    inner.connect(inner_g.i["out"], out_t.i["out"])

    graph = FactorGraph()
    pm = Constant(0.0, id="pm", graph=graph)
    pv = Constant(4.0, id="pv", graph=graph)
    prior = GaussianNode(id="prior", graph=graph)
    unit = CompositeNode(inner, [mean_t, out_t], kind="UnitGaussian", id="unit", graph=graph)
    unit.define_schedule("out", Schedule.from_interfaces([mean_t.i["out"], var.i["out"], inner_g.i["out"]]))
    unit.define_schedule("mean", Schedule.from_interfaces([out_t.i["out"], var.i["out"], inner_g.i["mean"]]))
    obs = graph.placeholder(Constant(0.0, id="obs", graph=graph), "y")

    graph.connect(pm.i["out"], prior.i["mean"])
    graph.connect(pv.i["out"], prior.i["variance"])
    graph.connect(prior.i["out"], unit.i["mean"], "mu")
    graph.connect(unit.i["out"], obs.i["out"], "y")
    return SimpleNamespace(
        graph=graph, inner=inner, pm=pm, pv=pv, prior=prior, unit=unit, obs=obs,
        mean_t=mean_t, out_t=out_t, var=var, inner_g=inner_g,
    )
