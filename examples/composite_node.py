"""
Example: Composite node.

A composite node wraps a Gaussian with unit variance. The outer model puts
a N(0, 4) prior on its mean and observes its output, so the posterior of
the mean is N(0, 4) * N(y, 1).
"""

from msgpass import (
    CompositeNode,
    Constant,
    FactorGraph,
    GaussianNode,
    Schedule,
    Terminal,
    compile_algorithm,
)


def build_unit_gaussian(graph):
    """Composite node N(out | mean, 1) with inner schedules for both interfaces."""
    inner = FactorGraph(name="unit_gaussian")
    mean = Terminal(id="mean", graph=inner)
    out = Terminal(id="out", graph=inner)
    var = Constant(1.0, id="var", graph=inner)
    g = GaussianNode(id="g", graph=inner)
    inner.connect(mean.i["out"], g.i["mean"])
    inner.connect(var.i["out"], g.i["variance"])
    inner.connect(g.i["out"], out.i["out"])

    node = CompositeNode(inner, [mean, out], kind="UnitGaussian", id="unit", graph=graph)
    node.define_schedule("out", Schedule.from_interfaces([mean.i["out"], var.i["out"], g.i["out"]]))
    node.define_schedule("mean", Schedule.from_interfaces([out.i["out"], var.i["out"], g.i["mean"]]))
    return node


def main():
    graph = FactorGraph()
    pm = Constant(0.0, id="pm", graph=graph)
    pv = Constant(4.0, id="pv", graph=graph)
    prior = GaussianNode(id="prior", graph=graph)
    unit = build_unit_gaussian(graph)
    obs = graph.placeholder(Constant(0.0, id="obs", graph=graph), "y")

    graph.connect(pm.i["out"], prior.i["mean"])
    graph.connect(pv.i["out"], prior.i["variance"])
    graph.connect(prior.i["out"], unit.i["mean"], "mu")
    graph.connect(unit.i["out"], obs.i["out"], "y")

    schedule = Schedule.from_interfaces([
        pm.i["out"],
        pv.i["out"],
        prior.i["out"],
        obs.i["out"],
        unit.i["mean"],
    ])
    algorithm = compile_algorithm(schedule, [graph.variables["mu"]])

    print(graph)
    print(algorithm.schedule)
    print(algorithm.source)
    print(algorithm({"y": 5.0}))


if __name__ == "__main__":
    main()
