"""
Example: Gaussian node with constant hyperparameters.

y ~ N(0, 1), with y read from the data buffer "y".
"""

from msgpass import Constant, FactorGraph, GaussianNode, Schedule, compile_algorithm


def main():
    graph = FactorGraph()
    m0 = Constant(0.0, id="m0", graph=graph)
    v0 = Constant(1.0, id="v0", graph=graph)
    g = GaussianNode(id="g", graph=graph)

    # The held value only fixes the message type; the run-time value comes from data
    obs = graph.placeholder(Constant(0.0, id="obs", graph=graph), "y")

    graph.connect(m0.i["out"], g.i["mean"], "m")
    graph.connect(v0.i["out"], g.i["variance"], "v")
    graph.connect(g.i["out"], obs.i["out"], "y")

    schedule = Schedule.from_interfaces([
        m0.i["out"],
        v0.i["out"],
        g.i["out"],
        obs.i["out"],
        g.i["mean"],
    ])

    algorithm = compile_algorithm(schedule, [graph.variables["y"]])

    print("Resolved schedule:")
    print(algorithm.schedule)
    print("\nGenerated procedure:")
    print(algorithm.source)

    for y in (5.0, -1.5):
        marginals = algorithm({"y": y})
        print(f"y = {y}: {marginals}")


if __name__ == "__main__":
    main()
