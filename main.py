#!/usr/bin/env python3
"""
msgpass: Message passing algorithm compiler for factor graphs

Compiles a factor graph and an ordered message schedule into an executable
message passing procedure and runs it against data.

Usage:
    # Compile and run a model from JSON
    python main.py compile --input model.json --show-source

    # Override the data buffers of the model
    python main.py compile --input model.json --data data.json

    # Run demos
    python main.py demo --example chain

    # Run tests
    python main.py test
"""

from __future__ import annotations

import argparse
import json
import logging
import subprocess
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple

import numpy as np

from msgpass import (
    AdditionNode,
    CompilationError,
    Constant,
    EqualityNode,
    FactorGraph,
    FixedGainNode,
    Gaussian,
    GaussianNode,
    PointMass,
    Schedule,
    Variable,
    __version__,
    compile_algorithm,
)
from msgpass.ir.types import parse_message_type
from msgpass.topology.graph import Interface

NODE_KINDS = {
    "Constant": Constant,
    "GaussianNode": GaussianNode,
    "AdditionNode": AdditionNode,
    "EqualityNode": EqualityNode,
    "FixedGainNode": FixedGainNode,
}


def _to_value(raw: Any) -> Any:
    """JSON numbers stay floats, nested lists become arrays."""
    if isinstance(raw, list):
        return np.asarray(raw, dtype=np.float64)
    return raw


def _lookup_interface(graph: FactorGraph, ref: str) -> Interface:
    """Resolve a `node.interface` reference."""
    node_id, _, name = ref.partition(".")
    if not name:
        raise ValueError(f"Interface reference must look like 'node.interface', got {ref!r}")
    return graph.node(node_id).interface(name)


def build_model(spec: Mapping[str, Any]) -> Tuple[FactorGraph, Schedule, List[Variable], Dict[str, Any]]:
    """
    Build a graph, schedule and targets from a model description.

    Expected format:
    {
        "nodes": {
            "m0": {"kind": "Constant", "value": 0.0},
            "g": {"kind": "GaussianNode"},
            "y": {"kind": "Constant", "value": 0.0, "placeholder": {"buffer": "y"}}
        },
        "edges": [{"a": "m0.out", "b": "g.mean", "variable": "m"}, ...],
        "schedule": ["m0.out", {"interface": "g.out", "pin": "Gaussian"}, ...],
        "targets": ["y"],
        "data": {"y": 5.0}
    }
    """
    graph = FactorGraph()
    for node_id, node_spec in spec["nodes"].items():
        kind = node_spec["kind"]
        if kind not in NODE_KINDS:
            raise ValueError(f"Unknown node kind {kind!r}; available: {', '.join(NODE_KINDS)}")
        if kind == "Constant":
            node = Constant(_to_value(node_spec["value"]), id=node_id, graph=graph)
        elif kind == "FixedGainNode":
            node = FixedGainNode(_to_value(node_spec["gain"]), id=node_id, graph=graph)
        else:
            node = NODE_KINDS[kind](id=node_id, graph=graph)

        binding = node_spec.get("placeholder")
        if isinstance(binding, str):
            graph.placeholder(node, binding)
        elif binding is not None:
            graph.placeholder(node, binding["buffer"], binding.get("index"))

    for edge_spec in spec["edges"]:
        graph.connect(
            _lookup_interface(graph, edge_spec["a"]),
            _lookup_interface(graph, edge_spec["b"]),
            edge_spec.get("variable"),
        )

    interfaces = []
    pins = {}
    approximations = {}
    for step in spec["schedule"]:
        if isinstance(step, str):
            step = {"interface": step}
        iface = _lookup_interface(graph, step["interface"])
        interfaces.append(iface)
        if "pin" in step:
            pins[iface] = parse_message_type(step["pin"])
        if "approximation" in step:
            approximations[iface] = step["approximation"]
    schedule = Schedule.from_interfaces(interfaces, pins=pins, approximations=approximations)

    targets = [graph.variables[v] for v in spec.get("targets", [])]
    data = {k: _to_value(v) for k, v in spec.get("data", {}).items()}
    return graph, schedule, targets, data


def load_model_from_json(filepath: str) -> Tuple[FactorGraph, Schedule, List[Variable], Dict[str, Any]]:
    """Load a model description from a JSON file."""
    with open(filepath, "r") as f:
        spec = json.load(f)
    return build_model(spec)


def load_data_from_json(filepath: str) -> Dict[str, Any]:
    """Load data buffers from a JSON file."""
    with open(filepath, "r") as f:
        raw = json.load(f)
    return {k: _to_value(v) for k, v in raw.items()}


def format_marginals(marginals: Mapping[str, Any]) -> List[str]:
    return [f"  {var}: {dist!r}" for var, dist in sorted(marginals.items())]


def cmd_compile(args):
    """Execute the compile command."""
    print(f"Loading model from: {args.input}")
    graph, schedule, targets, data = load_model_from_json(args.input)
    if args.data:
        data.update(load_data_from_json(args.data))

    print(f"\n{graph!r}")
    try:
        algorithm = compile_algorithm(schedule, targets)
    except CompilationError as e:
        print(f"\nCompilation failed:\n{e}")
        return 1

    print(f"\nResolved {algorithm.schedule!r}")
    if args.show_source:
        print("\nGenerated procedure:")
        print(algorithm.source)

    try:
        marginals = algorithm(data)
    except KeyError as e:
        print(f"\nMissing input: {e}")
        return 1

    print("\nMarginals:")
    for line in format_marginals(marginals):
        print(line)
    return 0


def demo_gaussian_observation():
    """Demo: y ~ N(0, 1) observed at y = 5"""
    print("=" * 60)
    print("Demo: Gaussian node with constant hyperparameters")
    print("=" * 60)

    graph = FactorGraph()
    m0 = Constant(0.0, id="m0", graph=graph)
    v0 = Constant(1.0, id="v0", graph=graph)
    g = GaussianNode(id="g", graph=graph)
    obs = graph.placeholder(Constant(0.0, id="obs", graph=graph), "y")
    graph.connect(m0.i["out"], g.i["mean"], "m")
    graph.connect(v0.i["out"], g.i["variance"], "v")
    graph.connect(g.i["out"], obs.i["out"], "y")

    schedule = Schedule.from_interfaces([m0.i["out"], v0.i["out"], g.i["out"], obs.i["out"], g.i["mean"]])
    algorithm = compile_algorithm(schedule, [graph.variables["y"]])
    print(f"\nResolved {algorithm.schedule!r}")
    print("\nGenerated procedure:")
    print(algorithm.source)

    marginals = algorithm({"y": 5.0})
    for line in format_marginals(marginals):
        print(line)

    match = marginals["y"] == PointMass(5.0)
    print(f"\nMatch: {match}")
    return match


def demo_chain():
    """Demo: x ~ N(0, 1), y ~ N(x, 1), observed y = 2"""
    print("=" * 60)
    print("Demo: Two chained Gaussian nodes")
    print("=" * 60)

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

    schedule = Schedule.from_interfaces([
        m0.i["out"], v0.i["out"], g1.i["out"], v1.i["out"],
        g2.i["out"], obs.i["out"], g2.i["mean"], g1.i["mean"],
    ])
    algorithm = compile_algorithm(schedule, [graph.variables["x"]])
    print(f"\nResolved {algorithm.schedule!r}")

    marginals = algorithm({"y": 2.0})
    for line in format_marginals(marginals):
        print(line)

    # N(0, 1) * N(2, 1) = N(1, 0.5)
    match = marginals["x"].is_close(Gaussian(m=1.0, V=0.5))
    print(f"\nVerification: x ~ N(1, 0.5)")
    print(f"Match: {match}")
    return match


def demo_fixed_gain():
    """Demo: z = A x with a 3x2 gain; the outbound dimension comes from A"""
    print("=" * 60)
    print("Demo: Fixed gain with matrix-supplied dimensions")
    print("=" * 60)

    A = np.array([[1.0, 0.0], [0.0, 2.0], [1.0, 1.0]])
    graph = FactorGraph()
    m0 = Constant(np.zeros(2), id="m0", graph=graph)
    v0 = Constant(np.eye(2), id="v0", graph=graph)
    g = GaussianNode(id="g", graph=graph)
    gain = FixedGainNode(A, id="A", graph=graph)
    obs = graph.placeholder(Constant(np.zeros(3), id="obs", graph=graph), "z")
    graph.connect(m0.i["out"], g.i["mean"], "m")
    graph.connect(v0.i["out"], g.i["variance"], "v")
    graph.connect(g.i["out"], gain.i["in"], "x")
    graph.connect(gain.i["out"], obs.i["out"], "z")

    schedule = Schedule.from_interfaces([
        m0.i["out"], v0.i["out"], g.i["out"], gain.i["out"], obs.i["out"], gain.i["in"],
    ])
    algorithm = compile_algorithm(schedule, [graph.variables["x"]])
    print(f"\nResolved {algorithm.schedule!r}")

    forward = algorithm.schedule[3].outbound_type
    backward = algorithm.schedule[5].outbound_type
    print(f"\nA.out: {forward}, A.in: {backward}")

    x = np.array([1.0, 2.0])
    marginals = algorithm({"z": A @ x})
    for line in format_marginals(marginals):
        print(line)

    match = str(forward) == "MvGaussian{3}" and str(backward) == "MvPointMass{2}"
    match = match and marginals["x"].is_close(PointMass(x))
    print(f"Match: {match}")
    return match


def cmd_demo(args):
    """Execute the demo command."""
    demos = {
        "gaussian": demo_gaussian_observation,
        "chain": demo_chain,
        "gain": demo_fixed_gain,
    }

    if args.example == "all":
        results = []
        for name, func in demos.items():
            try:
                passed = func()
            except CompilationError as e:
                print(f"Error in {name}:\n{e}")
                passed = False
            results.append((name, passed))
            print()

        print("=" * 60)
        print("Summary")
        print("=" * 60)
        all_passed = True
        for name, passed in results:
            status = "PASS" if passed else "FAIL"
            print(f"  {name}: {status}")
            if not passed:
                all_passed = False

        return 0 if all_passed else 1

    try:
        passed = demos[args.example]()
    except CompilationError as e:
        print(f"Error:\n{e}")
        return 1
    return 0 if passed else 1


def cmd_test(args):
    """Execute the test command."""
    test_dir = Path(__file__).parent / "tests"
    if not test_dir.exists():
        print(f"Test directory not found: {test_dir}")
        return 1

    cmd = [sys.executable, "-m", "pytest", str(test_dir)]
    if args.test_verbose:
        cmd.append("-v")
    if args.coverage:
        cmd.extend(["--cov=msgpass", "--cov-report=term-missing"])

    print(f"Running: {' '.join(cmd)}")
    result = subprocess.run(cmd, cwd=Path(__file__).parent)
    return result.returncode


def main():
    parser = argparse.ArgumentParser(
        prog="msgpass",
        description="msgpass: Message passing algorithm compiler for factor graphs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Compile a model and show the generated procedure
  msgpass compile --input model.json --show-source

  # Run demos
  msgpass demo --example chain
  msgpass demo --example all

  # Run tests
  msgpass test -v
"""
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"msgpass {__version__}"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log resolution and execution steps"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Compile command
    compile_parser = subparsers.add_parser("compile", help="Compile and run a model")
    compile_parser.add_argument("--input", "-i", type=str, required=True, help="Model JSON file")
    compile_parser.add_argument("--data", "-d", type=str, help="Data JSON file overriding the model's data")
    compile_parser.add_argument(
        "--show-source", "-s",
        action="store_true",
        help="Print the generated procedure"
    )

    # Demo command
    demo_parser = subparsers.add_parser("demo", help="Run demonstration examples")
    demo_parser.add_argument(
        "--example", "-e",
        choices=["gaussian", "chain", "gain", "all"],
        default="all",
        help="Which example to run (default: all)"
    )

    # Test command
    test_parser = subparsers.add_parser("test", help="Run test suite")
    test_parser.add_argument("--verbose", "-v", dest="test_verbose", action="store_true", help="Verbose output")
    test_parser.add_argument("--coverage", "-c", action="store_true", help="With coverage")

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "compile":
        return cmd_compile(args)
    elif args.command == "demo":
        return cmd_demo(args)
    elif args.command == "test":
        return cmd_test(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
