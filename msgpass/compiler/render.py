"""
msgpass/compiler/render.py

Textual rendering of a program as Python source.

The rendered function has the calling convention of the compiled
procedure, `(data, marginals=None) -> marginals`, and refers to three
callables supplied by the caller: `rule(rule_id, node_id, *inbounds)`,
`inner(node_id, terminal_messages)` and `product(a, b)`. Constants are
written as constructor calls, so the namespace also needs `np`,
`as_message` and the distribution classes they name.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, List, Optional

import numpy as np

from msgpass.distributions.dists import Distribution
from msgpass.ir.ops import OpCode, Program


def _slot(ref: Optional[int]) -> str:
    return "None" if ref is None else f"messages[{ref}]"


def _literal(value: Any) -> str:
    """Source text that rebuilds `value`."""
    if isinstance(value, Distribution):
        params = ", ".join(f"{f.name}={_literal(getattr(value, f.name))}" for f in fields(value))
        return f"{type(value).__name__}({params})"
    if isinstance(value, np.ndarray):
        return f"np.array({value.tolist()!r})"
    return repr(value)


def render_source(program: Program, name: str = "step") -> str:
    """
    Render `program` as the source of a Python function.

    Args:
        program: Program to render
        name: Function name

    Returns:
        Source text
    """
    lines: List[str] = [
        f"def {name}(data, marginals=None):",
        "    marginals = dict(marginals or {})",
        f"    messages = [None] * {program.n_messages}",
        "",
    ]
    for ins in program:
        args = ins.args
        if ins.op == OpCode.INJECT_DATA:
            if args["index"] is None:
                read = f"data[{args['buffer']!r}]"
            else:
                read = f"data[{args['buffer']!r}][{args['index']}]"
            lines.append(f"    messages[{ins.dst}] = as_message({read})")
        elif ins.op == OpCode.INJECT_CONSTANT:
            lines.append(f"    messages[{ins.dst}] = {_literal(args['value'])}")
        elif ins.op == OpCode.APPLY_RULE:
            call = [repr(args["rule"]), repr(args["node"].id)] + [_slot(r) for r in args["inbounds"]]
            if args["approximation"] is not None:
                call.append("marginals=marginals")
            lines.append(f"    messages[{ins.dst}] = rule({', '.join(call)})")
        elif ins.op == OpCode.INVOKE_INNER:
            feeds = ", ".join(f"{tid!r}: {_slot(ref)}" for tid, ref in args["terminals"])
            lines.append(f"    messages[{ins.dst}] = inner({args['node']!r}, {{{feeds}}})[{args['result']}]")
        elif ins.op == OpCode.COMBINE_MARGINAL:
            a, b = args["srcs"]
            lines.append(f"    marginals[{args['variable']!r}] = product({_slot(a)}, {_slot(b)})")
        else:
            raise ValueError(f"Unknown opcode: {ins.op}")
    lines.append("")
    lines.append("    return marginals")
    return "\n".join(lines) + "\n"
