"""
msgpass/compiler/emit.py

Program emission for message passing.

Walks a resolved schedule in order and emits one instruction per entry:
- placeholder node  -> INJECT_DATA
- constant node     -> INJECT_CONSTANT
- terminal node     -> INJECT_DATA from the buffer named after the terminal
- composite node    -> INVOKE_INNER with the compiled inner program
- any other node    -> APPLY_RULE with the resolved rule id

followed by one COMBINE_MARGINAL per requested variable.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from msgpass.core.errors import IncompleteScheduleError, MalformedTopologyError
from msgpass.distributions.dists import as_message
from msgpass.ir.ops import Instruction, OpCode, Program, SlotID
from msgpass.runtime.schedule import Resolution, Schedule, ScheduleEntry
from msgpass.topology.graph import Interface, Variable
from msgpass.topology.nodes import Terminal

logger = logging.getLogger(__name__)


def _inbound_slots(idx: int, entry: ScheduleEntry) -> Tuple[Optional[SlotID], ...]:
    """Inbound message slots in interface order; None is the absence sentinel."""
    for ref in entry.inbounds:
        if ref is not None and not 0 <= ref < idx:
            raise MalformedTopologyError(
                f"Inbound reference {ref} does not point to an earlier schedule entry",
                entry_index=idx,
                node_id=entry.node.id,
            )
    return tuple(entry.inbounds)


def _emit_leaf(idx: int, entry: ScheduleEntry) -> Instruction:
    node = entry.node
    if isinstance(node, Terminal):
        return Instruction(OpCode.INJECT_DATA, dst=idx, args={"buffer": node.id, "index": None})

    binding = node.graph.placeholders.get(node.id)
    if binding is not None:
        buffer, index = binding
        return Instruction(OpCode.INJECT_DATA, dst=idx, args={"buffer": buffer, "index": index})

    return Instruction(OpCode.INJECT_CONSTANT, dst=idx, args={"value": as_message(node.value)})


def _emit_inner(idx: int, entry: ScheduleEntry) -> Instruction:
    node = entry.node
    slot = entry.outbound_slot
    inner_program = emit_message_passing_program(entry.inner)
    result = entry.inner.index_of(node.terminals[slot].interfaces[0].partner)

    others = [t for k, t in enumerate(node.terminals) if k != slot]
    terminals = tuple(
        (terminal.id, ref)
        for terminal, ref in zip(others, _inbound_slots(idx, entry))
        if ref is not None
    )
    return Instruction(
        OpCode.INVOKE_INNER,
        dst=idx,
        args={"node": node.id, "program": inner_program, "terminals": terminals, "result": result},
    )


def emit_message_passing_program(
    schedule: Schedule,
    targets: Sequence[Variable] = (),
) -> Program:
    """
    Emit the program for a resolved schedule.

    Args:
        schedule: Fully resolved schedule in dependency order
        targets: Variables whose marginals the program computes

    Returns:
        Program with one message slot per schedule entry

    Raises:
        MalformedTopologyError: If an entry is unresolved or references a later entry
        IncompleteScheduleError: If a target's edge misses a message direction
    """
    instrs: List[Instruction] = []
    interface_to_slot: Dict[Interface, SlotID] = {}

    for idx, entry in enumerate(schedule):
        if not entry.is_resolved:
            raise MalformedTopologyError("Schedule entry is not resolved", entry_index=idx, node_id=entry.node.id)

        if entry.resolution is Resolution.LEAF:
            instrs.append(_emit_leaf(idx, entry))
        elif entry.resolution is Resolution.COMPOSITE:
            instrs.append(_emit_inner(idx, entry))
        else:
            instrs.append(Instruction(
                OpCode.APPLY_RULE,
                dst=idx,
                args={
                    "rule": entry.rule_id,
                    "node": entry.node,
                    "inbounds": _inbound_slots(idx, entry),
                    "approximation": entry.approximation,
                },
            ))
        interface_to_slot[entry.interface] = idx

    for variable in targets:
        if not variable.edges:
            raise IncompleteScheduleError(f"Variable {variable.id} is not carried by any edge", variable_id=variable.id)
        edge = variable.edges[0]
        missing = [iface for iface in edge.interfaces if iface not in interface_to_slot]
        if missing:
            raise IncompleteScheduleError(
                f"Marginal of {variable.id} requires the outbound messages on {edge.a} and {edge.b}; "
                f"the schedule never computes {', '.join(map(str, missing))}",
                variable_id=variable.id,
            )
        instrs.append(Instruction(
            OpCode.COMBINE_MARGINAL,
            dst=None,
            args={"variable": variable.id, "srcs": (interface_to_slot[edge.a], interface_to_slot[edge.b])},
        ))

    logger.debug("Emitted %d instructions for %d schedule entries", len(instrs), len(schedule))
    return Program(instructions=tuple(instrs), n_messages=len(schedule))
