"""
msgpass/vm/vm.py

Virtual machine for executing message passing programs.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from msgpass.distributions.dists import Distribution
from msgpass.distributions.product import multiply
from msgpass.ir.ops import Instruction, OpCode, Program, SlotID
from msgpass.runtime.data import observe

logger = logging.getLogger(__name__)

RuleImplementation = Callable[..., Distribution]


class MessageStore:
    """Storage for the messages of one program run, one slot per schedule entry."""

    def __init__(self, size: int):
        self.data: List[Optional[Distribution]] = [None] * size

    def set(self, slot: SlotID, message: Distribution) -> None:
        """Store a message in a slot."""
        self.data[slot] = message

    def get(self, slot: SlotID) -> Distribution:
        """Get a message from a slot."""
        message = self.data[slot]
        if message is None:
            raise KeyError(f"Message slot not computed: {slot}")
        return message

    def has(self, slot: SlotID) -> bool:
        """Check if a slot holds a message."""
        return 0 <= slot < len(self.data) and self.data[slot] is not None

    def __contains__(self, slot: SlotID) -> bool:
        return self.has(slot)

    def __len__(self) -> int:
        return len(self.data)


class VirtualMachine:
    """
    Executes programs emitted by the compiler.

    The VM holds:
    - Rule implementations keyed by rule id
    - The distribution product used for marginals
    """

    def __init__(
        self,
        implementations: Mapping[str, RuleImplementation],
        product: Callable[[Any, Any], Distribution] = multiply,
    ):
        self.implementations = implementations
        self.product = product

    def run(
        self,
        program: Program,
        data: Mapping[str, Any],
        marginals: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Execute a program.

        Args:
            program: Program to execute
            data: External data buffers
            marginals: Prior marginals by variable id (read by approximate
                rules); not modified

        Returns:
            Prior marginals updated with the marginals computed by the program
        """
        out = dict(marginals or {})
        self.execute(program, data, out)
        return out

    def execute(self, program: Program, data: Mapping[str, Any], marginals: Dict[str, Any]) -> MessageStore:
        """Execute a program into a fresh message store, writing marginals in place."""
        store = MessageStore(program.n_messages)
        for ins in program.instructions:
            self._execute(ins, store, data, marginals)
        return store

    def _execute(
        self,
        ins: Instruction,
        store: MessageStore,
        data: Mapping[str, Any],
        marginals: Dict[str, Any],
    ) -> None:
        """Execute a single instruction."""

        if ins.op == OpCode.INJECT_DATA:
            store.set(ins.dst, observe(data, ins.args["buffer"], ins.args["index"]))

        elif ins.op == OpCode.INJECT_CONSTANT:
            store.set(ins.dst, ins.args["value"])

        elif ins.op == OpCode.APPLY_RULE:
            rule_id = ins.args["rule"]
            if rule_id not in self.implementations:
                raise KeyError(f"No implementation for rule {rule_id!r}")
            impl = self.implementations[rule_id]
            inbounds = tuple(None if s is None else store.get(s) for s in ins.args["inbounds"])
            logger.debug("Applying %s to slot %d", rule_id, ins.dst)
            if ins.args["approximation"] is not None:
                message = impl(ins.args["node"], *inbounds, marginals=marginals)
            else:
                message = impl(ins.args["node"], *inbounds)
            store.set(ins.dst, message)

        elif ins.op == OpCode.INVOKE_INNER:
            inner_data = dict(data)
            for terminal_id, slot in ins.args["terminals"]:
                inner_data[terminal_id] = store.get(slot)
            inner_store = self.execute(ins.args["program"], inner_data, marginals)
            store.set(ins.dst, inner_store.get(ins.args["result"]))

        elif ins.op == OpCode.COMBINE_MARGINAL:
            a, b = ins.args["srcs"]
            marginals[ins.args["variable"]] = self.product(store.get(a), store.get(b))

        else:
            raise ValueError(f"Unknown opcode: {ins.op}")
