"""
msgpass/ir/ops.py

Instruction set of a generated message passing procedure.

Operations:
- INJECT_DATA: Read a (possibly indexed) external data buffer into a message slot
- INJECT_CONSTANT: Store a literal message into a message slot
- APPLY_RULE: Call a rule implementation on inbound message slots
- INVOKE_INNER: Run the compiled inner program of a composite node
- COMBINE_MARGINAL: Multiply the two directional messages of an edge
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence

# Type aliases
SlotID = int


class OpCode(Enum):
    """Operation codes."""
    INJECT_DATA = 1        # Placeholder fed by external data
    INJECT_CONSTANT = 2    # Literal constant message
    APPLY_RULE = 3         # Message update rule
    INVOKE_INNER = 4       # Composite node inner schedule
    COMBINE_MARGINAL = 5   # Product of two messages into a marginal


@dataclass(frozen=True)
class Instruction:
    """
    A single instruction.

    Attributes:
        op: Operation code
        dst: Destination message slot (None for COMBINE_MARGINAL)
        args: Operation-specific arguments
    """
    op: OpCode
    dst: Optional[SlotID]
    args: Dict[str, Any]

    def __repr__(self) -> str:
        return f"Instruction({self.op.name}, dst={self.dst}, args={self.args})"


@dataclass(frozen=True)
class Program:
    """
    A sequence of instructions.

    Attributes:
        instructions: Ordered sequence of instructions to execute
        n_messages: Number of message slots (one per schedule entry)
    """
    instructions: Sequence[Instruction]
    n_messages: int

    def __len__(self) -> int:
        return len(self.instructions)

    def __iter__(self):
        return iter(self.instructions)

    def __getitem__(self, idx: int) -> Instruction:
        return self.instructions[idx]
