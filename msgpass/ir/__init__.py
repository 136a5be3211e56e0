"""
IR module: Type descriptors and the instruction set.
"""

from msgpass.ir.types import (
    Category,
    TypeParam,
    MessageType,
    Wildcard,
    Absent,
    ANY,
    ABSENT,
    Pattern,
    Approximation,
    POINT_MASS,
    GAUSSIAN,
    GAMMA,
    INVERSE_GAMMA,
    STUDENTS_T,
    mv_point_mass,
    matrix_point_mass,
    mv_gaussian,
    parse_message_type,
)
from msgpass.ir.ops import (
    OpCode,
    Instruction,
    Program,
    SlotID,
)

__all__ = [
    "Category",
    "TypeParam",
    "MessageType",
    "Wildcard",
    "Absent",
    "ANY",
    "ABSENT",
    "Pattern",
    "Approximation",
    "POINT_MASS",
    "GAUSSIAN",
    "GAMMA",
    "INVERSE_GAMMA",
    "STUDENTS_T",
    "mv_point_mass",
    "matrix_point_mass",
    "mv_gaussian",
    "parse_message_type",
    "OpCode",
    "Instruction",
    "Program",
    "SlotID",
]
