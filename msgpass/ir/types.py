"""
msgpass/ir/types.py

Tagged type descriptors for messages and rule patterns.

Key types:
- MessageType: distribution family plus numeric parameters, e.g. MvGaussian{3}.
  A parameter may be a TypeParam, which turns the descriptor into a pattern.
- Wildcard (ANY): pattern matching every inbound, including an absent one
- Absent (ABSENT): pattern matching only "no inbound message yet"
- Approximation: outbound type of an approximate rule, tagged by method
- Category: EXACT (sum-product) or APPROXIMATE (variational / EP)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple, Union


class Category(Enum):
    """Rule category."""
    EXACT = "exact"
    APPROXIMATE = "approximate"


@dataclass(frozen=True)
class TypeParam:
    """A free numeric parameter of a type pattern, identified by name."""
    name: str

    def __str__(self) -> str:
        return self.name


ParamValue = Union[int, TypeParam]


@dataclass(frozen=True)
class MessageType:
    """
    Structural message type.

    Attributes:
        family: Distribution family name (e.g. "Gaussian", "MvPointMass")
        params: Numeric parameters in family-defined order (dimensions)
    """
    family: str
    params: Tuple[ParamValue, ...] = ()

    @property
    def is_concrete(self) -> bool:
        """True when no parameter is free."""
        return not any(isinstance(p, TypeParam) for p in self.params)

    def free_parameters(self) -> Tuple[TypeParam, ...]:
        """Free parameters in order of first occurrence."""
        seen: List[TypeParam] = []
        for p in self.params:
            if isinstance(p, TypeParam) and p not in seen:
                seen.append(p)
        return tuple(seen)

    def __str__(self) -> str:
        if not self.params:
            return self.family
        return f"{self.family}{{{', '.join(str(p) for p in self.params)}}}"


@dataclass(frozen=True)
class Wildcard:
    """Matches any inbound type, including an absent inbound."""

    def __str__(self) -> str:
        return "ANY"


@dataclass(frozen=True)
class Absent:
    """Matches only an inbound that carries no message."""

    def __str__(self) -> str:
        return "ABSENT"


ANY = Wildcard()
ABSENT = Absent()

Pattern = Union[MessageType, Wildcard, Absent]


@dataclass(frozen=True)
class Approximation:
    """Outbound type of an approximate rule: primary type plus method tag."""
    dist: MessageType
    method: str

    def __str__(self) -> str:
        return f"Approximation{{{self.dist}, {self.method}}}"


# Families used by the bundled distributions
POINT_MASS = MessageType("PointMass")
GAUSSIAN = MessageType("Gaussian")
GAMMA = MessageType("Gamma")
INVERSE_GAMMA = MessageType("InverseGamma")
STUDENTS_T = MessageType("StudentsT")


def mv_point_mass(dims: ParamValue) -> MessageType:
    """Vector-valued point mass of length `dims`."""
    return MessageType("MvPointMass", (dims,))


def matrix_point_mass(rows: ParamValue, cols: ParamValue) -> MessageType:
    """Matrix-valued point mass of shape rows x cols."""
    return MessageType("MatrixPointMass", (rows, cols))


def mv_gaussian(dims: ParamValue) -> MessageType:
    """Multivariate Gaussian of dimension `dims`."""
    return MessageType("MvGaussian", (dims,))


_TYPE_SYNTAX = re.compile(r"^\s*(\w+)\s*(?:\{([^}]*)\})?\s*$")


def parse_message_type(text: str) -> MessageType:
    """
    Parse the textual form produced by `str(MessageType)`.

    Numeric parameters become ints, names become TypeParams:
    "MvGaussian{3}" -> MessageType("MvGaussian", (3,)).

    Raises:
        ValueError: If the text is not a type descriptor
    """
    found = _TYPE_SYNTAX.match(text)
    if found is None:
        raise ValueError(f"Not a message type: {text!r}")
    family, body = found.groups()
    params: List[ParamValue] = []
    if body is not None and body.strip():
        for part in body.split(","):
            part = part.strip()
            params.append(int(part) if part.lstrip("-").isdigit() else TypeParam(part))
    return MessageType(family, tuple(params))
