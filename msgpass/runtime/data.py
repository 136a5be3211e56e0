"""
msgpass/runtime/data.py

External data handling.

Placeholders are Constant nodes whose message is read from a data buffer
at run time instead of being embedded in the generated procedure.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from msgpass.distributions.dists import Distribution, as_message


def read_buffer(data: Mapping[str, Any], buffer: str, index: Optional[int] = None) -> Any:
    """
    Read a value from an external data buffer.

    Args:
        data: Buffer id -> value (scalar, array or sequence)
        buffer: Buffer id
        index: Optional element index; None reads the whole buffer

    Returns:
        The buffer value or its element
    """
    if buffer not in data:
        raise KeyError(f"Data buffer not found: {buffer!r}")
    value = data[buffer]
    if index is None:
        return value
    return value[index]


def observe(data: Mapping[str, Any], buffer: str, index: Optional[int] = None) -> Distribution:
    """Read a buffer value as a message; raw values become point masses."""
    return as_message(read_buffer(data, buffer, index))
