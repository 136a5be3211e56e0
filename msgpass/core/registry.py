"""
msgpass/core/registry.py

ID registry for nodes, edges and variables.

A FactorGraph owns one registry per element kind, so a node and a
variable may share an id while ids of one kind stay unique and
readable (`gaussiannode_1`, `edge_3`, ...).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Set


@dataclass
class IDRegistry:
    """
    Registry of ids taken within one graph.

    Attributes:
        taken: Ids already in use
        counters: Prefix -> last number handed out for that prefix
    """
    taken: Set[str] = field(default_factory=set)
    counters: Dict[str, int] = field(default_factory=dict)

    def claim(self, id: str) -> str:
        """Reserve an explicit id; raises ValueError if it is already used."""
        if id in self.taken:
            raise ValueError(f"Duplicate id {id!r} in this FactorGraph")
        self.taken.add(id)
        return id

    def generate(self, prefix: str) -> str:
        """Reserve and return a fresh id of the form `<prefix>_<n>`."""
        base = prefix.lower()
        n = self.counters.get(base, 0)
        while True:
            n += 1
            candidate = f"{base}_{n}"
            if candidate not in self.taken:
                break
        self.counters[base] = n
        self.taken.add(candidate)
        return candidate

    def assign(self, id: Optional[str], prefix: str) -> str:
        """Claim `id` when given, otherwise generate one from `prefix`."""
        if id is None:
            return self.generate(prefix)
        return self.claim(id)

    def __contains__(self, id: str) -> bool:
        return id in self.taken
