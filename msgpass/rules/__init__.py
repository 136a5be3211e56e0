"""
Rules module: Default message update rules.
"""

from msgpass.rules.library import RuleLibrary, rule_id, pattern_tag
from msgpass.rules import addition, equality, fixed_gain, gaussian


def default_library() -> RuleLibrary:
    """A fresh library holding every bundled rule."""
    library = RuleLibrary()
    for module in (gaussian, fixed_gain, addition, equality):
        module.install(library)
    return library


__all__ = [
    "RuleLibrary",
    "rule_id",
    "pattern_tag",
    "default_library",
]
