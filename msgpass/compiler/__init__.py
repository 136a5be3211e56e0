"""
Compiler module: Rule registry, unification, resolution and emission.
"""

from msgpass.compiler.unify import Bindings, match, unify_inbounds, substitute
from msgpass.compiler.registry import Rule, Candidate, RuleRegistry
from msgpass.compiler.resolve import OutboundTypeResolver, resolve_schedule
from msgpass.compiler.emit import emit_message_passing_program
from msgpass.compiler.render import render_source

__all__ = [
    # unify
    "Bindings",
    "match",
    "unify_inbounds",
    "substitute",
    # registry
    "Rule",
    "Candidate",
    "RuleRegistry",
    # resolve
    "OutboundTypeResolver",
    "resolve_schedule",
    # emit
    "emit_message_passing_program",
    "render_source",
]
