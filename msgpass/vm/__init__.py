"""
VM module: Virtual machine for executing compiled message passing programs.
"""

from msgpass.vm.vm import MessageStore, RuleImplementation, VirtualMachine

__all__ = [
    "MessageStore",
    "RuleImplementation",
    "VirtualMachine",
]
