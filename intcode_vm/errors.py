"""
Intcode VM - Fault Types

Every fault is raised synchronously while decoding or executing the
instruction at the current pointer, and is fatal to that instruction.
A VM that raised a fault is left in the FAULTED state and refuses to
run again; memory written before the fault is not rolled back.

Hierarchy:
  VMFault
    InvalidOpcode       opcode not in the active instruction set
    InvalidMode         mode digit outside the allowed modes
    NegativeAddress     resolved read/write address (or pointer) < 0
    InvalidWriteTarget  immediate-mode operand used as destination
    InputExhausted      batch run needed input that was never supplied
    MachineFaulted      attempt to resume a faulted machine
"""

from typing import Optional

__all__ = [
    'VMFault', 'InvalidOpcode', 'InvalidMode', 'NegativeAddress',
    'InvalidWriteTarget', 'InputExhausted', 'MachineFaulted',
]


class VMFault(Exception):
    """Base class for all machine-semantics violations.

    `pointer` is the instruction pointer of the faulting instruction.
    Lower layers (memory, decoder) may not know it; the VM fills it in
    before re-raising.
    """
    def __init__(self, message: str, pointer: Optional[int] = None):
        self.message = message
        self.pointer = pointer
        super().__init__(message)

    def __str__(self) -> str:
        if self.pointer is None:
            return self.message
        return f"ip={self.pointer}: {self.message}"


class InvalidOpcode(VMFault):
    """Raised when the decoded opcode is not supported."""
    def __init__(self, opcode: int, pointer: Optional[int] = None):
        self.opcode = opcode
        super().__init__(f"invalid opcode {opcode}", pointer)


class InvalidMode(VMFault):
    """Raised when a parameter mode digit is not an allowed mode."""
    def __init__(self, digit: int, word: int, pointer: Optional[int] = None):
        self.digit = digit
        self.word = word
        super().__init__(f"invalid parameter mode {digit} in instruction {word}", pointer)


class NegativeAddress(VMFault):
    """Raised when a read, write or decode resolves to an address below zero."""
    def __init__(self, address: int, pointer: Optional[int] = None):
        self.address = address
        super().__init__(f"negative address {address}", pointer)


class InvalidWriteTarget(VMFault):
    """Raised when an immediate-mode parameter is used as a destination."""
    def __init__(self, raw: int, pointer: Optional[int] = None):
        self.raw = raw
        super().__init__(f"immediate parameter {raw} cannot be a write target", pointer)


class InputExhausted(VMFault):
    """Raised by batch runs when Read Input finds the queue empty."""
    def __init__(self, pointer: Optional[int] = None):
        super().__init__("input required but none was supplied", pointer)


class MachineFaulted(VMFault):
    """Raised when run() or step() is called on a machine that already faulted."""
    def __init__(self, cause: VMFault):
        self.cause = cause
        super().__init__(f"machine faulted earlier and cannot resume ({cause})")
