"""
Intcode VM
==========
A small fetch-decode-execute interpreter over sparse integer memory, with
three parameter modes, a relative base register and FIFO input/output
channels that let several machines be chained or wired into feedback
rings by the caller.

Architecture:
    ┌──────────┐    ┌──────────┐    ┌──────────┐    ┌──────────┐
    │  Memory  │───>│ Decoder  │───>│ Dispatch │───>│ Channels │
    │ (sparse) │    │ (modes)  │    │ (ALU,IP) │    │ (in/out) │
    └──────────┘    └──────────┘    └──────────┘    └──────────┘

    - mem/memory.py:      auto-extending memory, watchpoints, snapshots
    - cpu/decoder.py:     opcode table, parameter modes, instruction sets
    - cpu/regs.py:        instruction pointer and relative base
    - cpu/alu.py:         arithmetic / comparison helpers
    - periph/channels.py: FIFO input and output
    - emu.py:             state machine, dispatch loop, run contracts
"""

__version__ = "1.0.0"

from .errors import (
    VMFault, InvalidOpcode, InvalidMode, NegativeAddress,
    InvalidWriteTarget, InputExhausted, MachineFaulted,
)
from .cpu.decoder import INSTRUCTION_SETS, POSITION, IMMEDIATE, RELATIVE
from .mem.memory import Memory
from .periph.channels import Channel
from .emu import IntcodeVM, MachineState, RunResult, StopReason

__all__ = [
    'IntcodeVM', 'MachineState', 'RunResult', 'StopReason',
    'Memory', 'Channel', 'INSTRUCTION_SETS',
    'POSITION', 'IMMEDIATE', 'RELATIVE',
    'VMFault', 'InvalidOpcode', 'InvalidMode', 'NegativeAddress',
    'InvalidWriteTarget', 'InputExhausted', 'MachineFaulted',
]
