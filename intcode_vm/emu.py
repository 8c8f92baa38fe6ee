"""
Intcode VM - Main Machine Class

Integrates:
  - Registers (regs.py)        instruction pointer + relative base
  - Memory (memory.py)         sparse auto-extending integer memory
  - Decoder (decoder.py)       opcode / mode split, instruction sets
  - ALU (alu.py)               arithmetic and comparison helpers
  - Channels (channels.py)     FIFO input and output

Execution model (one step):
  1. Fetch the word at IP
  2. Decode opcode + parameter modes (faults on bad opcode/mode)
  3. Resolve parameters to values or write addresses
  4. Execute the handler: update memory, channels, IP, RB
  5. Report a stop reason if the instruction suspends or halts

Machine states:
  READY             constructed, never run
  RUNNING           inside the dispatch loop
  SUSPENDED_INPUT   IN found the input channel empty (IP not advanced)
  SUSPENDED_OUTPUT  OUT produced a value and control went back to the caller
  HALTED            opcode 99 reached; terminal
  FAULTED           a VMFault was raised; terminal, refuses to resume

Run contracts, both served by the same dispatch loop:
  batch        pause_on_output=False: OUT keeps running, outputs queue up
  interactive  pause_on_output=True:  run() returns after every OUT

Usage:
    vm = IntcodeVM([3, 0, 4, 0, 99], inputs=[7])
    result = vm.run()           # RunResult(HALTED, 7)
    vm.pop_output()             # 7
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from .cpu import alu
from .cpu.decoder import (
    ADD, MUL, IN, OUT, JNZ, JZ, LT, EQ, ARB, HALT,
    IMMEDIATE, RELATIVE,
    Instruction, decode, get_instruction_set,
)
from .cpu.regs import Registers
from .errors import (
    InputExhausted, InvalidWriteTarget, MachineFaulted, NegativeAddress, VMFault,
)
from .mem.memory import Memory
from .periph.channels import Channel

log = logging.getLogger('intcode_vm.emu')


class MachineState(Enum):
    READY = 'READY'
    RUNNING = 'RUNNING'
    SUSPENDED_INPUT = 'SUSPENDED_INPUT'
    SUSPENDED_OUTPUT = 'SUSPENDED_OUTPUT'
    HALTED = 'HALTED'
    FAULTED = 'FAULTED'


class StopReason(Enum):
    NEEDS_INPUT = 'NEEDS_INPUT'
    OUTPUT = 'OUTPUT'
    HALTED = 'HALTED'


@dataclass(frozen=True)
class RunResult:
    """Outcome of one run() call.

    value is the produced output for OUTPUT, and for HALTED the last
    output produced during the same call (None if there was none).
    """
    reason: StopReason
    value: Optional[int] = None

    @property
    def halted(self) -> bool:
        return self.reason is StopReason.HALTED

    @property
    def needs_input(self) -> bool:
        return self.reason is StopReason.NEEDS_INPUT

    @property
    def produced_output(self) -> bool:
        return self.reason is StopReason.OUTPUT


class IntcodeVM:
    """Intcode virtual machine.

    Each instance owns a private copy of the program image, its own
    registers and its own input/output channels. Instances never share
    state; callers compose them by moving values between channels.
    """

    DEFAULT_INSTRUCTION_SET = 'full'

    def __init__(self, program: Iterable[int], inputs: Iterable[int] = (), *,
                 pause_on_output: bool = False,
                 instruction_set: Optional[str] = None):
        name = instruction_set or self.DEFAULT_INSTRUCTION_SET
        profile = get_instruction_set(name)
        self.instruction_set = name
        self._opcodes = profile['opcodes']
        self._modes = profile['modes']

        # Core components
        self.regs = Registers()
        self.mem = Memory(program)
        self.input = Channel('input', inputs)
        self.output = Channel('output')

        self.pause_on_output = pause_on_output
        self.state = MachineState.READY
        self.fault: Optional[VMFault] = None

        # Trace output
        self._trace = False
        self._trace_output: List[str] = []

        # Instruction dispatch table (built in _build_dispatch)
        self._dispatch = self._build_dispatch()

    def __repr__(self) -> str:
        return (f"<IntcodeVM {self.state.value} {self.regs.display()} "
                f"in={len(self.input)} out={len(self.output)}>")

    # ══════════════════════════════════════════════
    # Channels
    # ══════════════════════════════════════════════

    def push_input(self, value: int):
        """Append one value to the input channel. Legal in any state."""
        self.input.push(value)

    def push_inputs(self, values: Iterable[int]):
        self.input.extend(values)

    def pop_output(self) -> Optional[int]:
        """Remove and return the oldest output, or None if there is none."""
        return self.output.pop()

    def drain_output(self) -> List[int]:
        return self.output.drain()

    # ══════════════════════════════════════════════
    # Status
    # ══════════════════════════════════════════════

    def is_halted(self) -> bool:
        return self.state is MachineState.HALTED

    def is_waiting_for_input(self) -> bool:
        return self.state is MachineState.SUSPENDED_INPUT

    def is_faulted(self) -> bool:
        return self.state is MachineState.FAULTED

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def step(self) -> Optional[StopReason]:
        """Execute one instruction. Returns a StopReason if it suspends
        or halts the machine, else None.

        Faults are recorded (state FAULTED, self.fault) and re-raised.
        """
        if self.state is MachineState.FAULTED:
            raise MachineFaulted(self.fault)
        if self.state is MachineState.HALTED:
            return StopReason.HALTED

        ip = self.regs.IP
        try:
            instr = decode(self.mem.read(ip), self._opcodes, self._modes)
            if self._trace:
                self._trace_output.append(f"{ip:>6}: {str(instr):12s} {self.regs.display()}")
            reason = self._dispatch[instr.opcode](instr)
        except VMFault as e:
            if e.pointer is None:
                e.pointer = ip
            self.state = MachineState.FAULTED
            self.fault = e
            if self._trace:
                self._trace_output.append(f"  ERROR: {e}")
            log.error(f"Fault at ip={ip}: {e.message}")
            raise

        if reason is StopReason.NEEDS_INPUT:
            self.state = MachineState.SUSPENDED_INPUT
            return reason

        self.regs.steps += 1
        if reason is StopReason.HALTED:
            self.state = MachineState.HALTED
        else:
            self.state = MachineState.RUNNING
        return reason

    def run(self, pause_on_output: Optional[bool] = None) -> RunResult:
        """Resume the dispatch loop until input is needed, an output is
        produced (interactive contract only), or the machine halts.

        pause_on_output overrides the contract chosen at construction
        for this call only. Calling run() on a halted machine returns
        HALTED again without executing anything.
        """
        if self.state is MachineState.FAULTED:
            raise MachineFaulted(self.fault)
        if self.state is MachineState.HALTED:
            return RunResult(StopReason.HALTED)

        pause = self.pause_on_output if pause_on_output is None else pause_on_output
        log.debug(f"Resuming from {self.state.value} at ip={self.regs.IP}")
        self.state = MachineState.RUNNING

        last_output = None
        while True:
            reason = self.step()
            if reason is None:
                continue

            if reason is StopReason.OUTPUT:
                last_output = self.output.last
                if pause:
                    self.state = MachineState.SUSPENDED_OUTPUT
                    return RunResult(StopReason.OUTPUT, last_output)
                continue

            if reason is StopReason.NEEDS_INPUT:
                log.debug(f"Suspended for input at ip={self.regs.IP}")
                return RunResult(StopReason.NEEDS_INPUT)

            log.debug(f"Halted at ip={self.regs.IP} after {self.regs.steps} steps")
            return RunResult(StopReason.HALTED, last_output)

    def run_until_halt(self) -> List[int]:
        """Batch contract: run to completion and return every queued output.

        Raises InputExhausted if the program asks for input that was not
        supplied up front.
        """
        result = self.run(pause_on_output=False)
        if result.needs_input:
            raise InputExhausted(self.regs.IP)
        return self.drain_output()

    # ══════════════════════════════════════════════
    # Parameter resolution
    # ══════════════════════════════════════════════

    def _param(self, n: int) -> int:
        """Raw parameter n (1-based) of the instruction at IP."""
        return self.mem.read(self.regs.IP + n)

    def resolve_operand(self, raw: int, mode: int) -> int:
        """Turn a raw parameter into the value it denotes."""
        if mode == IMMEDIATE:
            return raw
        if mode == RELATIVE:
            return self.mem.read(self.regs.RB + raw)
        return self.mem.read(raw)

    def resolve_target(self, raw: int, mode: int) -> int:
        """Turn a raw parameter into the address it designates for a write."""
        if mode == IMMEDIATE:
            raise InvalidWriteTarget(raw)
        addr = self.regs.RB + raw if mode == RELATIVE else raw
        if addr < 0:
            raise NegativeAddress(addr)
        return addr

    def _value(self, instr: Instruction, n: int) -> int:
        return self.resolve_operand(self._param(n), instr.modes[n - 1])

    def _target(self, instr: Instruction, n: int) -> int:
        return self.resolve_target(self._param(n), instr.modes[n - 1])

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════
    # Handler signature: handler(instr) -> Optional[StopReason]

    def _build_dispatch(self) -> dict:
        """Build opcode -> handler dispatch table."""
        return {
            ADD:  self._op_add,
            MUL:  self._op_mul,
            IN:   self._op_in,
            OUT:  self._op_out,
            JNZ:  self._op_jnz,
            JZ:   self._op_jz,
            LT:   self._op_lt,
            EQ:   self._op_eq,
            ARB:  self._op_arb,
            HALT: self._op_halt,
        }

    def _binary(self, instr: Instruction, fn):
        left = self._value(instr, 1)
        right = self._value(instr, 2)
        self.mem.write(self._target(instr, 3), fn(left, right))
        self.regs.advance(instr.width)

    def _op_add(self, instr):
        self._binary(instr, alu.add)

    def _op_mul(self, instr):
        self._binary(instr, alu.mul)

    def _op_lt(self, instr):
        self._binary(instr, alu.less_than)

    def _op_eq(self, instr):
        self._binary(instr, alu.equals)

    def _op_in(self, instr):
        """Read input. With an empty channel nothing changes and the same
        instruction runs again on the next call."""
        if not self.input:
            return StopReason.NEEDS_INPUT
        addr = self._target(instr, 1)
        self.mem.write(addr, self.input.pop())
        self.regs.advance(instr.width)

    def _op_out(self, instr):
        self.output.push(self._value(instr, 1))
        self.regs.advance(instr.width)
        return StopReason.OUTPUT

    def _op_jnz(self, instr):
        test = self._value(instr, 1)
        target = self._value(instr, 2)
        if alu.is_true(test):
            self.regs.jump(target)
        else:
            self.regs.advance(instr.width)

    def _op_jz(self, instr):
        test = self._value(instr, 1)
        target = self._value(instr, 2)
        if not alu.is_true(test):
            self.regs.jump(target)
        else:
            self.regs.advance(instr.width)

    def _op_arb(self, instr):
        self.regs.adjust_base(self._value(instr, 1))
        self.regs.advance(instr.width)

    def _op_halt(self, instr):
        return StopReason.HALTED

    # ══════════════════════════════════════════════
    # Trace
    # ══════════════════════════════════════════════

    def enable_trace(self, enable: bool = True):
        """Enable per-instruction trace recording."""
        self._trace = enable

    def get_trace(self) -> str:
        return '\n'.join(self._trace_output)

    def clear_trace(self):
        self._trace_output.clear()
