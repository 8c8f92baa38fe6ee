"""
Intcode VM - Instruction Decoder / Opcode Table

An instruction word packs the opcode into its two low decimal digits
and one parameter mode per decimal digit above them:

    word = ABCDE
      DE  opcode            (word % 100)
      C   mode of param 1   (hundreds)
      B   mode of param 2   (thousands)
      A   mode of param 3   (ten-thousands)

Missing digits are 0 (position mode). Exactly three modes are decoded
for every instruction, whatever its parameter count, and each of them
must be allowed by the active instruction set. Digits above the
ten-thousands place are ignored.

Parameter modes:
  POSITION   parameter is an address
  IMMEDIATE  parameter is the value itself (never a write target)
  RELATIVE   parameter is an offset from the relative base

Instruction sets reproduce the three historical variants of the
machine so older programs can be run with exactly the features they
were written against.
"""

from typing import Dict, FrozenSet, NamedTuple, Tuple

from ..errors import InvalidMode, InvalidOpcode

# ──────────────────────────────────────────────
# Parameter modes
# ──────────────────────────────────────────────

POSITION  = 0
IMMEDIATE = 1
RELATIVE  = 2

MODE_NAMES = {
    POSITION:  'POSITION',
    IMMEDIATE: 'IMMEDIATE',
    RELATIVE:  'RELATIVE',
}

PARAM_COUNT = 3  # modes decoded per instruction word


# ──────────────────────────────────────────────
# Opcode table
# ──────────────────────────────────────────────
# Format: opcode -> (mnemonic, parameter_count)
# Instruction width is always 1 + parameter_count.

ADD  = 1
MUL  = 2
IN   = 3
OUT  = 4
JNZ  = 5   # jump-if-true
JZ   = 6   # jump-if-false
LT   = 7
EQ   = 8
ARB  = 9   # adjust relative base
HALT = 99

OPCODES: Dict[int, Tuple[str, int]] = {
    ADD:  ('ADD',  3),
    MUL:  ('MUL',  3),
    IN:   ('IN',   1),
    OUT:  ('OUT',  1),
    JNZ:  ('JNZ',  2),
    JZ:   ('JZ',   2),
    LT:   ('LT',   3),
    EQ:   ('EQ',   3),
    ARB:  ('ARB',  1),
    HALT: ('HALT', 0),
}


# ──────────────────────────────────────────────
# Instruction set profiles
# ──────────────────────────────────────────────

INSTRUCTION_SETS = {
    "arithmetic": {
        "opcodes": frozenset({ADD, MUL, HALT}),
        "modes": frozenset({POSITION}),
        "description": "Add / multiply / halt, position mode only",
    },
    "branching": {
        "opcodes": frozenset({ADD, MUL, IN, OUT, JNZ, JZ, LT, EQ, HALT}),
        "modes": frozenset({POSITION, IMMEDIATE}),
        "description": "I/O, comparisons and conditional jumps, no relative base",
    },
    "full": {
        "opcodes": frozenset(OPCODES),
        "modes": frozenset(MODE_NAMES),
        "description": "Complete machine with relative mode and sparse memory",
    },
}


def get_instruction_set(name: str) -> dict:
    """Look up an instruction set profile by name."""
    try:
        return INSTRUCTION_SETS[name]
    except KeyError:
        known = ', '.join(sorted(INSTRUCTION_SETS))
        raise ValueError(f"Unknown instruction set '{name}' (expected one of: {known})") from None


class Instruction(NamedTuple):
    """A decoded instruction word."""
    opcode: int
    mnemonic: str
    param_count: int
    modes: Tuple[int, int, int]

    @property
    def width(self) -> int:
        return 1 + self.param_count

    def __str__(self) -> str:
        if not self.param_count:
            return self.mnemonic
        modes = ','.join(MODE_NAMES[m][0] for m in self.modes[:self.param_count])
        return f"{self.mnemonic}[{modes}]"


def split_word(word: int) -> Tuple[int, Tuple[int, int, int]]:
    """Split a non-negative word into (opcode, (mode1, mode2, mode3)).

    Mode digits are returned as-is, without validation.
    """
    return word % 100, (word // 100 % 10, word // 1000 % 10, word // 10000 % 10)


def decode(word: int, opcodes: FrozenSet[int] = frozenset(OPCODES),
           modes: FrozenSet[int] = frozenset(MODE_NAMES)) -> Instruction:
    """Decode an instruction word against an allowed opcode/mode set.

    Modes are validated before the opcode. A negative word never
    decodes to a valid opcode.
    """
    if word < 0:
        raise InvalidOpcode(word)

    opcode, digits = split_word(word)
    for digit in digits:
        if digit not in modes:
            raise InvalidMode(digit, word)

    if opcode not in opcodes or opcode not in OPCODES:
        raise InvalidOpcode(opcode)

    mnemonic, param_count = OPCODES[opcode]
    return Instruction(opcode, mnemonic, param_count, digits)
