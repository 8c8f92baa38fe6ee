"""
Intcode VM - ALU Operations

Pure functions used by the instruction handlers. Values are Python
ints, so there is no width masking and no flag register: comparisons
produce 1 or 0 directly and jumps test for non-zero.
"""


def add(a: int, b: int) -> int:
    return a + b


def mul(a: int, b: int) -> int:
    return a * b


def less_than(a: int, b: int) -> int:
    """1 if a < b else 0. Never returns anything other than 0 or 1."""
    return 1 if a < b else 0


def equals(a: int, b: int) -> int:
    """1 if a == b else 0."""
    return 1 if a == b else 0


def is_true(value: int) -> bool:
    """Branch test used by JNZ/JZ: any non-zero value is true."""
    return value != 0
