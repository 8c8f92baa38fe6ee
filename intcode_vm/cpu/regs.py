"""
Intcode VM - Register Set

The machine has only two architectural registers:
  IP     instruction pointer (address of the next instruction word)
  RB     relative base (offset added to relative-mode parameters)

plus a step counter that is not visible to programs.

IP is changed only by instruction execution (fixed-width advance or a
jump); RB only by the Adjust Relative Base instruction.
"""


class Registers:
    """Intcode register set."""

    __slots__ = ('IP', 'RB', 'steps')

    def __init__(self):
        self.IP: int = 0     # Instruction pointer
        self.RB: int = 0     # Relative base
        self.steps: int = 0  # Instructions executed

    def advance(self, width: int):
        """Move IP past an instruction of the given width."""
        self.IP += width

    def jump(self, target: int):
        """Set IP to target. A negative target faults on the next decode."""
        self.IP = target

    def adjust_base(self, delta: int):
        self.RB += delta

    # --- Display ---

    def display(self) -> str:
        """Format register state for trace output."""
        return f"IP={self.IP} RB={self.RB} steps={self.steps}"
