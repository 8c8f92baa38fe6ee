"""
Intcode VM - Sparse Auto-Extending Memory

Memory is a mapping from non-negative address to signed integer. Only
cells that were loaded or written are stored; every other address reads
as zero, so programs may use addresses far beyond their own image
without any pre-allocation.

Addresses below zero are never wrapped: both read() and write() raise
NegativeAddress.

Debugging helpers follow the emulator layout:
  - write watchpoints       (callback on every write to an address)
  - snapshots + diff        (compare state before/after a run)
  - dump                    (text listing of an address range)
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional

from ..errors import NegativeAddress

log = logging.getLogger('intcode_vm.mem')


class Memory:
    """Sparse integer memory owned by exactly one VM.

    Values are plain Python ints. Reading an address that was never
    written returns 0 and does not create a cell.
    """

    def __init__(self, image: Optional[Iterable[int]] = None):
        self._cells: Dict[int, int] = {}
        self._extent = 0  # one past the highest address ever stored

        # Watchpoints: addr -> [callback(addr, old_val, new_val)]
        self._watchpoints: Dict[int, List[Callable]] = {}

        if image is not None:
            self.load_program(image)

    # --- Core read/write ---

    def read(self, addr: int) -> int:
        """Return the value at addr, or 0 if it was never written."""
        if addr < 0:
            raise NegativeAddress(addr)
        return self._cells.get(addr, 0)

    def write(self, addr: int, value: int):
        """Store value at addr, extending the address space as needed.

        Watchpoint callbacks fire before the store with the old value.
        """
        if addr < 0:
            raise NegativeAddress(addr)

        if addr in self._watchpoints:
            old = self._cells.get(addr, 0)
            for cb in self._watchpoints[addr]:
                cb(addr, old, value)

        self._cells[addr] = value
        if addr >= self._extent:
            self._extent = addr + 1

    def __getitem__(self, addr: int) -> int:
        return self.read(addr)

    def __setitem__(self, addr: int, value: int):
        self.write(addr, value)

    def __len__(self) -> int:
        return self._extent

    @property
    def extent(self) -> int:
        """One past the highest address ever loaded or written."""
        return self._extent

    # --- Bulk load ---

    def load_program(self, image: Iterable[int]):
        """Copy a program image into memory starting at address 0.

        The image is always copied value by value, so the caller's
        sequence is never aliased. Bypasses watchpoints.
        """
        count = 0
        for addr, value in enumerate(image):
            self._cells[addr] = int(value)
            count += 1
        if count > self._extent:
            self._extent = count
        log.debug(f"Loaded program image: {count} cells")

    def to_list(self) -> List[int]:
        """Dense copy of addresses 0..extent-1."""
        return [self._cells.get(addr, 0) for addr in range(self._extent)]

    # --- Watchpoints ---

    def add_watchpoint(self, addr: int, callback: Callable):
        """Call callback(addr, old_val, new_val) on every write to addr."""
        if addr < 0:
            raise NegativeAddress(addr)
        self._watchpoints.setdefault(addr, []).append(callback)

    def remove_watchpoint(self, addr: int, callback: Optional[Callable] = None):
        """Remove a watchpoint. If callback is None, removes all on that addr."""
        if addr in self._watchpoints:
            if callback is None:
                del self._watchpoints[addr]
            else:
                remaining = [cb for cb in self._watchpoints[addr] if cb != callback]
                if remaining:
                    self._watchpoints[addr] = remaining
                else:
                    del self._watchpoints[addr]

    # --- Snapshots ---

    def snapshot(self) -> Dict[int, int]:
        """Independent copy of every stored cell."""
        return dict(self._cells)

    @staticmethod
    def diff(snap_a: Dict[int, int], snap_b: Dict[int, int]) -> Dict[int, tuple]:
        """Compare two snapshots, return {addr: (old, new)} for changed cells.

        Cells missing from a snapshot count as 0, matching read().
        """
        changes = {}
        for addr in sorted(set(snap_a) | set(snap_b)):
            old = snap_a.get(addr, 0)
            new = snap_b.get(addr, 0)
            if old != new:
                changes[addr] = (old, new)
        return changes

    # --- Dump ---

    def dump(self, start: int = 0, length: Optional[int] = None, width: int = 8) -> str:
        """Produce a text listing of memory, `width` cells per line."""
        if start < 0:
            raise NegativeAddress(start)
        if length is None:
            length = max(self._extent - start, 0)
        lines = []
        for offset in range(0, length, width):
            addr = start + offset
            count = min(width, length - offset)
            cells = ' '.join(f'{self._cells.get(addr + i, 0):>8d}' for i in range(count))
            lines.append(f'{addr:06d}  {cells}')
        return '\n'.join(lines)
