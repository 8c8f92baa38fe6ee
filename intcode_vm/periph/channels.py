"""
Intcode VM - I/O Channels

The machine talks to the outside world only through two unbounded FIFO
channels of integers:

  input   filled by the caller (push), drained by the IN instruction
  output  filled by the OUT instruction, drained by the caller (pop)

Each VM owns its own pair. Pipelines and feedback rings are built by
callers moving values from one VM's output channel into another VM's
input channel between run() calls; channels are never shared.
"""

from collections import deque
from typing import Iterable, List, Optional


class Channel:
    """Unbounded FIFO of integers.

    Also keeps the most recently pushed value so a caller can read the
    final output of a run even after it has been popped.
    """

    def __init__(self, name: str, values: Iterable[int] = ()):
        self.name = name
        self._queue: deque = deque()
        self.last: Optional[int] = None
        self.total = 0  # values ever pushed
        self.extend(values)

    def push(self, value: int):
        """Append a value at the back."""
        self._queue.append(value)
        self.last = value
        self.total += 1

    def extend(self, values: Iterable[int]):
        for value in values:
            self.push(value)

    def pop(self) -> Optional[int]:
        """Remove and return the oldest value, or None when empty."""
        if self._queue:
            return self._queue.popleft()
        return None

    def peek(self) -> Optional[int]:
        if self._queue:
            return self._queue[0]
        return None

    def drain(self) -> List[int]:
        """Remove and return every queued value, oldest first."""
        values = list(self._queue)
        self._queue.clear()
        return values

    def __len__(self) -> int:
        return len(self._queue)

    def __bool__(self) -> bool:
        return bool(self._queue)

    def __repr__(self) -> str:
        return f"Channel({self.name!r}, {list(self._queue)!r})"

    def reset(self):
        self._queue.clear()
        self.last = None
        self.total = 0
