import threading


class IdCounter:
    """Monotonically increasing integer IDs.

    Each operation holds the counter's own lock, so one instance can be shared
    between trees (and threads) without extra coordination.
    """

    def __init__(self, start: int = 0):
        self._start = start
        self._next = start
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            value = self._next
            self._next += 1
            return value

    def decrement(self) -> int:
        """Gives back the most recently issued ID and returns the new next value."""
        with self._lock:
            if self._next > self._start:
                self._next -= 1
            return self._next

    def advance_past(self, value: int) -> None:
        with self._lock:
            if value >= self._next:
                self._next = value + 1

    def peek(self) -> int:
        with self._lock:
            return self._next

    def reset(self) -> None:
        with self._lock:
            self._next = self._start


# Branch IDs are drawn from here unless a tree is given its own counter.
# Every CommitTree built without one shares this numbering space.
GLOBAL_BRANCH_COUNTER = IdCounter()
