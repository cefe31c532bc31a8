"""
RequestFlag - read-and-clear request flag

Bounded Context: Cross-thread / signal-handler requests into the loop
Responsibilities:
  - Accept requests from signal handlers and foreign threads
  - Hand each request to the loop exactly once

Threading:
  - request() only calls queue.SimpleQueue.put, which is reentrant and
    therefore safe inside a Python signal handler (no lock is taken that
    the interrupted loop could be holding)
  - consume() drains pending requests: bursts coalesce into one
"""

import queue


class RequestFlag:
    """
    Boolean flag with atomic read-and-clear semantics.

    Example:
        force_snapshot = RequestFlag("force_snapshot")
        signal.signal(signal.SIGUSR1, lambda signum, frame: force_snapshot.request())

        # Loop thread, once per iteration
        force = force_snapshot.consume()
        accumulator.ingest(observation, now, force=force)
    """

    def __init__(self, name: str):
        self.name = name
        self._pending = queue.SimpleQueue()

    def request(self) -> None:
        """Raise the flag. Safe from signal handlers and any thread."""
        self._pending.put(True)

    def consume(self) -> bool:
        """
        Read and clear.

        Returns:
            True if at least one request arrived since the last consume()
        """
        seen = False
        while True:
            try:
                self._pending.get_nowait()
            except queue.Empty:
                return seen
            seen = True

    def is_set(self) -> bool:
        """Peek without clearing."""
        return not self._pending.empty()

    def __repr__(self) -> str:
        return f"RequestFlag({self.name!r}, set={self.is_set()})"
