"""
Simulation clock
"""


class Clock:
    """Monotonic integer tick counter owned by one engine run."""

    def __init__(self):
        self._tick = 0

    def advance(self) -> int:
        """Move to the next tick and return the tick that just ended."""
        tick = self._tick
        self._tick += 1
        return tick

    def current(self) -> int:
        return self._tick

    def reset(self):
        self._tick = 0

    def __repr__(self):
        return f"Clock(t={self._tick})"
