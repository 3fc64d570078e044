"""Simulation clock."""


class ClockOrderError(RuntimeError):
    """Raised when simulation time would move backwards."""


class Clock:
    """Current simulation time in minutes.

    Only the engine's A-phase advances the clock. Each simulation run owns
    its own clock, carried in the simulation context.
    """

    def __init__(self) -> None:
        self._now = 0.0

    def now(self) -> float:
        """Current simulation time."""
        return self._now

    def advance_to(self, t: float) -> None:
        """Move the clock forward to time t.

        Args:
            t: Target time, must not be earlier than now().

        Raises:
            ClockOrderError: If t is earlier than the current time.
        """
        if t < self._now:
            raise ClockOrderError(
                f"Cannot move clock back from {self._now} to {t}"
            )
        self._now = float(t)

    def reset(self) -> None:
        """Set time back to zero (engine initialization only)."""
        self._now = 0.0

    def __repr__(self) -> str:
        return f"Clock(now={self._now})"
