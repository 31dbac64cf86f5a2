"""
Simulation clock for the cybersim warfare engine.

This clock exists to decouple the simulation from wall-clock time. Ticks
advance deterministically, regardless of how fast or slow the host
system happens to be, or how often a renderer asks for frames.

The clock does not sleep. It does not wait. It merely counts ticks and
adds up the simulated milliseconds they covered.
"""


class SimulationClock:
    """
    A fixed-step simulated clock.

    Each tick lasts ``tick_period_ms`` simulated milliseconds. The period
    may change between ticks; time already elapsed never changes with it.
    """

    def __init__(self, tick_period_ms: int | float = 800) -> None:
        if tick_period_ms <= 0:
            raise ValueError(f"Tick period must be positive, got {tick_period_ms}")

        self._tick_period_ms: float = float(tick_period_ms)
        self._ticks: int = 0
        self._elapsed_ms: float = 0.0

    @property
    def tick_period_ms(self) -> float:
        return self._tick_period_ms

    @property
    def tick_seconds(self) -> float:
        """
        Length of one tick in simulated seconds.
        """
        return self._tick_period_ms / 1000.0

    def tick_count(self) -> int:
        """
        Return the number of ticks elapsed since the last reset.
        """
        return self._ticks

    def now_ms(self) -> float:
        """
        Return the current simulated time in milliseconds.
        """
        return self._elapsed_ms

    def advance(self) -> int:
        """
        Advance the clock by exactly one tick and return the new tick count.
        """
        self._ticks += 1
        self._elapsed_ms += self._tick_period_ms
        return self._ticks

    def set_tick_period(self, tick_period_ms: int | float) -> None:
        """
        Change the length of every following tick.
        """
        if tick_period_ms <= 0:
            raise ValueError(f"Tick period must be positive, got {tick_period_ms}")
        self._tick_period_ms = float(tick_period_ms)

    def reset(self) -> None:
        """
        Reset the clock to tick zero.
        """
        self._ticks = 0
        self._elapsed_ms = 0.0
