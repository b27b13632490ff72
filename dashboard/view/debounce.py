import time
from typing import Callable, Optional


class Debouncer:
    """Holds the latest input value until no new input arrived for quiet_seconds.
    Why available: Search text is only applied to the table after typing pauses, so the pipeline is not recomputed per keystroke."""

    def __init__(self, quiet_seconds: float, clock: Callable[[], float] = time.monotonic):
        if quiet_seconds < 0:
            raise ValueError("quiet_seconds must be >= 0")
        self.quiet_seconds = quiet_seconds
        self._clock = clock
        self._value: Optional[str] = None
        self._last_input_at: Optional[float] = None

    @property
    def pending(self) -> bool:
        return self._last_input_at is not None

    def push(self, value: str) -> None:
        """Record new input and restart the quiet period."""
        self._value = value
        self._last_input_at = self._clock()

    def remaining(self) -> float:
        """Seconds until the pending value is released; 0 when nothing is pending or it is already due."""
        if self._last_input_at is None:
            return 0.0
        elapsed = self._clock() - self._last_input_at
        return max(0.0, self.quiet_seconds - elapsed)

    def poll(self) -> Optional[str]:
        """Return the pending value once the quiet period has elapsed, else None. A released value is returned only once."""
        if self._last_input_at is None or self.remaining() > 0:
            return None
        return self.flush()

    def flush(self) -> Optional[str]:
        """Release the pending value immediately (None when nothing is pending)."""
        if self._last_input_at is None:
            return None
        value = self._value
        self._value = None
        self._last_input_at = None
        return value

    def cancel(self) -> None:
        self._value = None
        self._last_input_at = None
