from typing import Optional

# 2 ** 16 is already far past any sensible cap; bounding the exponent avoids float overflow
_MAX_EXPONENT = 16


def backoff_delay(base_seconds: float, failures: int, max_seconds: Optional[float] = None) -> float:
    """Delay before the next refresh: base_seconds while healthy, doubling per consecutive failure, capped at max_seconds.
    Why available: Used by RefreshScheduler so an unreachable backend is polled less often until it recovers."""
    if failures <= 0:
        return base_seconds
    delay = base_seconds * (2 ** min(failures, _MAX_EXPONENT))
    if max_seconds is not None:
        delay = min(delay, max(max_seconds, base_seconds))
    return delay
