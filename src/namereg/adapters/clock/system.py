"""System clock adapter - Implements Clock protocol with wall-clock time."""

import time


class SystemClock:
    """Seconds since the epoch from time.time()."""

    def now(self) -> float:
        return time.time()
