# Inactivity tracking: last-seen-non-empty timestamps per user.

from cartwatch.inactivity.tracker import InactivityTracker, wall_clock_ms

__all__ = [
    "InactivityTracker",
    "wall_clock_ms",
]
