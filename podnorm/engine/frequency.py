"""
Update-frequency classification.

Counts item publish times inside nested windows ending at "now" and maps
the result onto the cadence classes used by the podcast index:

    1  more than one item in the last 5 days
    2  ... 10 days
    3  ... 20 days
    4  ... 40 days
    5  ... 100 days
    6  ... 200 days
    7  nothing in 100 days, or at most one item in every window up to 200 days
    8  nothing in 200 days
    9  nothing in 400 days
"""

import time
from typing import Iterable, Optional

SECONDS_PER_DAY = 86_400

# (window in days, class when more than one item falls inside it)
BUSY_WINDOWS = ((5, 1), (10, 2), (20, 3), (40, 4), (100, 5), (200, 6))


def count_within(pubdates: Iterable[int], now: int, days: int) -> int:
    """Items published at most ``days`` days before ``now`` (future dates count)."""
    cutoff = now - days * SECONDS_PER_DAY
    return sum(1 for ts in pubdates if ts >= cutoff)


def update_frequency(pubdates: Iterable[int], now: Optional[int] = None) -> int:
    if now is None:
        now = int(time.time())
    dates = [ts for ts in pubdates if ts > 0]

    within_400 = count_within(dates, now, 400)
    if within_400 == 0:
        return 9
    if count_within(dates, now, 200) == 0:
        return 8
    if count_within(dates, now, 100) == 0:
        return 7

    for days, cadence in BUSY_WINDOWS:
        if count_within(dates, now, days) > 1:
            return cadence

    if within_400 >= 1:
        return 7
    return 0
