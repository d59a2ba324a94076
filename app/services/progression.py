"""
Progressive daily target.

Starting from `start_count` on day 0, the target grows once per elapsed day:

  10 – 49    +2 per day
  50 – 99    +1 per day
  100 – 199  +1 every other day, starting on the first day spent in the band
  200        frozen
"""
from __future__ import annotations

MAX_TARGET = 200


def calculate_target(start_count: int, days_since: int) -> int:
    if days_since < 0:
        raise ValueError(f"days_since must be >= 0, got {days_since}")

    target = start_count
    band_day = 0  # days elapsed inside the 100-199 band
    for _ in range(days_since):
        if target >= MAX_TARGET:
            break
        if target < 50:
            target += 2
        elif target < 100:
            target += 1
        else:
            if band_day % 2 == 0:
                target += 1
            band_day += 1
    return min(target, MAX_TARGET)
