"""Sleep debt and bedtime consistency over recent nights.

Both feed the recovery sleep component and are stored on the daily record.
"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from strainscore.analytics.stats import standard_deviation
from strainscore.config import SLEEP_TARGET_HOURS

MIN_NIGHTS_FOR_CONSISTENCY = 3

# Bedtimes before noon are treated as "after midnight" of the previous evening
BEDTIME_WRAP_HOUR = 12

# A 2-hour bedtime std-dev scores 0
CONSISTENCY_STD_CEILING = 2.0


def sleep_debt(
    recent_hours: Sequence[float | None],
    last_night: float | None = None,
    target_hours: float = SLEEP_TARGET_HOURS,
) -> float:
    """Accumulated shortfall below *target_hours*, in hours.

    Surplus nights do not pay down earlier debt; missing nights are skipped.
    """
    nights = list(recent_hours)
    if last_night is not None:
        nights.append(last_night)
    return sum(max(0.0, target_hours - h) for h in nights if h is not None)


def bedtime_hour(ts: datetime) -> float:
    """Clock time as fractional hours, wrapped so 00:30 reads as 24.5."""
    hour = ts.hour + ts.minute / 60.0 + ts.second / 3600.0
    if hour < BEDTIME_WRAP_HOUR:
        hour += 24.0
    return hour


def sleep_consistency(bedtimes: Sequence[datetime]) -> float | None:
    """0-100 score from the spread of recent bedtimes.

    ``(1 - std_hours / 2) * 100`` clamped to [0, 100].  Returns None with
    fewer than three bedtimes.
    """
    if len(bedtimes) < MIN_NIGHTS_FOR_CONSISTENCY:
        return None
    spread = standard_deviation([bedtime_hour(t) for t in bedtimes])
    score = (1.0 - spread / CONSISTENCY_STD_CEILING) * 100.0
    return max(0.0, min(100.0, score))
