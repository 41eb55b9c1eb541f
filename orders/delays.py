from __future__ import annotations

import re
from datetime import timedelta

DEFAULT_DURATION = timedelta(hours=24)
REPORT_COOLDOWN = timedelta(hours=24)

_UNITS = (
    ("minute", "minutes"),
    ("hour", "hours"),
    ("day", "days"),
)


def parse_duration(text: str | None) -> timedelta:
    """
    Estimated delivery time from strings like "30 minutes", "24 hours" or
    "3-5 days". Ranges use the upper bound. Unknown units count as hours.
    """
    if not text or not str(text).strip():
        return DEFAULT_DURATION

    words = str(text).lower().split()
    unit = "hours"
    for prefix, name in _UNITS:
        if any(w.startswith(prefix) for w in words):
            unit = name
            break

    numbers = [int(n) for n in re.findall(r"\d+", str(text))]
    value = max(numbers) if numbers else 24
    return timedelta(**{unit: value})
