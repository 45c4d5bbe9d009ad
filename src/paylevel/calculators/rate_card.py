"""Casual pay rate card presets.

Rates are (weekday, weekend) pairs per role, level and age band. Applying
a card entry fills in the job's current tier, the next level's tier and,
where the card defines one, the hours target for promotion.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from decimal import Decimal

from paylevel.models import Job


class RateCardError(Exception):
    """Raised when a role, level or age band is not on the card."""

    def __init__(self, role: str, level: str, age: str):
        self.role = role
        self.level = level
        self.age = age
        super().__init__(f"No rate card entry for {role!r} / {level!r} / {age!r}")


AGE_BANDS: tuple[str, ...] = ("17yrs", "18yrs", "19yrs", "20yrs +")


def _band(*pairs: tuple[str, str]) -> dict[str, tuple[Decimal, Decimal]]:
    return {
        age: (Decimal(weekday), Decimal(weekend))
        for age, (weekday, weekend) in zip(AGE_BANDS, pairs)
    }


_LEVEL_2 = _band(("20.88", "21.69"), ("23.99", "24.92"), ("27.11", "28.17"), ("31.79", "33.04"))
_LEVEL_3 = _band(("22.30", "23.17"), ("25.64", "26.64"), ("28.98", "30.11"), ("33.98", "35.31"))
_LEVEL_3A = _band(("23.45", "24.36"), ("26.96", "28.02"), ("30.48", "31.67"), ("35.75", "37.16"))
_LEVEL_4 = _band(("24.39", "25.34"), ("28.04", "29.14"), ("31.70", "32.94"), ("37.19", "38.65"))
_LEVEL_4A = _band(("25.53", "26.52"), ("29.36", "30.51"), ("33.20", "34.50"), ("38.95", "40.48"))
_LEVEL_5 = _band(("26.88", "27.93"), ("30.93", "32.14"), ("34.96", "36.34"), ("41.03", "42.64"))

INSTRUCTOR_ROLE = "Instructor / Coach"

# role -> ordered level -> age band -> (weekday, weekend)
PAY_RATES: dict[str, dict[str, dict[str, tuple[Decimal, Decimal]]]] = {
    INSTRUCTOR_ROLE: {
        "Level 2": _LEVEL_2,
        "Level 3": _LEVEL_3,
        "Level 3A": _LEVEL_3A,
        "Level 4": _LEVEL_4,
        "Level 4A": _LEVEL_4A,
    },
    "Supervisor": {
        "Level 5": _LEVEL_5,
    },
    "Customer Service Officer": {
        "Level 3": _LEVEL_3,
        "Level 3A": _LEVEL_3A,
    },
    "Cleaner": {
        "Level 3": _LEVEL_3,
    },
}

# Promotion hours targets, instructors only
LEVEL_TARGETS: dict[str, Decimal] = {
    "Level 2": Decimal("350"),
    "Level 3": Decimal("700"),
    "Level 3A": Decimal("700"),
}


@dataclass(frozen=True)
class RateCardEntry:
    """Resolved card entry with the following level, if any."""

    role: str
    level: str
    age: str
    hourly_rate: Decimal
    weekend_hourly_rate: Decimal
    target_hours: Decimal | None = None
    next_level: str | None = None
    next_hourly_rate: Decimal | None = None
    next_weekend_hourly_rate: Decimal | None = None


def lookup(role: str, level: str, age: str) -> RateCardEntry:
    """Look up a card entry and the next level above it."""
    levels = PAY_RATES.get(role)
    if levels is None or level not in levels or age not in levels[level]:
        raise RateCardError(role, level, age)

    weekday, weekend = levels[level][age]
    entry = RateCardEntry(
        role=role,
        level=level,
        age=age,
        hourly_rate=weekday,
        weekend_hourly_rate=weekend,
        target_hours=LEVEL_TARGETS.get(level) if role == INSTRUCTOR_ROLE else None,
    )

    names = list(levels)
    index = names.index(level)
    if index < len(names) - 1:
        next_level = names[index + 1]
        next_rates = levels[next_level].get(age)
        if next_rates is not None:
            entry = dataclasses.replace(
                entry,
                next_level=next_level,
                next_hourly_rate=next_rates[0],
                next_weekend_hourly_rate=next_rates[1],
            )
    return entry


def apply_rate_card(job: Job, role: str, level: str, age: str) -> Job:
    """Apply a card entry to a job.

    The job is renamed ``"<role> - <level>"``. Target and next-tier values
    the card does not define are kept from the job.
    """
    entry = lookup(role, level, age)
    return dataclasses.replace(
        job,
        name=f"{role} - {level}",
        hourly_rate=entry.hourly_rate,
        weekend_hourly_rate=entry.weekend_hourly_rate,
        target_hours=entry.target_hours or job.target_hours,
        next_hourly_rate=entry.next_hourly_rate or job.next_hourly_rate,
        next_weekend_hourly_rate=entry.next_weekend_hourly_rate or job.next_weekend_hourly_rate,
    )
