"""
datekit.calendar
~~~~~~~~~~~~~~~~

Calendar-aware date arithmetic on the Gregorian calendar.  Instants are
absolute; CivilComponents are sparse calendar fields read off the wall clock
of an explicit zone.

Basic usage::

    from datekit.calendar import Calendar, Instant, months, add

    cal = Calendar("America/Los_Angeles")
    jan31 = cal.date(2024, 1, 31)
    cal.add(jan31, months(1))                 # → 2024-02-29 00:00 PST

The same operations exist as plain functions taking the zone explicitly::

    add(jan31, months(1), "America/Los_Angeles")

Public API
----------
Instant            Absolute point in time (microseconds since the epoch).
CivilComponents    Sparse calendar fields: deltas, match specs, decompositions.
Calendar           Zone-bound facade over the functions below.
CalendarError      Base exception for all calendar-related errors.
"""

from __future__ import annotations

from datekit.calendar._exceptions import (
    AmbiguousOrInvalidTime,
    CalendarError,
    InvalidComponents,
    NoMatchFound,
    SearchExhausted,
    UnknownTimeZone,
)
from datekit.calendar.arithmetic import (
    Ordering,
    add,
    compare,
    difference,
    from_components,
    subtract,
    to_components,
    truncate,
)
from datekit.calendar.calendar import Calendar
from datekit.calendar.components import (
    ALL_UNITS,
    CivilComponents,
    Field,
    Weekday,
    combine,
    days,
    hours,
    microseconds,
    minutes,
    months,
    negate,
    seconds,
    weeks,
    years,
)
from datekit.calendar.instant import Instant
from datekit.calendar.zones import (
    Disambiguation,
    fixed_offset,
    is_dst,
    resolve_zone,
    utc_offset,
)

__all__ = [
    "ALL_UNITS",
    "AmbiguousOrInvalidTime",
    "Calendar",
    "CalendarError",
    "CivilComponents",
    "Disambiguation",
    "Field",
    "Instant",
    "InvalidComponents",
    "NoMatchFound",
    "Ordering",
    "SearchExhausted",
    "UnknownTimeZone",
    "Weekday",
    "add",
    "combine",
    "compare",
    "days",
    "difference",
    "fixed_offset",
    "from_components",
    "hours",
    "is_dst",
    "microseconds",
    "minutes",
    "months",
    "negate",
    "resolve_zone",
    "seconds",
    "subtract",
    "to_components",
    "truncate",
    "utc_offset",
    "weeks",
    "years",
]
