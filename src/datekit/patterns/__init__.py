"""
datekit.patterns
~~~~~~~~~~~~~~~~

Recurring-date search: the next (or previous) instant whose local calendar
fields satisfy a partial set of constraints, and lazy enumeration of all of them.

Basic usage::

    from datekit.calendar import CivilComponents, Instant, Weekday
    from datekit.patterns import next_match, matches_in_year

    friday_13th = CivilComponents(day=13, weekday=Weekday.FRIDAY)
    next_match(Instant.parse("2024-01-01T00:00:00Z"), friday_13th, "UTC")
    matches_in_year(friday_13th, 2024, "Europe/Berlin")
"""

from datekit.patterns.matcher import (
    Direction,
    MatchIterator,
    MatchSpec,
    MatchState,
    enumerate_matches,
    matches,
    matches_in_year,
    next_match,
)

__all__ = [
    "Direction",
    "MatchIterator",
    "MatchSpec",
    "MatchState",
    "enumerate_matches",
    "matches",
    "matches_in_year",
    "next_match",
]
