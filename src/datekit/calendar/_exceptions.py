from __future__ import annotations


class CalendarError(Exception):
    """Base class for all datekit calendar errors."""


class UnknownTimeZone(CalendarError):
    """The zone identifier is not known to the timezone database."""


class InvalidComponents(CalendarError):
    """Calendar fields that cannot be normalized to any valid instant."""


class AmbiguousOrInvalidTime(CalendarError):
    """A local wall time falls in a DST overlap or gap and the policy is RAISE."""


class NoMatchFound(CalendarError):
    """A pattern search exceeded its safety bound without finding a match."""


class SearchExhausted(CalendarError):
    """An enumeration hit its safety bound before the caller stopped it."""
