"""
tests/calendar/test_calendar.py

Covers:
  - Calendar construction (zone, policy, defaults from settings)
  - date / to_components / from_components
  - add / subtract / difference / compare / truncate through the facade
  - DST queries
  - Pattern search through the facade
"""

from datetime import timedelta

import pytest

from datekit.calendar import (
    AmbiguousOrInvalidTime,
    Calendar,
    CivilComponents,
    Disambiguation,
    Instant,
    NoMatchFound,
    Ordering,
    SearchExhausted,
    UnknownTimeZone,
    Weekday,
    days,
    hours,
    months,
)
from datekit.patterns import MatchIterator


@pytest.fixture
def pacific():
    return Calendar("America/Los_Angeles")


# ── Construction ──────────────────────────────────────────────────────────────

class TestConstruction:

    def test_defaults(self):
        cal = Calendar()
        assert str(cal.zone) == "UTC"
        assert cal.policy is Disambiguation.EARLIER

    def test_defaults_follow_environment(self, monkeypatch):
        monkeypatch.setenv("DATEKIT_DEFAULT_ZONE", "Europe/Berlin")
        monkeypatch.setenv("DATEKIT_DISAMBIGUATION", "later")
        cal = Calendar()
        assert str(cal.zone) == "Europe/Berlin"
        assert cal.policy is Disambiguation.LATER

    def test_unknown_zone(self):
        with pytest.raises(UnknownTimeZone):
            Calendar("Mars/Olympus_Mons")

    def test_unknown_policy(self):
        with pytest.raises(ValueError):
            Calendar("UTC", "whichever")

    def test_repr(self, pacific):
        assert repr(pacific) == "Calendar(zone='America/Los_Angeles', policy='earlier')"


# ── Components ────────────────────────────────────────────────────────────────

class TestComponents:

    def test_date(self, pacific):
        assert pacific.date(2007, 1, 9, 10, 3) == Instant.parse("2007-01-09T18:03:00Z")

    def test_date_defaults_to_midnight(self, pacific):
        assert pacific.date(2024, 7, 4) == Instant.parse("2024-07-04T00:00:00-07:00")

    def test_round_trip(self, pacific):
        t = Instant.parse("2024-09-13T15:42:07.500000+00:00")
        assert pacific.from_components(pacific.to_components(t)) == t

    def test_policy_applies(self):
        strict = Calendar("America/Los_Angeles", Disambiguation.RAISE)
        with pytest.raises(AmbiguousOrInvalidTime):
            strict.date(2024, 11, 3, 1, 30)

    def test_later_policy(self):
        cal = Calendar("America/Los_Angeles", "later")
        assert cal.date(2024, 11, 3, 1, 30) == Instant.parse("2024-11-03T09:30:00Z")


# ── Arithmetic ────────────────────────────────────────────────────────────────

class TestArithmetic:

    def test_add_month(self, pacific):
        assert pacific.add(pacific.date(2024, 1, 31), months(1)) == pacific.date(2024, 2, 29)

    def test_subtract(self, pacific):
        assert pacific.subtract(pacific.date(2024, 3, 10, 12), days(1)) == pacific.date(2024, 3, 9, 12)

    def test_difference(self, pacific):
        start = pacific.date(2024, 3, 9, 12)
        end = pacific.date(2024, 3, 10, 12)
        assert pacific.difference(start, end, ["day", "hour"]) == CivilComponents(day=1, hour=0)

    def test_from_now_and_ago(self):
        cal = Calendar("UTC")
        before = Instant.now()
        ahead = cal.from_now(hours(1))
        behind = cal.ago(hours(1))
        after = Instant.now()
        assert before.shift(3600) <= ahead <= after.shift(3600)
        assert before.shift(-3600) <= behind <= after.shift(-3600)


# ── Comparison / DST ──────────────────────────────────────────────────────────

class TestComparison:

    def test_compare(self, pacific):
        a = pacific.date(2024, 7, 1, 9)
        b = pacific.date(2024, 7, 1, 17)
        assert pacific.compare(a, b, "day") is Ordering.SAME
        assert pacific.compare(a, b) is Ordering.BEFORE

    def test_truncate(self, pacific):
        t = pacific.date(2024, 7, 4, 15)
        assert pacific.truncate(t, "month") == pacific.date(2024, 7, 1)

    def test_is_dst(self, pacific):
        assert pacific.is_dst(Instant.parse("2024-03-15T00:00:00Z"))
        assert not Calendar("Europe/Berlin").is_dst(Instant.parse("2024-03-15T00:00:00Z"))

    def test_utc_offset(self, pacific):
        assert pacific.utc_offset(Instant.parse("2024-01-15T00:00:00Z")) == timedelta(hours=-8)


# ── Pattern search ────────────────────────────────────────────────────────────

class TestPatterns:

    def test_next_match(self, pacific):
        spec = CivilComponents(day=13, weekday=Weekday.FRIDAY)
        got = pacific.next_match(pacific.date(2024, 1, 1), spec)
        assert got == pacific.date(2024, 9, 13)

    def test_previous_match(self, pacific):
        spec = CivilComponents(day=13, weekday=Weekday.FRIDAY)
        got = pacific.next_match(pacific.date(2024, 9, 13), spec, "backward")
        assert got == pacific.date(2023, 10, 13)

    def test_enumerate_matches(self, pacific):
        spec = CivilComponents(month=5, weekday=Weekday.MONDAY)
        end = pacific.date(2024, 6, 1)
        it = pacific.enumerate_matches(pacific.date(2024, 1, 1), spec, stop=lambda m: m >= end)
        assert isinstance(it, MatchIterator)
        assert list(it) == [pacific.date(2024, 5, d) for d in (6, 13, 20, 27)]

    def test_next_match_search_bound(self, pacific):
        leap_monday = CivilComponents(month=2, day=29, weekday=Weekday.MONDAY)
        start = pacific.date(2024, 1, 1)
        with pytest.raises(NoMatchFound):
            pacific.next_match(start, leap_monday, max_years=5)
        assert pacific.next_match(start, leap_monday, max_years=25) == pacific.date(2044, 2, 29)

    def test_enumerate_matches_bounds(self, pacific):
        spec = CivilComponents(day=13, weekday=Weekday.FRIDAY)
        it = pacific.enumerate_matches(pacific.date(2024, 1, 1), spec, max_matches=1)
        next(it)
        with pytest.raises(SearchExhausted):
            next(it)

        never = pacific.enumerate_matches(
            pacific.date(2024, 1, 1), CivilComponents(month=2, day=30), max_years=1
        )
        with pytest.raises(SearchExhausted):
            next(never)
