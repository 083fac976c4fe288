from __future__ import annotations

from datetime import timedelta, tzinfo
from typing import TYPE_CHECKING, Callable, Iterable

from datekit.calendar import arithmetic
from datekit.calendar.components import ALL_UNITS, CivilComponents, Field
from datekit.calendar.instant import Instant
from datekit.calendar.zones import (
    Disambiguation,
    ZoneLike,
    is_dst,
    resolve_policy,
    resolve_zone,
    utc_offset,
)

if TYPE_CHECKING:
    from datekit.patterns.matcher import Direction, MatchIterator


class Calendar:
    """
    Gregorian calendar bound to one zone and one DST policy.

    Immutable; every method forwards to the module-level functions with the
    bound zone and policy, so two Calendars never share hidden state.
    """

    def __init__(
        self,
        zone: ZoneLike | None = None,
        policy: Disambiguation | str | None = None,
    ) -> None:
        self._zone: tzinfo = resolve_zone(zone)
        self._policy: Disambiguation = resolve_policy(policy)

    # ── construction / decomposition ────────────────────────────────────

    def date(
        self,
        year: int,
        month: int = 1,
        day: int = 1,
        hour: int | None = None,
        minute: int | None = None,
        second: int | None = None,
    ) -> Instant:
        return self.from_components(
            CivilComponents(
                year=year, month=month, day=day,
                hour=hour, minute=minute, second=second,
            )
        )

    def from_components(self, components: CivilComponents) -> Instant:
        return arithmetic.from_components(components, self._zone, self._policy)

    def to_components(self, instant: Instant) -> CivilComponents:
        return arithmetic.to_components(instant, self._zone)

    # ── arithmetic ───────────────────────────────────────────────────────

    def add(self, instant: Instant, delta: CivilComponents) -> Instant:
        return arithmetic.add(instant, delta, self._zone, self._policy)

    def subtract(self, instant: Instant, delta: CivilComponents) -> Instant:
        return arithmetic.subtract(instant, delta, self._zone, self._policy)

    def difference(
        self,
        start: Instant,
        end: Instant,
        units: Iterable[Field | str] = ALL_UNITS,
    ) -> CivilComponents:
        return arithmetic.difference(start, end, self._zone, units, self._policy)

    def from_now(self, delta: CivilComponents) -> Instant:
        return self.add(Instant.now(), delta)

    def ago(self, delta: CivilComponents) -> Instant:
        return self.subtract(Instant.now(), delta)

    # ── comparison ───────────────────────────────────────────────────────

    def compare(
        self,
        a: Instant,
        b: Instant,
        granularity: Field | str = Field.SECOND,
    ) -> arithmetic.Ordering:
        return arithmetic.compare(a, b, self._zone, granularity)

    def truncate(self, instant: Instant, granularity: Field | str = Field.DAY) -> Instant:
        return arithmetic.truncate(instant, self._zone, granularity)

    def is_dst(self, instant: Instant) -> bool:
        return is_dst(instant, self._zone)

    def utc_offset(self, instant: Instant) -> timedelta:
        return utc_offset(instant, self._zone)

    # ── pattern search ───────────────────────────────────────────────────

    def next_match(
        self,
        after: Instant,
        spec: CivilComponents,
        direction: Direction | str = "forward",
        *,
        max_years: int | None = None,
    ) -> Instant:
        from datekit.patterns.matcher import next_match

        return next_match(after, spec, self._zone, direction, max_years=max_years)

    def enumerate_matches(
        self,
        starting_after: Instant,
        spec: CivilComponents,
        stop: Callable[[Instant], bool] | None = None,
        *,
        max_matches: int | None = None,
        max_years: int | None = None,
    ) -> MatchIterator:
        from datekit.patterns.matcher import enumerate_matches

        return enumerate_matches(
            starting_after,
            spec,
            self._zone,
            stop,
            max_matches=max_matches,
            max_years=max_years,
        )

    # ── properties / repr ────────────────────────────────────────────────

    @property
    def zone(self) -> tzinfo:
        return self._zone

    @property
    def policy(self) -> Disambiguation:
        return self._policy

    def __repr__(self) -> str:
        return f"Calendar(zone={str(self._zone)!r}, policy={self._policy.value!r})"
