from __future__ import annotations

import itertools
import logging
from datetime import date, datetime, timedelta, tzinfo
from enum import Enum
from typing import Callable, Iterator, Sequence

import numpy as np

from datekit.calendar._exceptions import InvalidComponents, NoMatchFound, SearchExhausted
from datekit.calendar.arithmetic import from_components, to_components
from datekit.calendar.components import CivilComponents, Field
from datekit.calendar.instant import Instant
from datekit.calendar.zones import (
    Disambiguation,
    ZoneLike,
    local_to_instants,
    resolve_local,
    resolve_zone,
)
from datekit.config.settings import get_settings

logger = logging.getLogger(__name__)

MatchSpec = CivilComponents
StopPredicate = Callable[[Instant], bool]


class Direction(str, Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


class MatchState(str, Enum):
    SEARCHING = "searching"
    EMITTING = "emitting"
    STOPPED = "stopped"


_RANGES: dict[Field, tuple[int, int]] = {
    Field.YEAR: (1, 9999),
    Field.MONTH: (1, 12),
    Field.WEEK: (1, 53),
    Field.DAY: (1, 31),
    Field.HOUR: (0, 23),
    Field.MINUTE: (0, 59),
    Field.SECOND: (0, 59),
    Field.MICROSECOND: (0, 999_999),
    Field.WEEKDAY: (1, 7),
    Field.WEEKDAY_ORDINAL: (1, 5),
}

_TIME_FIELDS: tuple[Field, ...] = (Field.HOUR, Field.MINUTE, Field.SECOND, Field.MICROSECOND)
_TIME_SPAN: dict[Field, int] = {
    Field.HOUR: 24,
    Field.MINUTE: 60,
    Field.SECOND: 60,
    Field.MICROSECOND: 1_000_000,
}

_MIN_DAY = np.datetime64("0001-01-01", "D")
_MAX_DAY = np.datetime64("9999-12-31", "D")
_DAYS_PER_YEAR = 366

# Wider than any UTC offset change, so walls this far before the
# reference can never resolve after it.
_DST_MARGIN = timedelta(hours=6)


def _validate(spec: MatchSpec) -> dict[Field, int]:
    constraints = spec.present()
    for f, v in constraints.items():
        lo, hi = _RANGES[f]
        if not lo <= v <= hi:
            raise InvalidComponents(f"{f.value}={v} is outside {lo}..{hi}.")
    return constraints


# ── vectorized day scan ──────────────────────────────────────────────────────

def _day_fields(days: np.ndarray, wanted: set[Field]) -> dict[Field, np.ndarray]:
    """Calendar fields of a ``datetime64[D]`` vector, for the fields asked for."""
    months = days.astype("datetime64[M]")
    out: dict[Field, np.ndarray] = {}
    dom = (days - months.astype("datetime64[D]")).astype(np.int64) + 1
    # 1970-01-01 was a Thursday (ISO 4).
    weekday = (days.astype(np.int64) + 3) % 7 + 1

    if Field.YEAR in wanted:
        out[Field.YEAR] = months.astype("datetime64[Y]").astype(np.int64) + 1970
    if Field.MONTH in wanted:
        out[Field.MONTH] = months.astype(np.int64) % 12 + 1
    if Field.DAY in wanted:
        out[Field.DAY] = dom
    if Field.WEEKDAY in wanted:
        out[Field.WEEKDAY] = weekday
    if Field.WEEKDAY_ORDINAL in wanted:
        out[Field.WEEKDAY_ORDINAL] = (dom - 1) // 7 + 1
    if Field.WEEK in wanted:
        # The ISO week belongs to the year holding its Thursday.
        thursday = days + (4 - weekday).astype("timedelta64[D]")
        jan1 = thursday.astype("datetime64[Y]").astype("datetime64[D]")
        out[Field.WEEK] = (thursday - jan1).astype(np.int64) // 7 + 1
    return out


def _scan_days(
    start: np.datetime64,
    forward: bool,
    limit: int,
    block: int,
    constraints: dict[Field, int],
) -> Iterator[date]:
    """Days from ``start`` (inclusive) satisfying every date constraint, in scan order."""
    date_constraints = {f: v for f, v in constraints.items() if f not in _TIME_FIELDS}
    step = 1 if forward else -1
    scanned = 0
    while scanned < limit:
        n = min(block, limit - scanned)
        offsets = np.arange(scanned, scanned + n, dtype=np.int64) * step
        days = start + offsets.astype("timedelta64[D]")
        days = days[(days >= _MIN_DAY) & (days <= _MAX_DAY)]
        scanned += n
        if not days.size:
            continue

        mask = np.ones(days.shape, dtype=bool)
        for f, values in _day_fields(days, set(date_constraints)).items():
            mask &= values == date_constraints[f]
        for day in days[mask]:
            yield day.astype(object)


# ── time-of-day candidates ───────────────────────────────────────────────────

def _time_axes(constraints: dict[Field, int]) -> list[Sequence[int]]:
    """
    Values to try for hour, minute, second and microsecond.

    Unconstrained fields coarser than the finest constrained one are free;
    the ones below it are pinned to zero.
    """
    constrained = [i for i, f in enumerate(_TIME_FIELDS) if f in constraints]
    finest = constrained[-1] if constrained else -1
    axes: list[Sequence[int]] = []
    for i, f in enumerate(_TIME_FIELDS):
        if f in constraints:
            axes.append((constraints[f],))
        elif i < finest:
            axes.append(range(_TIME_SPAN[f]))
        else:
            axes.append((0,))
    return axes


def _walls(day: date, axes: list[Sequence[int]], forward: bool) -> Iterator[datetime]:
    ordered = axes if forward else [a[::-1] for a in axes]
    for h, m, s, us in itertools.product(*ordered):
        yield datetime(day.year, day.month, day.day, h, m, s, us)


def _instants_at(wall: datetime, tz: tzinfo) -> list[Instant]:
    found = local_to_instants(wall, tz)
    if found:
        return found
    # Skipped by a DST gap: take the first instant after it.
    return [resolve_local(wall, tz, Disambiguation.EARLIER)]


def _best_in_day(
    day: date,
    axes: list[Sequence[int]],
    tz: tzinfo,
    after: Instant,
    ref_wall: datetime,
    forward: bool,
) -> Instant | None:
    # The earliest (latest, going backward) candidate of a wall time is
    # monotonic in the wall time, so the walk stops as soon as it can no
    # longer improve on the best hit.
    best: Instant | None = None
    for wall in _walls(day, axes, forward):
        if forward and wall < ref_wall - _DST_MARGIN:
            continue
        if not forward and wall > ref_wall + _DST_MARGIN:
            continue
        candidates = _instants_at(wall, tz)
        if best is not None:
            if forward and candidates[0] >= best:
                break
            if not forward and candidates[-1] <= best:
                break
        for inst in candidates:
            if forward and inst > after and (best is None or inst < best):
                best = inst
            elif not forward and inst < after and (best is None or inst > best):
                best = inst
    return best


# ── public API ───────────────────────────────────────────────────────────────

def matches(instant: Instant, spec: MatchSpec, zone: ZoneLike | None = None) -> bool:
    """True if every constrained field of ``spec`` equals the local field of ``instant``."""
    local = to_components(instant, zone)
    return all(local.get(f) == v for f, v in _validate(spec).items())


def next_match(
    after: Instant,
    spec: MatchSpec,
    zone: ZoneLike | None = None,
    direction: Direction | str = Direction.FORWARD,
    *,
    max_years: int | None = None,
) -> Instant:
    """
    Closest instant strictly after (or before) ``after`` satisfying ``spec``.

    Days are scanned in numpy blocks and tested against the date
    constraints as one vector mask; the time-of-day candidates of each
    surviving day are then resolved in order.  Gives up with
    ``NoMatchFound`` after ``max_years`` years of days.
    """
    constraints = _validate(spec)
    tz = resolve_zone(zone)
    forward = Direction(direction) is Direction.FORWARD
    settings = get_settings()
    years = settings.search_max_years if max_years is None else max_years
    if years < 1:
        raise ValueError("max_years must be at least 1.")

    try:
        ref_wall = after.to_datetime(tz).replace(tzinfo=None, fold=0)
    except OverflowError as exc:
        raise InvalidComponents(f"{after!r} is outside the supported date range.") from exc

    start = np.datetime64(ref_wall.date(), "D")
    limit = years * _DAYS_PER_YEAR + 1

    year = constraints.get(Field.YEAR)
    if year is not None:
        first = np.datetime64(date(year, 1, 1), "D")
        last = np.datetime64(date(year, 12, 31), "D")
        if (forward and start > last) or (not forward and start < first):
            raise NoMatchFound(f"No match for {spec!r}: year {year} is already behind {after!r}.")
        if forward:
            start = max(start, first)
            limit = min(limit, int((last - start).astype(np.int64)) + 1)
        else:
            start = min(start, last)
            limit = min(limit, int((start - first).astype(np.int64)) + 1)

    logger.debug("searching %s from %s for %r in %s", "forward" if forward else "backward",
                 after, spec, tz)
    axes = _time_axes(constraints)
    for day in _scan_days(start, forward, limit, settings.scan_block_days, constraints):
        best = _best_in_day(day, axes, tz, after, ref_wall, forward)
        if best is not None:
            return best

    raise NoMatchFound(f"No match for {spec!r} within {years} year(s) of {after!r}.")


class MatchIterator:
    """
    Lazy sequence of successive forward matches.

    The iterator is single pass; call ``enumerate_matches`` again to start
    over.  A match accepted by ``stop`` ends the sequence without being
    yielded, and so does running past the year of a spec that sets one.
    Running into a search bound, or producing more than ``max_matches``
    matches, raises ``SearchExhausted`` instead of ending quietly.
    """

    def __init__(
        self,
        starting_after: Instant,
        spec: MatchSpec,
        zone: ZoneLike | None = None,
        stop: StopPredicate | None = None,
        *,
        max_matches: int | None = None,
        max_years: int | None = None,
    ) -> None:
        _validate(spec)
        self._spec = spec
        self._zone = resolve_zone(zone)
        self._stop = stop
        self._cursor = starting_after
        self._max_matches = (
            get_settings().enumerate_max_matches if max_matches is None else max_matches
        )
        self._max_years = max_years
        self._emitted = 0
        self._state = MatchState.SEARCHING

    def __iter__(self) -> MatchIterator:
        return self

    def __next__(self) -> Instant:
        if self._state is MatchState.STOPPED:
            raise StopIteration
        self._state = MatchState.SEARCHING

        try:
            found = next_match(self._cursor, self._spec, self._zone, max_years=self._max_years)
        except NoMatchFound as exc:
            self._state = MatchState.STOPPED
            # A year-bounded search always covers the rest of that year.
            if self._spec.year is not None:
                raise StopIteration from exc
            raise SearchExhausted(
                f"Ran out of matches of {self._spec!r} after {self._cursor!r}."
            ) from exc

        if self._stop is not None and self._stop(found):
            self._state = MatchState.STOPPED
            raise StopIteration

        if self._emitted >= self._max_matches:
            self._state = MatchState.STOPPED
            raise SearchExhausted(
                f"Stopped after {self._emitted} matches of {self._spec!r}."
            )

        self._cursor = found
        self._emitted += 1
        self._state = MatchState.EMITTING
        return found

    @property
    def state(self) -> MatchState:
        return self._state

    @property
    def emitted(self) -> int:
        return self._emitted

    def __repr__(self) -> str:
        return (
            f"MatchIterator(spec={self._spec!r}, "
            f"cursor={self._cursor!r}, "
            f"emitted={self._emitted}, "
            f"state={self._state.value!r})"
        )


def enumerate_matches(
    starting_after: Instant,
    spec: MatchSpec,
    zone: ZoneLike | None = None,
    stop: StopPredicate | None = None,
    *,
    max_matches: int | None = None,
    max_years: int | None = None,
) -> MatchIterator:
    return MatchIterator(
        starting_after,
        spec,
        zone,
        stop,
        max_matches=max_matches,
        max_years=max_years,
    )


def matches_in_year(spec: MatchSpec, year: int, zone: ZoneLike | None = None) -> list[Instant]:
    """Every match of ``spec`` falling within calendar ``year`` (local to ``zone``)."""
    if spec.year is not None and spec.year != year:
        return []
    tz = resolve_zone(zone)
    bounded = spec.replace(year=year)
    first = from_components(CivilComponents(year=year), tz)

    found: list[Instant] = []
    # Start one microsecond early so a match at local midnight on 1 January counts.
    cursor = Instant(first.micros - 1)
    while True:
        try:
            cursor = next_match(cursor, bounded, tz)
        except NoMatchFound:
            return found
        found.append(cursor)
