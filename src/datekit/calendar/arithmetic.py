from __future__ import annotations

import calendar
from datetime import datetime, timedelta, tzinfo
from enum import IntEnum
from typing import Iterable

from datekit.calendar._exceptions import InvalidComponents
from datekit.calendar.components import (
    ALL_UNITS,
    TIME_UNITS,
    CivilComponents,
    Field,
    negate,
    unit_fields,
)
from datekit.calendar.instant import Instant
from datekit.calendar.zones import (
    Disambiguation,
    ZoneLike,
    resolve_local,
    resolve_policy,
    resolve_zone,
    utc_offset,
)

_MICROS: dict[Field, int] = {
    Field.HOUR: 3_600_000_000,
    Field.MINUTE: 60_000_000,
    Field.SECOND: 1_000_000,
    Field.MICROSECOND: 1,
}

GRANULARITIES: tuple[Field, ...] = ALL_UNITS


class Ordering(IntEnum):
    BEFORE = -1
    SAME = 0
    AFTER = 1


def _wall(instant: Instant, tz: tzinfo) -> datetime:
    try:
        return instant.to_datetime(tz).replace(tzinfo=None, fold=0)
    except OverflowError as exc:
        raise InvalidComponents(f"{instant!r} is outside the supported date range.") from exc


def _or(value: int | None, default: int) -> int:
    return default if value is None else value


# ── decomposition / composition ──────────────────────────────────────────────

def to_components(instant: Instant, zone: ZoneLike | None = None) -> CivilComponents:
    """Every calendar field of ``instant`` as seen on the wall clock of ``zone``."""
    wall = _wall(instant, resolve_zone(zone))
    _, iso_week, iso_weekday = wall.isocalendar()
    return CivilComponents(
        year=wall.year,
        month=wall.month,
        week=iso_week,
        day=wall.day,
        hour=wall.hour,
        minute=wall.minute,
        second=wall.second,
        microsecond=wall.microsecond,
        weekday=iso_weekday,
        weekday_ordinal=(wall.day - 1) // 7 + 1,
    )


def normalize_wall(components: CivilComponents) -> datetime:
    """
    Naive local datetime for possibly overflowed fields.

    Months roll into years first, then day and time fields are added as
    offsets from the first of that month, so ``month=13`` is January of the
    next year and ``day=0`` is the last day of the previous month.
    """
    c = components
    if c.year is None:
        raise InvalidComponents(f"{c!r} has no year.")
    try:
        carry, month0 = divmod(_or(c.month, 1) - 1, 12)
        first = datetime(c.year + carry, month0 + 1, 1)
        return first + timedelta(
            days=_or(c.day, 1) - 1,
            hours=_or(c.hour, 0),
            minutes=_or(c.minute, 0),
            seconds=_or(c.second, 0),
            microseconds=_or(c.microsecond, 0),
        )
    except (ValueError, OverflowError) as exc:
        raise InvalidComponents(f"{c!r} cannot be normalized to a valid date.") from exc


def from_components(
    components: CivilComponents,
    zone: ZoneLike | None = None,
    policy: Disambiguation | str | None = None,
) -> Instant:
    tz = resolve_zone(zone)
    wall = normalize_wall(components)
    try:
        return resolve_local(wall, tz, policy)
    except OverflowError as exc:
        raise InvalidComponents(f"{components!r} is outside the supported date range.") from exc


# ── stepping ─────────────────────────────────────────────────────────────────

def _shift_months(wall: datetime, n: int) -> datetime:
    carry, month0 = divmod(wall.month - 1 + n, 12)
    year = wall.year + carry
    last = calendar.monthrange(year, month0 + 1)[1]
    return wall.replace(year=year, month=month0 + 1, day=min(wall.day, last))


def _step(
    instant: Instant,
    unit: Field,
    n: int,
    tz: tzinfo,
    policy: Disambiguation,
) -> Instant:
    if n == 0:
        return instant
    if unit in TIME_UNITS:
        return Instant(instant.micros + n * _MICROS[unit])

    wall = _wall(instant, tz)
    try:
        if unit is Field.YEAR:
            wall = _shift_months(wall, 12 * n)
        elif unit is Field.MONTH:
            wall = _shift_months(wall, n)
        elif unit is Field.WEEK:
            wall = wall + timedelta(weeks=n)
        else:
            wall = wall + timedelta(days=n)
        return resolve_local(wall, tz, policy)
    except (ValueError, OverflowError) as exc:
        raise InvalidComponents(
            f"Adding {n} {unit.value}(s) to {instant!r} leaves the supported date range."
        ) from exc


def add(
    instant: Instant,
    delta: CivilComponents,
    zone: ZoneLike | None = None,
    policy: Disambiguation | str | None = None,
) -> Instant:
    """
    Apply ``delta`` largest unit first.

    Year, month, week and day move the local wall clock and re-resolve the
    offset after every step; the day is clamped to the end of the target
    month.  Hour, minute, second and microsecond are exact elapsed time.
    """
    tz = resolve_zone(zone)
    policy = resolve_policy(policy)
    amounts = unit_fields(delta)
    result = instant
    for unit in ALL_UNITS:
        result = _step(result, unit, amounts.get(unit, 0), tz, policy)
    return result


def subtract(
    instant: Instant,
    delta: CivilComponents,
    zone: ZoneLike | None = None,
    policy: Disambiguation | str | None = None,
) -> Instant:
    return add(instant, negate(delta), zone, policy)


# ── difference ───────────────────────────────────────────────────────────────

def _units(units: Iterable[Field | str]) -> set[Field]:
    out = {Field(u) for u in units}
    bad = out.difference(ALL_UNITS)
    if bad:
        raise ValueError(f"Not a unit: {sorted(b.value for b in bad)}.")
    return out


def _estimate(cursor: Instant, end: Instant, unit: Field, tz: tzinfo) -> int:
    a, b = _wall(cursor, tz), _wall(end, tz)
    if unit is Field.YEAR:
        return b.year - a.year
    if unit is Field.MONTH:
        return (b.year - a.year) * 12 + b.month - a.month
    span = (b.date() - a.date()).days
    return int(span / 7) if unit is Field.WEEK else span


def _fit(
    cursor: Instant,
    end: Instant,
    unit: Field,
    sign: int,
    tz: tzinfo,
    policy: Disambiguation,
) -> int:
    """Largest count (towards ``sign``) of ``unit`` that does not pass ``end``."""

    def overshoots(k: int) -> bool:
        try:
            moved = _step(cursor, unit, k, tz, policy)
        except InvalidComponents:
            # Stepping off the end of the date range passes any valid end.
            return True
        return moved > end if sign > 0 else moved < end

    n = _estimate(cursor, end, unit, tz)
    if n * sign < 0:
        n = 0
    while n != 0 and overshoots(n):
        n -= sign
    while not overshoots(n + sign):
        n += sign
    return n


def difference(
    start: Instant,
    end: Instant,
    zone: ZoneLike | None = None,
    units: Iterable[Field | str] = ALL_UNITS,
    policy: Disambiguation | str | None = None,
) -> CivilComponents:
    """
    Break the span from ``start`` to ``end`` into the requested units.

    Units are consumed largest first, each as many times as fits without
    passing ``end``; all fields carry the sign of the span.  What is left
    below the finest requested unit is dropped.  With every unit requested,
    ``add(start, difference(start, end, zone), zone) == end``.
    """
    wanted = _units(units)
    tz = resolve_zone(zone)
    policy = resolve_policy(policy)
    sign = 1 if end >= start else -1

    out: dict[str, int] = {}
    cursor = start
    for unit in ALL_UNITS:
        if unit not in wanted:
            continue
        if unit in TIME_UNITS:
            n = sign * (abs(end.micros - cursor.micros) // _MICROS[unit])
        else:
            n = _fit(cursor, end, unit, sign, tz, policy)
        out[unit.value] = n
        cursor = _step(cursor, unit, n, tz, policy)
    return CivilComponents(**out)


# ── truncation / comparison ─────────────────────────────────────────────────

def truncate(
    instant: Instant,
    zone: ZoneLike | None = None,
    granularity: Field | str = Field.DAY,
) -> Instant:
    """Start of the ``granularity`` unit (local to ``zone``) containing ``instant``."""
    g = Field(granularity)
    if g not in GRANULARITIES:
        raise ValueError(f"Unsupported granularity {g.value!r}.")
    tz = resolve_zone(zone)

    if g in TIME_UNITS:
        # Floor the wall clock but keep the instant's own offset, so both
        # passes through a repeated hour stay distinct.
        offset = utc_offset(instant, tz) // timedelta(microseconds=1)
        local = instant.micros + offset
        return Instant(local - local % _MICROS[g] - offset)

    wall = _wall(instant, tz)
    start = datetime(wall.year, wall.month, wall.day)
    if g is Field.WEEK:
        start -= timedelta(days=wall.isoweekday() - 1)
    elif g is Field.MONTH:
        start = start.replace(day=1)
    elif g is Field.YEAR:
        start = start.replace(month=1, day=1)
    return resolve_local(start, tz, Disambiguation.EARLIER)


def compare(
    a: Instant,
    b: Instant,
    zone: ZoneLike | None = None,
    granularity: Field | str = Field.SECOND,
) -> Ordering:
    ta = truncate(a, zone, granularity)
    tb = truncate(b, zone, granularity)
    return Ordering((ta > tb) - (ta < tb))
