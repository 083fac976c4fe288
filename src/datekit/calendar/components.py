from __future__ import annotations

import operator
from dataclasses import dataclass, fields, replace
from enum import Enum, IntEnum
from typing import Any


class Field(str, Enum):
    YEAR = "year"
    MONTH = "month"
    WEEK = "week"
    DAY = "day"
    HOUR = "hour"
    MINUTE = "minute"
    SECOND = "second"
    MICROSECOND = "microsecond"
    WEEKDAY = "weekday"
    WEEKDAY_ORDINAL = "weekday_ordinal"


class Weekday(IntEnum):
    """ISO weekday numbering."""

    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6
    SUNDAY = 7


# Largest unit first: the order in which deltas are applied.
ALL_UNITS: tuple[Field, ...] = (
    Field.YEAR,
    Field.MONTH,
    Field.WEEK,
    Field.DAY,
    Field.HOUR,
    Field.MINUTE,
    Field.SECOND,
    Field.MICROSECOND,
)
DATE_UNITS: tuple[Field, ...] = ALL_UNITS[:4]
TIME_UNITS: tuple[Field, ...] = ALL_UNITS[4:]


@dataclass(frozen=True, slots=True, kw_only=True)
class CivilComponents:
    """
    Sparse set of calendar fields.

    Depending on where it is used, a value is either

    * a *delta* for ``add``/``difference`` (absent fields count as zero,
      negative and out-of-range values are allowed), or
    * a *match spec* for pattern search (present fields are exact
      constraints, absent fields are wildcards), or
    * a *decomposition* returned by ``to_components`` (every field set).

    ``week`` is a number of weeks in a delta and the ISO week of the year
    everywhere else.
    """

    year: int | None = None
    month: int | None = None
    week: int | None = None
    day: int | None = None
    hour: int | None = None
    minute: int | None = None
    second: int | None = None
    microsecond: int | None = None
    weekday: int | None = None
    weekday_ordinal: int | None = None

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, bool):
                raise TypeError(f"{f.name} must be an integer; got {value!r}.")
            object.__setattr__(self, f.name, operator.index(value))

    def get(self, field: Field | str) -> int | None:
        return getattr(self, Field(field).value)

    def present(self) -> dict[Field, int]:
        return {
            Field(f.name): getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    def replace(self, **changes: Any) -> CivilComponents:
        return replace(self, **changes)

    @property
    def is_empty(self) -> bool:
        return not self.present()

    def __repr__(self) -> str:
        body = ", ".join(f"{k.value}={v}" for k, v in self.present().items())
        return f"CivilComponents({body})"


# ── building and combining deltas ─────────────────────────────────────────

def years(n: int) -> CivilComponents:
    return CivilComponents(year=n)


def months(n: int) -> CivilComponents:
    return CivilComponents(month=n)


def weeks(n: int) -> CivilComponents:
    return CivilComponents(week=n)


def days(n: int) -> CivilComponents:
    return CivilComponents(day=n)


def hours(n: int) -> CivilComponents:
    return CivilComponents(hour=n)


def minutes(n: int) -> CivilComponents:
    return CivilComponents(minute=n)


def seconds(n: int) -> CivilComponents:
    return CivilComponents(second=n)


def microseconds(n: int) -> CivilComponents:
    return CivilComponents(microsecond=n)


def unit_fields(c: CivilComponents) -> dict[Field, int]:
    present = c.present()
    extra = [f.value for f in present if f not in ALL_UNITS]
    if extra:
        raise ValueError(f"Deltas may only set unit fields; got {extra}.")
    return present


def combine(
    lhs: CivilComponents,
    rhs: CivilComponents,
    multiplier: int = 1,
) -> CivilComponents:
    """Field-wise ``lhs + rhs * multiplier``; a field is set if either side sets it."""
    left = unit_fields(lhs)
    right = unit_fields(rhs)
    out: dict[str, int] = {}
    for unit in ALL_UNITS:
        if unit in left or unit in right:
            out[unit.value] = left.get(unit, 0) + right.get(unit, 0) * multiplier
    return CivilComponents(**out)


def negate(c: CivilComponents) -> CivilComponents:
    return CivilComponents(**{k.value: -v for k, v in unit_fields(c).items()})
