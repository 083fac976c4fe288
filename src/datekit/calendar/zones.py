from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone, tzinfo
from enum import Enum
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from datekit.calendar._exceptions import AmbiguousOrInvalidTime, UnknownTimeZone
from datekit.calendar.instant import Instant
from datekit.config.settings import get_settings

logger = logging.getLogger(__name__)

ZoneLike = str | tzinfo


class Disambiguation(str, Enum):
    """
    How to turn a local wall time into an instant around DST transitions.

    EARLIER  overlap: the earlier instant; gap: the first valid instant
             after the gap (the transition itself).
    LATER    overlap: the later instant; gap: the wall time shifted forward
             by the length of the gap.
    RAISE    raise AmbiguousOrInvalidTime in both cases.
    """

    EARLIER = "earlier"
    LATER = "later"
    RAISE = "raise"


# ── zone lookup ──────────────────────────────────────────────────────────────

def resolve_zone(zone: ZoneLike | None = None) -> tzinfo:
    """Return a tzinfo for an IANA identifier; tzinfo objects pass through."""
    if zone is None:
        zone = get_settings().default_zone
    if isinstance(zone, tzinfo):
        return zone
    try:
        return ZoneInfo(zone)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise UnknownTimeZone(f"Unknown time zone {zone!r}.") from exc


def fixed_offset(seconds: int) -> tzinfo:
    """Zone with a constant offset from UTC and no DST."""
    try:
        return timezone(timedelta(seconds=seconds))
    except ValueError as exc:
        raise UnknownTimeZone(f"Offset of {seconds}s is out of range.") from exc


def utc_offset(instant: Instant, zone: ZoneLike) -> timedelta:
    offset = instant.to_datetime(resolve_zone(zone)).utcoffset()
    return offset if offset is not None else timedelta(0)


def is_dst(instant: Instant, zone: ZoneLike) -> bool:
    return bool(instant.to_datetime(resolve_zone(zone)).dst())


def resolve_policy(policy: Disambiguation | str | None) -> Disambiguation:
    if policy is None:
        policy = get_settings().disambiguation
    return Disambiguation(policy)


# ── wall time → instant ──────────────────────────────────────────────────────

def local_to_instants(wall: datetime, zone: tzinfo) -> list[Instant]:
    """
    All instants whose local representation in ``zone`` is ``wall``.

    One element normally, two inside a DST overlap, none inside a gap.
    """
    wall = wall.replace(tzinfo=None, fold=0)
    found: list[Instant] = []
    for fold in (0, 1):
        candidate = Instant.from_datetime(wall.replace(tzinfo=zone, fold=fold))
        if candidate in found:
            continue
        if candidate.to_datetime(zone).replace(tzinfo=None) == wall:
            found.append(candidate)
    return sorted(found)


def _gap_bounds(wall: datetime, zone: tzinfo) -> tuple[Instant, Instant]:
    # Inside a gap fold=0 applies the pre-transition offset and fold=1 the
    # post-transition one; the transition lies between the two readings.
    a = Instant.from_datetime(wall.replace(tzinfo=zone, fold=0))
    b = Instant.from_datetime(wall.replace(tzinfo=zone, fold=1))
    return (a, b) if a <= b else (b, a)


def _transition_after(lo: Instant, hi: Instant, zone: tzinfo) -> Instant:
    """First instant in (lo, hi] carrying the same offset as ``hi``."""
    target = utc_offset(hi, zone)
    low, high = lo.micros, hi.micros
    while high - low > 1:
        mid = (low + high) // 2
        if utc_offset(Instant(mid), zone) == target:
            high = mid
        else:
            low = mid
    return Instant(high)


def resolve_local(
    wall: datetime,
    zone: tzinfo,
    policy: Disambiguation | str | None = None,
) -> Instant:
    policy = resolve_policy(policy)
    candidates = local_to_instants(wall, zone)
    if len(candidates) == 1:
        return candidates[0]

    kind = "ambiguous" if candidates else "nonexistent"
    if policy is Disambiguation.RAISE:
        raise AmbiguousOrInvalidTime(
            f"Local time {wall.isoformat()} is {kind} in {zone}."
        )
    logger.debug("resolving %s local time %s in %s with policy %s",
                 kind, wall.isoformat(), zone, policy.value)

    if candidates:
        return candidates[0] if policy is Disambiguation.EARLIER else candidates[-1]

    lo, hi = _gap_bounds(wall, zone)
    if policy is Disambiguation.LATER:
        return hi
    return _transition_after(lo, hi, zone)
