from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_US_PER_SECOND = 1_000_000
_US_PER_DAY = 86_400 * _US_PER_SECOND


@dataclass(frozen=True, slots=True, order=True)
class Instant:
    """
    Absolute point in time: signed microseconds since 1970-01-01T00:00:00Z.

    Instants are zone independent and totally ordered, so they sort and
    compare like plain integers.  Use ``datekit.calendar.to_components`` to
    look at one through the wall clock of a particular zone.
    """

    micros: int

    # ── construction ─────────────────────────────────────────────────────

    @classmethod
    def from_datetime(cls, dt: datetime) -> Instant:
        if dt.tzinfo is None or dt.utcoffset() is None:
            raise ValueError("Instant.from_datetime requires an aware datetime.")
        delta = dt - _EPOCH
        return cls(delta.days * _US_PER_DAY + delta.seconds * _US_PER_SECOND + delta.microseconds)

    @classmethod
    def from_timestamp(cls, seconds: float) -> Instant:
        return cls(round(seconds * _US_PER_SECOND))

    @classmethod
    def parse(cls, text: str) -> Instant:
        """Parse an ISO-8601 string carrying an explicit offset (or ``Z``)."""
        dt = datetime.fromisoformat(text)
        if dt.tzinfo is None:
            raise ValueError(f"ISO-8601 string {text!r} has no UTC offset.")
        return cls.from_datetime(dt)

    @classmethod
    def now(cls) -> Instant:
        return cls.from_datetime(datetime.now(timezone.utc))

    # ── conversion ───────────────────────────────────────────────────────

    def to_datetime(self, zone: tzinfo | None = None) -> datetime:
        utc = _EPOCH + timedelta(microseconds=self.micros)
        return utc if zone is None else utc.astimezone(zone)

    def isoformat(self, zone: tzinfo | None = None) -> str:
        return self.to_datetime(zone).isoformat()

    @property
    def timestamp(self) -> float:
        return self.micros / _US_PER_SECOND

    # ── elapsed-time arithmetic ──────────────────────────────────────────

    def shift(self, seconds: float) -> Instant:
        """Exact elapsed-time offset; no calendar rules involved."""
        return Instant(self.micros + round(seconds * _US_PER_SECOND))

    def interval_since(self, other: Instant) -> float:
        """Seconds elapsed from ``other`` to ``self`` (negative if earlier)."""
        return (self.micros - other.micros) / _US_PER_SECOND

    def __repr__(self) -> str:
        try:
            return f"Instant({self.isoformat()})"
        except OverflowError:
            return f"Instant(micros={self.micros})"
