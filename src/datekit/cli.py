"""Command line front end: ``datekit next|enumerate|add|diff|compare``."""

from __future__ import annotations

import itertools
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Iterator

import click

from datekit.calendar import (
    ALL_UNITS,
    Calendar,
    CalendarError,
    CivilComponents,
    Field,
    Instant,
    Weekday,
)
from datekit.config.logging import configure_logging
from datekit.patterns import Direction, matches_in_year

_UNIT_NAMES = [u.value for u in ALL_UNITS]


class InstantParam(click.ParamType):
    """ISO-8601 date/time; strings without an offset are read in the ``--zone``."""

    name = "instant"

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> Instant:
        if isinstance(value, Instant):
            return value
        try:
            dt = datetime.fromisoformat(value)
        except ValueError:
            self.fail(f"{value!r} is not an ISO-8601 date/time.", param, ctx)
        if dt.tzinfo is not None:
            return Instant.from_datetime(dt)

        cal = ctx.find_object(Calendar) if ctx is not None else None
        cal = cal or Calendar()
        try:
            return cal.from_components(
                CivilComponents(
                    year=dt.year, month=dt.month, day=dt.day,
                    hour=dt.hour, minute=dt.minute, second=dt.second,
                    microsecond=dt.microsecond,
                )
            )
        except CalendarError as exc:
            self.fail(str(exc), param, ctx)


class WeekdayParam(click.ParamType):
    """Weekday by name (``fri``, ``Friday``) or ISO number (``5``)."""

    name = "weekday"

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> int:
        text = str(value).strip().lower()
        if text.isdigit() and 1 <= int(text) <= 7:
            return int(text)
        for day in Weekday:
            if day.name.lower().startswith(text) and len(text) >= 2:
                return int(day)
        self.fail(f"{value!r} is not a weekday.", param, ctx)


INSTANT = InstantParam()
WEEKDAY = WeekdayParam()


@contextmanager
def _calendar_errors() -> Iterator[None]:
    try:
        yield
    except CalendarError as exc:
        raise click.ClickException(str(exc)) from exc


def _spec_options(f: Callable[..., Any]) -> Callable[..., Any]:
    options = [
        click.option("--year", type=int, help="Match this year."),
        click.option("--month", type=int, help="Match this month (1-12)."),
        click.option("--week", type=int, help="Match this ISO week of the year."),
        click.option("--day", type=int, help="Match this day of the month."),
        click.option("--hour", type=int),
        click.option("--minute", type=int),
        click.option("--second", type=int),
        click.option("--weekday", type=WEEKDAY, help="Match this weekday."),
        click.option("--ordinal", "weekday_ordinal", type=int,
                     help="Match the n-th such weekday of the month."),
    ]
    for option in reversed(options):
        f = option(f)
    return f


@click.group()
@click.option("--zone", default=None, help="IANA time zone (default: DATEKIT_DEFAULT_ZONE or UTC).")
@click.option("--verbose", is_flag=True, help="Enable debug logging.")
@click.option("--log-json", is_flag=True, help="Log as JSON lines.")
@click.pass_context
def cli(ctx: click.Context, zone: str | None, verbose: bool, log_json: bool) -> None:
    """Calendar arithmetic and recurring-date search."""
    configure_logging(verbose=verbose, log_json=log_json)
    with _calendar_errors():
        ctx.obj = Calendar(zone)


@cli.command("next")
@_spec_options
@click.option("--after", type=INSTANT, default=None, help="Reference instant (default: now).")
@click.option("--backward", is_flag=True, help="Search for the previous match instead.")
@click.pass_obj
def next_cmd(cal: Calendar, after: Instant | None, backward: bool, **fields: int | None) -> None:
    """Print the next (or previous) instant matching the given fields."""
    direction = Direction.BACKWARD if backward else Direction.FORWARD
    with _calendar_errors():
        found = cal.next_match(after or Instant.now(), CivilComponents(**fields), direction)
    click.echo(found.isoformat(cal.zone))


@cli.command("enumerate")
@_spec_options
@click.option("--after", type=INSTANT, default=None, help="Start after this instant (default: now).")
@click.option("--limit", type=click.IntRange(min=1), default=10, show_default=True,
              help="Maximum number of matches when no --year is given.")
@click.pass_obj
def enumerate_cmd(cal: Calendar, after: Instant | None, limit: int, **fields: int | None) -> None:
    """Print successive matches; with --year, every match in that year."""
    spec = CivilComponents(**fields)
    with _calendar_errors():
        if spec.year is not None and after is None:
            found = matches_in_year(spec, spec.year, cal.zone)
        else:
            it = cal.enumerate_matches(after or Instant.now(), spec)
            found = list(itertools.islice(it, limit))
    for instant in found:
        click.echo(instant.isoformat(cal.zone))


@cli.command("add")
@click.argument("start", type=INSTANT)
@click.option("--years", "year", type=int)
@click.option("--months", "month", type=int)
@click.option("--weeks", "week", type=int)
@click.option("--days", "day", type=int)
@click.option("--hours", "hour", type=int)
@click.option("--minutes", "minute", type=int)
@click.option("--seconds", "second", type=int)
@click.option("--subtract", is_flag=True, help="Subtract the delta instead.")
@click.pass_obj
def add_cmd(cal: Calendar, start: Instant, subtract: bool, **delta: int | None) -> None:
    """Add (or subtract) calendar units to START."""
    components = CivilComponents(**delta)
    with _calendar_errors():
        result = cal.subtract(start, components) if subtract else cal.add(start, components)
    click.echo(result.isoformat(cal.zone))


@cli.command("diff")
@click.argument("start", type=INSTANT)
@click.argument("end", type=INSTANT)
@click.option("--unit", "units", multiple=True, type=click.Choice(_UNIT_NAMES),
              help="Units to break the span into (repeatable; default: all).")
@click.pass_obj
def diff_cmd(cal: Calendar, start: Instant, end: Instant, units: tuple[str, ...]) -> None:
    """Print the span from START to END, largest unit first."""
    with _calendar_errors():
        result = cal.difference(start, end, units or ALL_UNITS)
    for field, value in result.present().items():
        click.echo(f"{field.value}: {value}")


@cli.command("compare")
@click.argument("a", type=INSTANT)
@click.argument("b", type=INSTANT)
@click.option("--granularity", type=click.Choice(_UNIT_NAMES), default=Field.SECOND.value,
              show_default=True)
@click.pass_obj
def compare_cmd(cal: Calendar, a: Instant, b: Instant, granularity: str) -> None:
    """Compare A and B after truncating both to GRANULARITY."""
    with _calendar_errors():
        ordering = cal.compare(a, b, granularity)
    click.echo(ordering.name.lower())


if __name__ == "__main__":
    cli()
