"""
Command line interface for the rider tracker.

Usage:
    lel-tracker summary
    lel-tracker rider LA15
    lel-tracker updates --limit 5
    lel-tracker weather "Brampton S"
    lel-tracker watch --interval 120
"""

import asyncio
import logging
import sys
from zoneinfo import ZoneInfo

import click

from lel_tracker.config import settings
from lel_tracker.features.feed import FeedUnavailable, PeriodicRefresher, TrackingService
from lel_tracker.features.riders import (
    RiderMetrics,
    TrackingSnapshot,
    count_by_variant,
    group_by_wave,
    latest_updates,
    rank_rider,
    search_riders,
    sort_by_rider_no,
    wave_statistics,
)
from lel_tracker.features.route import get_route_table
from lel_tracker.features.timing import get_time_resolver
from lel_tracker.features.weather import compass_point, weather_for_control, wind_for_control
from lel_tracker.shared.formatters import (
    format_distance_km,
    format_elapsed,
    format_leg_time,
    format_speed,
    format_time_ago,
)


def _configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def _metrics() -> RiderMetrics:
    return RiderMetrics(
        get_route_table(),
        get_time_resolver(),
        dnf_threshold_hours=settings.dnf_threshold_hours,
    )


async def _load_snapshot(service: TrackingService) -> TrackingSnapshot:
    """Fresh snapshot, or the stale one with a notice when the feed is down."""
    try:
        return await service.refresh()
    except FeedUnavailable as e:
        if e.stale is None:
            raise click.ClickException(str(e))
        click.echo(f"Warning: showing stale data ({e})", err=True)
        return e.stale


def _fetch_snapshot() -> TrackingSnapshot:
    service = TrackingService.from_settings(settings, resolver=get_time_resolver())
    return asyncio.run(_load_snapshot(service))


@click.group()
def cli():
    """LEL 2025 rider tracking."""
    _configure_logging()


# =============================================================================
# Commands
# =============================================================================

@cli.command()
@click.option("--by-wave", is_flag=True, help="Break the numbers down per start wave")
def summary(by_wave):
    """Overall counts, averages and start locations."""
    snapshot = _fetch_snapshot()
    metrics = _metrics()
    now = metrics.resolver.now()

    _print_stats("All riders", wave_statistics(snapshot.riders, metrics, now))

    click.echo()
    click.echo("Start locations:")
    for code, count in count_by_variant(snapshot.riders, metrics.route).items():
        click.echo(f"  {code:<10} {count}")

    if by_wave:
        for code, riders in group_by_wave(snapshot.riders, metrics.route).items():
            click.echo()
            start = metrics.route.wave_start_time(riders[0].rider_no)
            _print_stats(f"Wave {code or '?'} ({start})", wave_statistics(riders, metrics, now))

    if snapshot.last_updated:
        click.echo()
        click.echo(f"Feed updated: {snapshot.last_updated.isoformat()}")


def _print_stats(title, stats):
    click.echo(f"{title}: {stats.total} riders")
    click.echo(
        f"  not started {stats.not_started} | in progress {stats.in_progress} | "
        f"finished {stats.finished} | DNF {stats.dnf}"
    )
    click.echo(f"  avg distance {format_distance_km(round(stats.avg_distance_km, 1))}, "
               f"avg speed {format_speed(stats.avg_speed_kmh)}, "
               f"completion {stats.completion_rate}%")


@cli.command()
@click.argument("rider_no")
def rider(rider_no):
    """Progress, rank, history and next-control ETA for one rider."""
    snapshot = _fetch_snapshot()
    metrics = _metrics()
    now = metrics.resolver.now()

    found = snapshot.get_rider(rider_no.upper())
    if found is None:
        raise click.ClickException(f"Rider {rider_no} not found")

    variant = metrics.variant(found)
    status = metrics.display_status(found, now)
    click.echo(f"{found.rider_no} {found.name}")
    click.echo(f"Status: {status.value}   Start: {variant.start_name}   "
               f"Wave start: {metrics.route.wave_start_time(found.rider_no)}")
    click.echo(f"Distance: {format_distance_km(metrics.distance_covered(found))} "
               f"({metrics.progress_percent(found):.0f}%)   "
               f"Avg speed: {format_speed(metrics.average_speed(found))}")

    since = metrics.time_since_last_checkpoint(found, now)
    if since:
        click.echo(f"Last seen: {found.last_checkpoint.name}, {since}")

    rank = rank_rider(found, snapshot.riders, metrics)
    if rank:
        click.echo(f"Rank: {rank.position} of {rank.total_considered}")

    eta = metrics.next_control_eta(found)
    if eta:
        line = (f"Next: {eta.control.name} in {format_distance_km(round(eta.distance_km, 1))}, "
                f"ETA {eta.eta.strftime('%a %H:%M')}")
        if settings.secondary_timezone:
            home = eta.eta.astimezone(ZoneInfo(settings.secondary_timezone))
            line += f" ({home.strftime('%a %H:%M')} {settings.secondary_timezone})"
        click.echo(line)

    history = metrics.checkpoint_history(found, now)
    if history:
        click.echo()
        click.echo(f"{'Checkpoint':<16}{'Time':<16}{'km':>7}  {'Elapsed':<12}{'Leg':<10}Speed")
        for row in history:
            km = f"{row.km:.0f}" if row.km is not None else "?"
            leg = "" if row.is_start else format_leg_time(row.leg_minutes)
            speed = "" if row.is_start else format_speed(row.leg_speed_kmh)
            click.echo(
                f"{row.checkpoint.name:<16}{row.checkpoint.time:<16}{km:>7}  "
                f"{format_elapsed(row.elapsed_minutes):<12}{leg:<10}{speed}"
            )


@cli.command()
@click.option("--limit", default=None, type=int, help="Maximum number of entries")
@click.option("--hours", default=None, type=int, help="Look-back window in hours")
def updates(limit, hours):
    """Most recent checkpoint arrivals."""
    snapshot = _fetch_snapshot()
    entries = latest_updates(
        snapshot.riders,
        get_time_resolver(),
        window_hours=hours or settings.update_window_hours,
        limit=limit or settings.latest_updates_limit,
    )
    if not entries:
        click.echo("No checkpoint arrivals in the window.")
        return
    for entry in entries:
        click.echo(f"{entry.rider_no:<6} {entry.rider_name:<24} {entry.checkpoint:<16} "
                   f"{entry.time:<16} {format_time_ago(entry.minutes_ago)}")


@cli.command()
@click.argument("query")
def search(query):
    """Find riders by name or rider number."""
    snapshot = _fetch_snapshot()
    metrics = _metrics()
    found = sort_by_rider_no(search_riders(snapshot.riders, query))
    if not found:
        click.echo(f"No riders match {query!r}")
        return
    for r in found:
        click.echo(f"{r.rider_no:<6} {r.name:<24} "
                   f"{format_distance_km(metrics.distance_covered(r)):>8}  {r.status.value}")


@cli.command()
@click.argument("control")
def weather(control):
    """Current weather and wind at a control."""
    asyncio.run(_show_weather(control))


async def _show_weather(control: str):
    service = TrackingService.from_settings(settings, resolver=get_time_resolver())
    try:
        report = await service.refresh_weather()
    except FeedUnavailable as e:
        raise click.ClickException(str(e))

    route = get_route_table()
    block = weather_for_control(report, control, route)
    if block is None:
        raise click.ClickException(f"No weather for {control}")

    current = block.current
    click.echo(f"{block.control_name}: {current.description or current.condition or '—'}")
    if current.temperature is not None:
        click.echo(f"  {current.temperature:.0f}°{current.temperature_unit}")
    if current.wind_speed is not None and current.wind_direction is not None:
        line = f"  Wind {current.wind_speed:.0f} km/h from {compass_point(current.wind_direction)}"
        effect = wind_for_control(report, control, route)
        if effect:
            line += f" ({effect.kind.value}, {effect.component_pct:.0f}%)"
        click.echo(line)
    if block.forecast_24h and block.forecast_24h.rain_probability is not None:
        click.echo(f"  Rain next 24h: {block.forecast_24h.rain_probability:.0f}%")


@cli.command()
@click.option("--interval", default=None, type=int, help="Seconds between refreshes")
def watch(interval):
    """Keep refreshing and print new arrivals until interrupted."""
    try:
        asyncio.run(_watch(interval or settings.refresh_interval_seconds))
    except KeyboardInterrupt:
        click.echo("Stopped.")


def _arrival_line(entry, resolver) -> str:
    """One `watch` line, stamped with the event-local clock."""
    return (f"[{resolver.now().strftime('%H:%M:%S')}] {entry.rider_no} "
            f"{entry.rider_name} reached {entry.checkpoint} at {entry.time}")


async def _watch(interval: int):
    resolver = get_time_resolver()
    service = TrackingService.from_settings(settings, resolver=resolver)
    seen: set[tuple[str, str, str]] = set()

    async def tick():
        snapshot = await service.refresh(force=True)
        for entry in latest_updates(
            snapshot.riders,
            resolver,
            window_hours=settings.update_window_hours,
            limit=settings.latest_updates_limit,
        ):
            key = (entry.rider_no, entry.checkpoint, entry.time)
            if key in seen:
                continue
            seen.add(key)
            click.echo(_arrival_line(entry, resolver))

    refresher = PeriodicRefresher(tick, interval, name="tracking refresh")
    await refresher.start()
    try:
        while refresher.running:
            await asyncio.sleep(1)
    finally:
        await refresher.stop()


if __name__ == "__main__":
    cli()
