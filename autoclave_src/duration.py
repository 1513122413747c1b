"""Cycle duration from cycle data."""

from .config import config
from .log_parser import parse_cycle_log
from .models import CycleDuration, CycleTelemetry, DurationSource


def count_samples(series: str) -> int:
    """Number of readings in a comma- or whitespace-separated series."""
    if not series:
        return 0
    readings = series.split(",") if "," in series else series.split()
    return len([s for s in readings if s.strip()])


def calculate_cycle_duration(telemetry: CycleTelemetry) -> CycleDuration:
    """Duration of a cycle in minutes.

    Uses the CYCLE COMPLETE offset from the log when there is one, else
    estimates from the number of temperature samples (one every 5 seconds),
    else falls back to a 30 minute placeholder. The result's source tells
    the caller which one it got.
    """
    parsed = parse_cycle_log(telemetry.log) if telemetry.log else None
    if parsed is not None and parsed.cycle_complete is not None:
        return CycleDuration(minutes=parsed.cycle_complete, source=DurationSource.LOG)

    samples = count_samples(telemetry.temp)
    if samples:
        # Half-up rounding to whole minutes
        minutes = int(samples * config.SAMPLE_INTERVAL_SECONDS / 60 + 0.5)
        return CycleDuration(minutes=minutes, source=DurationSource.SAMPLE_DENSITY)

    return CycleDuration(
        minutes=config.DEFAULT_CYCLE_DURATION_MINUTES,
        source=DurationSource.DEFAULT,
    )
