"""Tests for cycle duration."""

import sys
from pathlib import Path

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from autoclave_src.duration import calculate_cycle_duration, count_samples
from autoclave_src.models import CycleTelemetry, DurationSource
from conftest import SAMPLE_LOG


class TestCountSamples:
    """Test counting readings in a series."""

    def test_space_separated(self):
        assert count_samples("20.1 20.4  21.0 ") == 3

    def test_comma_separated(self):
        assert count_samples("20.1,20.4,21.0,") == 3

    def test_mixed_whitespace(self):
        assert count_samples("1 2\n3\t4") == 4

    def test_empty(self):
        assert count_samples("") == 0
        assert count_samples("   ") == 0


class TestCalculateCycleDuration:
    """Test duration sources in order of preference."""

    def test_log_wins_over_samples(self):
        """Test that CYCLE COMPLETE is used when present."""
        telemetry = CycleTelemetry(log=SAMPLE_LOG, temp=" ".join(["100"] * 240))

        duration = calculate_cycle_duration(telemetry)

        assert duration.minutes == 60
        assert duration.source == DurationSource.LOG
        assert duration.is_estimate is False

    def test_sample_density(self):
        """Test the estimate from a 5 second sample interval."""
        telemetry = CycleTelemetry(temp=" ".join(["100"] * 720))

        duration = calculate_cycle_duration(telemetry)

        assert duration.minutes == 60
        assert duration.source == DurationSource.SAMPLE_DENSITY
        assert duration.is_estimate is True

    def test_sample_density_rounds_half_up(self):
        """Test that 90 seconds of samples rounds to 2 minutes."""
        telemetry = CycleTelemetry(temp=",".join(["100"] * 18))

        assert calculate_cycle_duration(telemetry).minutes == 2

    def test_log_without_complete_line(self):
        """Test falling back to samples when the log lacks CYCLE COMPLETE."""
        log = SAMPLE_LOG.replace("CYCLE COMPLETE 60:05\n", "")
        telemetry = CycleTelemetry(log=log, temp=" ".join(["100"] * 360))

        duration = calculate_cycle_duration(telemetry)

        assert duration.minutes == 30
        assert duration.source == DurationSource.SAMPLE_DENSITY

    def test_default(self):
        """Test the placeholder when there is nothing to measure."""
        duration = calculate_cycle_duration(CycleTelemetry())

        assert duration.minutes == 30
        assert duration.source == DurationSource.DEFAULT
        assert duration.is_estimate is True
