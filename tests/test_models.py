"""Tests for data model decoding."""

import sys
from pathlib import Path

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from autoclave_src.models import CycleTelemetry, FirmwareType


class TestCycleTelemetryFromDict:
    """Test decoding a cycle data body."""

    def test_succeeded_true(self):
        assert CycleTelemetry.from_dict({"succeeded": True}).succeeded is True
        assert CycleTelemetry.from_dict({"succeeded": "TRUE"}).succeeded is True
        assert CycleTelemetry.from_dict({"succeeded": " true "}).succeeded is True

    def test_succeeded_false_string(self):
        """Test that the string "false" is not taken as success."""
        assert CycleTelemetry.from_dict({"succeeded": "false"}).succeeded is False

    def test_succeeded_other_values(self):
        assert CycleTelemetry.from_dict({}).succeeded is False
        assert CycleTelemetry.from_dict({"succeeded": 1}).succeeded is False
        assert CycleTelemetry.from_dict({"succeeded": "yes"}).succeeded is False


class TestFirmwareType:
    """Test firmware type values."""

    def test_values(self):
        assert FirmwareType("nginx") == FirmwareType.NGINX
        assert FirmwareType("mqx") == FirmwareType.MQX
