"""Tests for cycle type classification."""

import sys
from pathlib import Path

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from autoclave_src.classifier import map_runmode_to_type
from autoclave_src.models import SterilizationCycleType


class TestMapRunmodeToType:
    """Test the cycle type heuristic."""

    def test_flash_from_status(self):
        """Test flash and immediate-use status lines."""
        assert map_runmode_to_type(status="Flash 132°C/3min") == SterilizationCycleType.STEAM_FLASH
        assert map_runmode_to_type(status="IMMEDIATE USE") == SterilizationCycleType.STEAM_FLASH

    def test_prevacuum_from_status(self):
        """Test pre-vacuum status lines."""
        assert map_runmode_to_type(status="Prevac 134°C") == SterilizationCycleType.STEAM_PREVACUUM
        assert map_runmode_to_type(status="Pre-Vac 132°C") == SterilizationCycleType.STEAM_PREVACUUM

    def test_status_checked_before_cycle_id(self):
        """Test that the status line wins over the program identifier."""
        result = map_runmode_to_type(status="Flash", cycle_id="STATCLAVE_prevac_134")

        assert result == SterilizationCycleType.STEAM_FLASH

    def test_prevacuum_from_cycle_id(self):
        """Test pre-vacuum keywords and temperatures in the program identifier."""
        assert (
            map_runmode_to_type(cycle_id="STATCLAVE_120V_pre_vac_4min")
            == SterilizationCycleType.STEAM_PREVACUUM
        )
        assert (
            map_runmode_to_type(cycle_id="STATCLAVE_120V_solid_wrapped_132_4min")
            == SterilizationCycleType.STEAM_PREVACUUM
        )
        assert (
            map_runmode_to_type(cycle_id="STATCLAVE_120V_hollow_134_3min")
            == SterilizationCycleType.STEAM_PREVACUUM
        )

    def test_flash_from_cycle_id(self):
        """Test flash keyword in the program identifier."""
        assert (
            map_runmode_to_type(cycle_id="STATCLAVE_flash_cycle")
            == SterilizationCycleType.STEAM_FLASH
        )

    def test_status_temperature_not_a_hint(self):
        """Test that 132 in the status line alone does not mean pre-vacuum."""
        result = map_runmode_to_type(runmode=2, status="Solid/Wrapped / 132°C/4min")

        assert result == SterilizationCycleType.STEAM_GRAVITY

    def test_gravity_default(self):
        """Test the gravity fallback."""
        assert map_runmode_to_type() == SterilizationCycleType.STEAM_GRAVITY
        assert (
            map_runmode_to_type(cycle_id="STATCLAVE_120V_unwrapped_121_30min")
            == SterilizationCycleType.STEAM_GRAVITY
        )
