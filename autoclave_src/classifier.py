"""Map autoclave cycle descriptions to a sterilization cycle type.

The device does not report a cycle type. This is a best-effort heuristic
over the free-text status line and the program identifier, so the result
should be presented as a suggestion the operator can correct.
"""

from typing import Optional

from .models import SterilizationCycleType

FLASH_KEYWORDS = ("flash", "immediate")
PREVACUUM_KEYWORDS = ("prevac", "pre-vac")
CYCLE_ID_PREVACUUM_KEYWORDS = PREVACUUM_KEYWORDS + ("pre_vac",)

# 132/134 C programs are dynamic air removal cycles; 121 C is gravity
PREVACUUM_TEMPERATURE_HINTS = ("132", "134")


def map_runmode_to_type(
    runmode: Optional[int] = None,
    status: Optional[str] = None,
    cycle_id: Optional[str] = None,
) -> SterilizationCycleType:
    """Classify a cycle from whatever the device told us about it.

    Args:
        runmode: Numeric runmode from cycle data (not used by the heuristic)
        status: Status line, e.g. "Solid/Wrapped / 132°C/4min"
        cycle_id: Program identifier from the archive page,
            e.g. "STATCLAVE_120V_solid_wrapped_132_4min"

    Returns:
        The status line decides first, then the program identifier,
        otherwise STEAM_GRAVITY.
    """
    if status:
        status_lower = status.lower()

        if any(k in status_lower for k in FLASH_KEYWORDS):
            return SterilizationCycleType.STEAM_FLASH

        if any(k in status_lower for k in PREVACUUM_KEYWORDS):
            return SterilizationCycleType.STEAM_PREVACUUM

    if cycle_id:
        cycle_id_lower = cycle_id.lower()

        if any(k in cycle_id_lower for k in FLASH_KEYWORDS):
            return SterilizationCycleType.STEAM_FLASH

        if any(k in cycle_id_lower for k in CYCLE_ID_PREVACUUM_KEYWORDS):
            return SterilizationCycleType.STEAM_PREVACUUM

        if any(t in cycle_id_lower for t in PREVACUUM_TEMPERATURE_HINTS):
            return SterilizationCycleType.STEAM_PREVACUUM

    return SterilizationCycleType.STEAM_GRAVITY
