"""Parser for the cycle log printed by STATCLAVE G4 units.

The log is the plain-text report the unit prints at the end of a cycle,
for example::

    STATCLAVE G4 SBS1R118
    SN 710123B00004
    Unit #  :        000
    1.2uS / 0.7ppm
    CYCLE NUMBER  001755
     9:54:52  08/10/2025
    Solid/Wrapped
    132 C/4min
    Min. steri. Values:
    132.4 C  205kPa
    Max. steri. Values:
    134.1 C  216kPa
    STERILIZING    25:35
    DRYING START   29:40
    DRYING END     59:40
    CYCLE COMPLETE 60:05
    Digital Signature #
    5A3C9F0E21B7

Dates are DD/MM/YYYY. Fields are independent of each other's order except
the min/max values and the signature, which sit on the line after their label.
"""

import logging
import re
from datetime import datetime
from typing import Any, Optional

from .models import ParsedCycleLog

logger = logging.getLogger(__name__)

UNIT_NUMBER_PATTERN = re.compile(r"Unit #\s*:\s*(\d+)")
CYCLE_NUMBER_PATTERN = re.compile(r"CYCLE NUMBER\s+(\d+)")
DATETIME_PATTERN = re.compile(r"(\d{1,2}):(\d{2}):(\d{2})\s+(\d{2})/(\d{2})/(\d{4})")
TARGET_PATTERN = re.compile(r"(\d+)\s*C/(\d+)min")
STERI_VALUES_PATTERN = re.compile(r"(\d+\.?\d*)\s*C\s+(\d+)kPa")
STERILIZING_PATTERN = re.compile(r"STERILIZING\s+(\d+):(\d+)")
DRYING_START_PATTERN = re.compile(r"DRYING START\s+(\d+):(\d+)")
DRYING_END_PATTERN = re.compile(r"DRYING END\s+(\d+):(\d+)")
CYCLE_COMPLETE_PATTERN = re.compile(r"CYCLE COMPLETE\s+(\d+):(\d+)")

MIN_VALUES_LABEL = "Min. steri. Values:"
MAX_VALUES_LABEL = "Max. steri. Values:"
SIGNATURE_LABEL = "Digital Signature #"


def _minutes(pattern: re.Pattern, line: str) -> Optional[int]:
    """Minute component of an MM:SS offset on a phase line."""
    match = pattern.match(line)
    return int(match.group(1)) if match else None


def _parse_datetime(match: re.Match) -> Optional[datetime]:
    hours, minutes, seconds, day, month, year = (int(g) for g in match.groups())
    try:
        return datetime(year, month, day, hours, minutes, seconds)
    except ValueError:
        return None


def parse_cycle_log(log_text: str) -> Optional[ParsedCycleLog]:
    """Parse a cycle log into structured fields.

    Returns None unless both the model line and the CYCLE NUMBER line were
    found. Any other field that is missing or unreadable is left as None.
    """
    if not log_text:
        return None

    lines = [line.strip() for line in log_text.splitlines() if line.strip()]
    if not lines:
        return None

    fields: dict[str, Any] = {"model": lines[0]}

    for i, line in enumerate(lines):
        next_line = lines[i + 1] if i + 1 < len(lines) else None

        if line.startswith("SN "):
            fields["serial_number"] = line[3:].strip()

        match = UNIT_NUMBER_PATTERN.search(line)
        if match:
            fields["unit_number"] = match.group(1)

        if "uS" in line and "ppm" in line:
            fields["water_quality"] = line

        if line.startswith("CYCLE NUMBER"):
            match = CYCLE_NUMBER_PATTERN.match(line)
            if match:
                fields["cycle_number"] = int(match.group(1))

        match = DATETIME_PATTERN.search(line)
        if match:
            cycle_datetime = _parse_datetime(match)
            if cycle_datetime:
                fields["cycle_datetime"] = cycle_datetime

        # Program name ("Solid/Wrapped") or target ("132 C/4min")
        if "/" in line and ":" not in line and "ppm" not in line:
            match = TARGET_PATTERN.search(line)
            if match:
                fields["target_temp"] = int(match.group(1))
                fields["target_time"] = int(match.group(2))
            elif "Values" not in line:
                fields["cycle_program"] = line

        if line in (MIN_VALUES_LABEL, MAX_VALUES_LABEL) and next_line:
            match = STERI_VALUES_PATTERN.search(next_line)
            if match:
                prefix = "min" if line == MIN_VALUES_LABEL else "max"
                fields[f"{prefix}_temp"] = float(match.group(1))
                fields[f"{prefix}_pressure"] = int(match.group(2))

        # The unit prints a single offset for the sterilizing phase
        if line.startswith("STERILIZING"):
            minutes = _minutes(STERILIZING_PATTERN, line)
            if minutes is not None:
                fields["sterilizing_start"] = minutes
                fields["sterilizing_end"] = minutes

        if line.startswith("DRYING START"):
            minutes = _minutes(DRYING_START_PATTERN, line)
            if minutes is not None:
                fields["drying_start"] = minutes

        if line.startswith("DRYING END"):
            minutes = _minutes(DRYING_END_PATTERN, line)
            if minutes is not None:
                fields["drying_end"] = minutes

        if line.startswith("CYCLE COMPLETE"):
            minutes = _minutes(CYCLE_COMPLETE_PATTERN, line)
            if minutes is not None:
                fields["cycle_complete"] = minutes

        if line == SIGNATURE_LABEL and next_line and not next_line.startswith("-"):
            fields["digital_signature"] = next_line

    if "cycle_number" not in fields:
        logger.debug(f"Cycle log for model {fields['model']!r} has no CYCLE NUMBER line")
        return None

    return ParsedCycleLog(**fields)
