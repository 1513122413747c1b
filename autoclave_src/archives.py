"""Cycle catalog embedded in the archive page (/us/archives.php).

The page carries the whole catalog as a script literal::

    var cyclesInfo = [{"records_id": 12, "cycle_start_time": 1765530000,
                       "file_name": "S20251212_00391_710125H00004",
                       "cycle_number": 391,
                       "cycle_id": "STATCLAVE_120V_solid_wrapped_132_4min"}, ...];

All knowledge of the page structure lives in extract_cycles_info().
"""

import json
import logging
import re
from datetime import date
from typing import Optional

from .filenames import is_scilog_stem
from .models import CycleInfo

logger = logging.getLogger(__name__)

CYCLES_INFO_MARKER = re.compile(r"cyclesInfo\s*=\s*(?=\[)")


def _find_array_literal(text: str, start: int) -> Optional[str]:
    """Return the bracket-balanced literal starting at text[start] == '['."""
    depth = 0
    quote = None
    escaped = False

    for pos in range(start, len(text)):
        char = text[pos]

        if quote:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = None
            continue

        if char in ("'", '"'):
            quote = char
        elif char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return text[start:pos + 1]

    return None


def extract_cycles_info(html: str) -> Optional[list[CycleInfo]]:
    """Extract the cyclesInfo catalog from the archive page HTML.

    Returns None when the marker is missing or the literal is not valid
    JSON. Entries that lack fields or whose file_name does not follow the
    scilog naming convention are dropped.
    """
    match = CYCLES_INFO_MARKER.search(html or "")
    if not match:
        logger.error("Could not find cyclesInfo in archives page")
        return None

    literal = _find_array_literal(html, match.end())
    if literal is None:
        logger.error("cyclesInfo literal in archives page is not terminated")
        return None

    trailer = html[match.end() + len(literal):].lstrip()
    if not trailer.startswith(";"):
        logger.debug("cyclesInfo literal is not followed by ';'")

    try:
        raw_entries = json.loads(literal)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse cyclesInfo JSON: {e}")
        return None

    if not isinstance(raw_entries, list):
        logger.error(f"cyclesInfo is not an array: {type(raw_entries).__name__}")
        return None

    cycles = []
    for entry in raw_entries:
        try:
            cycle = CycleInfo.from_dict(entry)
        except (KeyError, TypeError, ValueError) as e:
            logger.debug(f"Skipping unreadable cyclesInfo entry {entry!r}: {e}")
            continue

        if not is_scilog_stem(cycle.file_name):
            logger.debug(f"Skipping cyclesInfo entry with file_name {cycle.file_name!r}")
            continue

        cycles.append(cycle)

    if len(cycles) != len(raw_entries):
        logger.warning(f"Dropped {len(raw_entries) - len(cycles)} malformed cyclesInfo entries")

    return cycles


def filter_cycles_by_date(
    cycles: list[CycleInfo],
    year: int | str,
    month: int | str,
    day: int | str | None = None,
) -> list[CycleInfo]:
    """Keep cycles that started in the given year/month (and day), local time."""
    year, month = int(year), int(month)
    day = int(day) if day else None

    result = []
    for cycle in cycles:
        started = cycle.start_datetime
        if started.year != year or started.month != month:
            continue
        if day is not None and started.day != day:
            continue
        result.append(cycle)
    return result


def filter_cycles_in_range(
    cycles: list[CycleInfo],
    start_date: date,
    end_date: date,
) -> list[CycleInfo]:
    """Keep cycles whose local start date falls within [start_date, end_date]."""
    return [c for c in cycles if start_date <= c.start_datetime.date() <= end_date]
