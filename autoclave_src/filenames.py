"""Scilog file naming on the autoclave.

Every cycle leaves two files in a per-day directory:

    /opt/data/scilog/YYYY/MM/DD/S{YYYYMMDD}_{cycle:05d}_{serial}.txt  (log)
    /opt/data/scilog/YYYY/MM/DD/S{YYYYMMDD}_{cycle:05d}_{serial}.cpt  (cycle data)
"""

import logging
import re
from datetime import date
from typing import Optional

from .config import config
from .models import CycleInfo, FileInfo, pad_cycle_number

logger = logging.getLogger(__name__)

SCILOG_FILENAME_PATTERN = re.compile(
    r"^S(\d{4})(\d{2})(\d{2})_(\d+)_([A-Z0-9]+)\.(txt|cpt)$",
    re.IGNORECASE,
)

# File stem without extension, as used in the archive page's cyclesInfo
SCILOG_STEM_PATTERN = re.compile(r"^S\d{8}_\d+_[A-Z0-9]+$", re.IGNORECASE)

# Log file names embedded in arbitrary text (directory listings, HTML)
SCILOG_TXT_SEARCH_PATTERN = re.compile(r"S\d{8}_\d+_[A-Z0-9]+\.txt", re.IGNORECASE)

_DAY_DIRECTORY_PATTERN = re.compile(r"/(\d{4})/(\d{2})/(\d{2})/?$")


def parse_scilog_filename(filepath: str) -> Optional[FileInfo]:
    """Parse a scilog path or bare file name.

    Only the last path segment is examined. Returns None when it does not
    follow the naming convention or names an impossible date.
    """
    filename = filepath.rsplit("/", 1)[-1]

    match = SCILOG_FILENAME_PATTERN.match(filename)
    if not match:
        logger.debug(f"Filename doesn't match scilog pattern: {filepath!r}")
        return None

    year, month, day, cycle_number, serial_number, extension = match.groups()

    try:
        file_date = date(int(year), int(month), int(day))
    except ValueError:
        logger.debug(f"Scilog filename has an invalid date: {filepath!r}")
        return None

    return FileInfo(
        filename=filepath,
        year=year,
        month=month,
        day=day,
        cycle_number=cycle_number,
        serial_number=serial_number,
        date=file_date,
        extension=extension.lower(),
    )


def is_scilog_stem(file_name: str) -> bool:
    """Check a cyclesInfo file_name against the naming convention."""
    return bool(SCILOG_STEM_PATTERN.match(file_name or ""))


def build_day_directory(year: int | str, month: int | str, day: int | str) -> str:
    """Directory holding one day's files: /opt/data/scilog/2025/12/12."""
    return (
        f"{config.SCILOG_BASE_PATH}/{int(year):04d}/{int(month):02d}/{int(day):02d}"
    )


def build_scilog_path(
    year: int | str,
    month: int | str,
    day: int | str,
    cycle_number: int | str,
    serial_number: str,
    ext: str = "cpt",
) -> str:
    """Build the on-device path of a cycle's file from its fields."""
    directory = build_day_directory(year, month, day)
    date_str = f"{int(year):04d}{int(month):02d}{int(day):02d}"
    return f"{directory}/S{date_str}_{pad_cycle_number(cycle_number)}_{serial_number}.{ext}"


def cycle_info_to_file_path(cycle: CycleInfo, ext: str = "txt") -> str:
    """Build the path of a cycle's file from its archive entry.

    The directory comes from the device's own start timestamp (local time),
    which may differ from any date the caller has in mind.
    """
    started = cycle.start_datetime
    directory = build_day_directory(started.year, started.month, started.day)
    return f"{directory}/{cycle.file_name}.{ext}"


def parse_day_directory(dir_path: str) -> Optional[tuple[str, str, str]]:
    """Extract (year, month, day) from a path ending in /YYYY/MM/DD."""
    match = _DAY_DIRECTORY_PATTERN.search(dir_path)
    if not match:
        return None
    return match.group(1), match.group(2), match.group(3)


def find_scilog_log_names(text: str) -> list[str]:
    """All distinct .txt scilog names in a blob of text, in order of appearance."""
    return list(dict.fromkeys(SCILOG_TXT_SEARCH_PATTERN.findall(text or "")))
