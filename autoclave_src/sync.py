"""Cycle enumeration and incremental sync.

The device offers no delta endpoint: every call here re-reads the catalog.
Per-month fetches run one after another because the unit's web server
serves a single request at a time.

Newer (nginx) units are answered from the archive page catalog. Older MQX
units have no archive page; their days and cycles come from the cycles.cgi
index, a month directory listing, or a cycles.cgi POST.
"""

from collections.abc import Iterable
from datetime import date, timedelta
from enum import Enum
from typing import Optional

from .archives import filter_cycles_by_date, filter_cycles_in_range
from .client import AutoclaveClient
from .config import config
from .exceptions import AutoclaveError
from .filenames import parse_scilog_filename
from .listing import list_via_file_reader
from .models import (
    CycleIndex,
    CycleInfo,
    DayCycles,
    FirmwareType,
    FlattenedCycle,
    MonthIndex,
    pad_cycle_number,
)


class CycleRange(Enum):
    """Date windows for fetch_cycles_for_range()."""
    TODAY = "today"
    YESTERDAY = "yesterday"
    WEEK = "week"    # The 7 days before today
    MONTH = "month"  # The 30 days before today

    def bounds(self, today: date) -> tuple[date, date]:
        """Inclusive (start, end) dates of the window."""
        yesterday = today - timedelta(days=1)
        if self == CycleRange.TODAY:
            return today, today
        if self == CycleRange.YESTERDAY:
            return yesterday, yesterday
        if self == CycleRange.WEEK:
            return today - timedelta(days=7), yesterday
        return today - timedelta(days=30), yesterday


def _flatten_info(cycle: CycleInfo) -> FlattenedCycle:
    started = cycle.start_datetime
    return FlattenedCycle(
        year=f"{started.year:04d}",
        month=f"{started.month:02d}",
        day=f"{started.day:02d}",
        cycle_number=cycle.padded_cycle_number,
        date=started.date(),
    )


def _flatten_day(cycle_date: date, cycle_number: str) -> FlattenedCycle:
    return FlattenedCycle(
        year=f"{cycle_date.year:04d}",
        month=f"{cycle_date.month:02d}",
        day=f"{cycle_date.day:02d}",
        cycle_number=pad_cycle_number(cycle_number),
        date=cycle_date,
    )


def _group_days(entries: Iterable[tuple[str, str]]) -> list[DayCycles]:
    """Group (day, cycle number) pairs into days, both in ascending order."""
    day_map: dict[str, list[str]] = {}
    for day, cycle_number in entries:
        day_map.setdefault(day.zfill(2), []).append(pad_cycle_number(cycle_number))

    return [
        DayCycles(day=day, cycles=sorted(set(cycles)))
        for day, cycles in sorted(day_map.items())
    ]


def _embedded_days(month_data: MonthIndex) -> list[DayCycles]:
    """Days a cycles index entry carries for its month (older firmware)."""
    return _group_days(
        (d.day, c) for d in month_data.days or [] for c in d.cycles
    )


def _index_month_days(index: list[CycleIndex], year: str, month: str) -> list[DayCycles]:
    for year_data in index:
        if year_data.year.zfill(4) != str(year).zfill(4):
            continue
        for month_data in year_data.months:
            if month_data.month.zfill(2) == str(month).zfill(2):
                return _embedded_days(month_data)
    return []


def _fetch_month_cycles_mqx(client: AutoclaveClient, year: str, month: str) -> list[DayCycles]:
    """Month cycles on MQX firmware: index days, then directory listing, then POST."""
    days = _index_month_days(client.fetch_available_cycles(), year, month)
    if days:
        client.logger.debug(f"MQX: Using days embedded in the index for {year}/{month}")
        return days

    month_dir = f"{config.SCILOG_BASE_PATH}/{int(year):04d}/{int(month):02d}"
    try:
        names = list_via_file_reader(client, month_dir)
    except AutoclaveError as e:
        client.logger.debug(f"MQX: Month directory listing failed for {month_dir}: {e}")
        names = []

    files = [parse_scilog_filename(name) for name in names]
    days = _group_days((f.day, f.cycle_number) for f in files if f is not None)
    if days:
        client.logger.info(f"MQX: Found {len(days)} day(s) with cycles via directory listing")
        return days

    client.logger.debug(f"MQX: No listing for {year}/{month}, trying cycles.cgi POST")
    days = _index_month_days(client.fetch_month_index_mqx(year, month), year, month)
    if not days:
        client.logger.warning(f"MQX cycles.cgi POST returned no data for {year}/{month}")
    return days


def fetch_month_cycles(
    client: AutoclaveClient,
    year: str,
    month: str,
) -> list[DayCycles]:
    """Cycle numbers per day for one month.

    Returns an empty list if the cycles cannot be fetched.
    """
    client.logger.debug(f"Fetching month cycles for {year}/{month}")

    try:
        if client.detect_firmware() == FirmwareType.MQX:
            return _fetch_month_cycles_mqx(client, year, month)
        all_cycles = client.fetch_all_cycles_from_archives()
    except AutoclaveError as e:
        client.logger.error(f"fetch_month_cycles failed for {year}/{month}: {e}")
        return []

    month_cycles = filter_cycles_by_date(all_cycles, year, month)
    client.logger.debug(f"Found {len(month_cycles)} cycles for {year}/{month} in archives.php")

    return _group_days(
        (f"{c.start_datetime.day:02d}", c.padded_cycle_number) for c in month_cycles
    )


def _latest_cycle_mqx(client: AutoclaveClient) -> Optional[FlattenedCycle]:
    index = client.fetch_available_cycles()
    months = [(y.year, m.month) for y in index for m in y.months]
    if not months:
        client.logger.debug("No cycles found in index")
        return None

    year, month = max(months, key=lambda ym: (int(ym[0]), int(ym[1])))
    days = [d for d in fetch_month_cycles(client, year, month) if d.cycles]
    if not days:
        client.logger.debug(f"No cycles found in latest month {year}/{month}")
        return None

    latest_day = days[-1]
    cycle_date = date(int(year), int(month), int(latest_day.day))
    return _flatten_day(cycle_date, max(latest_day.cycles, key=int))


def get_latest_cycle(client: AutoclaveClient) -> Optional[FlattenedCycle]:
    """The most recently started cycle, or None if there is none or the device is unreachable."""
    try:
        if client.detect_firmware() == FirmwareType.MQX:
            latest = _latest_cycle_mqx(client)
        else:
            all_cycles = client.fetch_all_cycles_from_archives()
            if not all_cycles:
                client.logger.debug("No cycles found in archives")
                return None
            latest = _flatten_info(max(all_cycles, key=lambda c: c.cycle_start_time))
    except (AutoclaveError, ValueError) as e:
        client.logger.error(f"get_latest_cycle failed: {e}")
        return None

    if latest is not None:
        client.logger.debug(
            f"Latest cycle: {latest.cycle_number} on {latest.year}-{latest.month}-{latest.day}"
        )
    return latest


def flatten_all_cycles(
    client: AutoclaveClient,
    since_year: str | None = None,
    since_month: str | None = None,
) -> list[FlattenedCycle]:
    """Every cycle in the device index, optionally from a year/month onwards.

    Months are fetched sequentially. Days embedded in the index (older
    firmware) are used directly on MQX units, and on nginx units when the
    archive page has nothing for that month.

    Raises:
        AutoclaveError: if the cycles index cannot be fetched
    """
    index = client.fetch_available_cycles()
    client.logger.info(
        f"flatten_all_cycles got index with {len(index)} year(s): "
        f"{[y.year for y in index]}"
    )
    mqx = client.detect_firmware() == FirmwareType.MQX

    cycles: list[FlattenedCycle] = []

    for year_data in index:
        if since_year and int(year_data.year) < int(since_year):
            continue

        for month_data in year_data.months:
            if (
                since_year
                and since_month
                and int(year_data.year) == int(since_year)
                and int(month_data.month) < int(since_month)
            ):
                continue

            embedded = _embedded_days(month_data)
            if mqx and embedded:
                days = embedded
            else:
                days = fetch_month_cycles(client, year_data.year, month_data.month)
                if not days and embedded:
                    client.logger.debug(
                        f"Using days embedded in the index for {year_data.year}/{month_data.month}"
                    )
                    days = embedded

            for day_data in days:
                try:
                    cycle_date = date(
                        int(year_data.year), int(month_data.month), int(day_data.day)
                    )
                except ValueError:
                    client.logger.warning(
                        f"Skipping invalid date {year_data.year}/{month_data.month}/{day_data.day}"
                    )
                    continue

                cycles.extend(_flatten_day(cycle_date, c) for c in day_data.cycles)

    client.logger.info(f"flatten_all_cycles returning {len(cycles)} total cycles")
    return cycles


def get_cycles_since(client: AutoclaveClient, last_synced_number: int) -> list[FlattenedCycle]:
    """Cycles numbered above the last synced cycle number (for incremental sync)."""
    all_cycles = flatten_all_cycles(client)
    return [c for c in all_cycles if c.number > last_synced_number]


def _months_between(start_date: date, end_date: date) -> list[tuple[int, int]]:
    """(year, month) pairs from start_date's month to end_date's, inclusive."""
    months = []
    year, month = start_date.year, start_date.month
    while (year, month) <= (end_date.year, end_date.month):
        months.append((year, month))
        year, month = (year + 1, 1) if month == 12 else (year, month + 1)
    return months


def _range_cycles_mqx(
    client: AutoclaveClient,
    start_date: date,
    end_date: date,
) -> list[FlattenedCycle]:
    """Cycles in a date window from MQX firmware, one cycles.cgi POST per month.

    A month that fails is logged and skipped.
    """
    cycles: list[FlattenedCycle] = []

    for year, month in _months_between(start_date, end_date):
        first_day = start_date.day if (year, month) == (start_date.year, start_date.month) else 1
        try:
            index = client.fetch_month_index_mqx(year, month, first_day)
        except AutoclaveError as e:
            client.logger.warning(f"MQX: Failed to fetch cycles for {year}/{month:02d}: {e}")
            continue

        for year_data in index:
            for month_data in year_data.months:
                for day_data in month_data.days or []:
                    try:
                        cycle_date = date(
                            int(year_data.year), int(month_data.month), int(day_data.day)
                        )
                    except ValueError:
                        continue
                    if start_date <= cycle_date <= end_date:
                        cycles.extend(_flatten_day(cycle_date, c) for c in day_data.cycles)

    return cycles


def fetch_cycles_for_range(
    client: AutoclaveClient,
    cycle_range: CycleRange | str,
    today: date | None = None,
) -> list[FlattenedCycle]:
    """Cycles that started within a date window, oldest first.

    Args:
        cycle_range: today, yesterday, week or month; week and month
            exclude today
        today: Reference date (defaults to the current local date)
    """
    cycle_range = CycleRange(cycle_range)
    start_date, end_date = cycle_range.bounds(today or date.today())
    client.logger.info(f"Fetching cycles from {start_date} to {end_date} ({cycle_range.value})")

    if client.detect_firmware() == FirmwareType.MQX:
        in_range = _range_cycles_mqx(client, start_date, end_date)
    else:
        all_cycles = client.fetch_all_cycles_from_archives()
        if not all_cycles:
            client.logger.warning("No cycles found in archives.php")
            return []
        in_range = [
            _flatten_info(c) for c in filter_cycles_in_range(all_cycles, start_date, end_date)
        ]

    client.logger.info(f"Found {len(in_range)} cycles in date range")
    return sorted(in_range, key=lambda c: (c.date, c.number))
