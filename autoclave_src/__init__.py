"""Autoclave Integration - cycle records from networked steam autoclaves.

Discovers, polls and parses sterilization cycle records from STATCLAVE G4
compatible units over their embedded web interface. Parsed records are
handed to the host application, which stores and displays them.
"""

from .models import (
    ConnectionResult,
    CycleDuration,
    CycleIndex,
    CycleInfo,
    CycleTelemetry,
    DayCycles,
    DurationSource,
    FileInfo,
    FirmwareType,
    FlattenedCycle,
    ParsedCycleLog,
    SterilizationCycleType,
)
from .exceptions import (
    AutoclaveConnectionError,
    AutoclaveError,
    AutoclaveHTTPError,
    AutoclaveTimeoutError,
    MalformedResponseError,
)
from .client import AutoclaveClient
from .archives import extract_cycles_info, filter_cycles_by_date
from .filenames import build_scilog_path, cycle_info_to_file_path, parse_scilog_filename
from .log_parser import parse_cycle_log
from .classifier import map_runmode_to_type
from .duration import calculate_cycle_duration
from .listing import fetch_day_cycles, list_directory_files
from .connection import check_autoclave_connection
from .sync import (
    CycleRange,
    fetch_cycles_for_range,
    fetch_month_cycles,
    flatten_all_cycles,
    get_cycles_since,
    get_latest_cycle,
)

__all__ = [
    # Models
    "ConnectionResult",
    "CycleDuration",
    "CycleIndex",
    "CycleInfo",
    "CycleTelemetry",
    "DayCycles",
    "DurationSource",
    "FileInfo",
    "FirmwareType",
    "FlattenedCycle",
    "ParsedCycleLog",
    "SterilizationCycleType",
    # Errors
    "AutoclaveConnectionError",
    "AutoclaveError",
    "AutoclaveHTTPError",
    "AutoclaveTimeoutError",
    "MalformedResponseError",
    # Client
    "AutoclaveClient",
    # Parsing
    "extract_cycles_info",
    "filter_cycles_by_date",
    "build_scilog_path",
    "cycle_info_to_file_path",
    "parse_scilog_filename",
    "parse_cycle_log",
    "map_runmode_to_type",
    "calculate_cycle_duration",
    # Discovery and sync
    "fetch_day_cycles",
    "list_directory_files",
    "check_autoclave_connection",
    "CycleRange",
    "fetch_cycles_for_range",
    "fetch_month_cycles",
    "flatten_all_cycles",
    "get_cycles_since",
    "get_latest_cycle",
]
