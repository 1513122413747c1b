"""Data models for the autoclave integration."""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

CYCLE_NUMBER_PAD = 5

# File stems carry the device-padded cycle number: S20251212_00391_710125H00004
_STEM_CYCLE_NUMBER = re.compile(r"_(\d+)_")


class SterilizationCycleType(Enum):
    """Canonical sterilization cycle type assigned to a device cycle."""
    STEAM_FLASH = "STEAM_FLASH"          # Immediate-use / flash cycle
    STEAM_PREVACUUM = "STEAM_PREVACUUM"  # Dynamic air removal (pre-vacuum)
    STEAM_GRAVITY = "STEAM_GRAVITY"      # Gravity displacement


class FirmwareType(Enum):
    """Web server family of an autoclave's firmware."""
    NGINX = "nginx"  # Newer units: archives.php, cycleData.php
    MQX = "mqx"      # Older Freescale MQX units: POST to .cgi endpoints


class DurationSource(Enum):
    """Where a cycle duration value came from."""
    LOG = "log"                        # CYCLE COMPLETE line of the cycle log
    SAMPLE_DENSITY = "sample_density"  # Estimated from temperature sample count
    DEFAULT = "default"                # Placeholder, nothing to measure


def pad_cycle_number(cycle_number: int | str) -> str:
    """Left-pad a cycle number to the on-device width ("391" -> "00391")."""
    return str(cycle_number).strip().zfill(CYCLE_NUMBER_PAD)


@dataclass
class DayIndex:
    """Cycles recorded on one day, as listed by the cycles index."""
    day: str
    cycles: list[str] = field(default_factory=list)


@dataclass
class MonthIndex:
    """A month in the cycles index; older firmware also embeds days."""
    month: str
    days: Optional[list[DayIndex]] = None


@dataclass
class CycleIndex:
    """One year of the device's self-reported cycle catalog."""
    year: str
    months: list[MonthIndex] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "CycleIndex":
        """Build from a cycles.cgi entry. Raises ValueError on bad shape."""
        if not isinstance(data, dict) or "year" not in data:
            raise ValueError(f"Not a cycle index entry: {data!r}")

        months = []
        for month_data in data.get("months") or []:
            days = None
            if month_data.get("days") is not None:
                days = [
                    DayIndex(day=str(d["day"]), cycles=[str(c) for c in d.get("cycles", [])])
                    for d in month_data["days"]
                ]
            months.append(MonthIndex(month=str(month_data["month"]), days=days))

        return cls(year=str(data["year"]), months=months)


@dataclass(frozen=True)
class CycleInfo:
    """A cycle as advertised by the device's archive page."""
    records_id: int
    cycle_start_time: int  # Unix timestamp (seconds)
    file_name: str         # e.g. "S20251212_00391_710125H00004"
    cycle_number: int
    cycle_id: str          # e.g. "STATCLAVE_120V_solid_wrapped_132_4min"

    @classmethod
    def from_dict(cls, data: dict) -> "CycleInfo":
        """Build from a cyclesInfo entry. Raises KeyError/ValueError/TypeError."""
        return cls(
            records_id=int(data["records_id"]),
            cycle_start_time=int(data["cycle_start_time"]),
            file_name=str(data["file_name"]),
            cycle_number=int(data["cycle_number"]),
            cycle_id=str(data.get("cycle_id") or ""),
        )

    @property
    def start_datetime(self) -> datetime:
        """Cycle start in local time; the device timestamp is authoritative."""
        return datetime.fromtimestamp(self.cycle_start_time)

    @property
    def padded_cycle_number(self) -> str:
        """Cycle number as it appears in the file name."""
        match = _STEM_CYCLE_NUMBER.search(self.file_name)
        if match:
            return match.group(1)
        return pad_cycle_number(self.cycle_number)


@dataclass
class CycleTelemetry:
    """Sampled data for one cycle, as returned by cycleData.php."""
    date: str = ""              # "2025-10-08"
    number: Optional[int] = None
    runmode: Optional[int] = None
    display_units: str = "metric"
    log: str = ""               # Full cycle log text
    status: str = ""            # "Solid/Wrapped / 132°C/4min"
    x_axis_points: Optional[int] = None
    temp: str = ""              # Space or comma separated readings
    pressure: str = ""
    succeeded: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "CycleTelemetry":
        """Build from the decoded JSON body. Raises ValueError on bad shape."""
        if not isinstance(data, dict):
            raise ValueError(f"Cycle data is not an object: {type(data).__name__}")

        def _int(value: Any) -> Optional[int]:
            try:
                return int(value)
            except (TypeError, ValueError):
                return None

        def _bool(value: Any) -> bool:
            if isinstance(value, str):
                return value.strip().lower() == "true"
            return value is True

        return cls(
            date=str(data.get("date") or ""),
            number=_int(data.get("number")),
            runmode=_int(data.get("runmode")),
            display_units=str(data.get("display_units") or "metric"),
            log=str(data.get("log") or ""),
            status=str(data.get("status") or ""),
            x_axis_points=_int(data.get("x_axis_points")),
            temp=str(data.get("temp") or ""),
            pressure=str(data.get("pressure") or ""),
            succeeded=_bool(data.get("succeeded")),
        )


@dataclass
class ParsedCycleLog:
    """Structured fields decoded from a cycle log printout.

    Only model and cycle_number are guaranteed; everything else is None
    when the corresponding line was absent or unreadable.
    """
    model: str                  # "STATCLAVE G4 SBS1R118"
    cycle_number: int           # 1755
    serial_number: Optional[str] = None   # "710123B00004"
    unit_number: Optional[str] = None     # "000"
    water_quality: Optional[str] = None   # "1.2uS / 0.7ppm"
    cycle_datetime: Optional[datetime] = None
    cycle_program: Optional[str] = None   # "Solid/Wrapped"
    target_temp: Optional[int] = None     # 132 (C)
    target_time: Optional[int] = None     # 4 (minutes)
    min_temp: Optional[float] = None
    max_temp: Optional[float] = None
    min_pressure: Optional[int] = None    # kPa
    max_pressure: Optional[int] = None
    sterilizing_start: Optional[int] = None  # minutes into cycle
    sterilizing_end: Optional[int] = None
    drying_start: Optional[int] = None
    drying_end: Optional[int] = None
    cycle_complete: Optional[int] = None
    digital_signature: Optional[str] = None


@dataclass
class FileInfo:
    """Fields decoded from a scilog file name."""
    filename: str       # As given, e.g. /opt/data/scilog/2025/12/12/S20251212_00391_710125H00004.txt
    year: str
    month: str
    day: str
    cycle_number: str   # "00391"
    serial_number: str  # "710125H00004"
    date: date
    extension: str = "txt"

    @property
    def number(self) -> int:
        """Cycle number without padding."""
        return int(self.cycle_number)


@dataclass
class FlattenedCycle:
    """A single cycle located by calendar day, used for enumeration and sync."""
    year: str
    month: str
    day: str
    cycle_number: str  # Zero-padded, "00391"
    date: date

    @property
    def number(self) -> int:
        return int(self.cycle_number)


@dataclass
class DayCycles:
    """Cycle numbers recorded on one day of a month."""
    day: str
    cycles: list[str] = field(default_factory=list)


@dataclass
class ConnectionResult:
    """Outcome of a connection test."""
    success: bool
    model: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {"success": self.success}
        if self.model is not None:
            result["model"] = self.model
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass
class CycleDuration:
    """Cycle duration in minutes with its provenance."""
    minutes: int
    source: DurationSource

    @property
    def is_estimate(self) -> bool:
        """True unless the value was read from the cycle log."""
        return self.source != DurationSource.LOG
