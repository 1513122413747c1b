"""Tests for scilog file naming."""

from datetime import date

import sys
from pathlib import Path

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from autoclave_src.filenames import (
    build_day_directory,
    build_scilog_path,
    cycle_info_to_file_path,
    find_scilog_log_names,
    is_scilog_stem,
    parse_day_directory,
    parse_scilog_filename,
)
from autoclave_src.models import CycleInfo
from conftest import epoch


class TestParseScilogFilename:
    """Test decoding scilog file names."""

    def test_full_path(self):
        """Test parsing a full on-device path."""
        path = "/opt/data/scilog/2025/12/12/S20251212_00391_710125H00004.txt"
        info = parse_scilog_filename(path)

        assert info is not None
        assert info.filename == path
        assert info.year == "2025"
        assert info.month == "12"
        assert info.day == "12"
        assert info.cycle_number == "00391"
        assert info.number == 391
        assert info.serial_number == "710125H00004"
        assert info.date == date(2025, 12, 12)
        assert info.extension == "txt"

    def test_bare_cpt_name(self):
        """Test parsing a bare cycle data file name."""
        info = parse_scilog_filename("S20251008_01755_710123B00004.cpt")

        assert info.extension == "cpt"
        assert info.number == 1755

    def test_extension_case_insensitive(self):
        """Test that upper-case extensions are accepted and normalized."""
        info = parse_scilog_filename("S20251212_00391_710125H00004.TXT")

        assert info is not None
        assert info.extension == "txt"

    def test_only_last_segment_examined(self):
        """Test that directories don't have to follow the day layout."""
        info = parse_scilog_filename("/some/other/dir/S20251212_00391_710125H00004.txt")

        assert info is not None
        assert info.date == date(2025, 12, 12)

    def test_rejects_non_scilog_names(self):
        """Test rejecting names that don't follow the convention."""
        assert parse_scilog_filename("notes.txt") is None
        assert parse_scilog_filename("S20251212_00391_710125H00004.log") is None
        assert parse_scilog_filename("S2025121_00391_710125H00004.txt") is None
        assert parse_scilog_filename("S20251212_00391_.txt") is None
        assert parse_scilog_filename("S20251212_00391_7101-23b.txt") is None
        assert parse_scilog_filename("") is None

    def test_rejects_impossible_date(self):
        """Test rejecting a name whose date does not exist."""
        assert parse_scilog_filename("S20251312_00391_710125H00004.txt") is None
        assert parse_scilog_filename("S20250230_00391_710125H00004.txt") is None


class TestBuildPaths:
    """Test building on-device paths."""

    def test_build_day_directory(self):
        """Test day directory padding."""
        assert build_day_directory(2025, 3, 7) == "/opt/data/scilog/2025/03/07"
        assert build_day_directory("2025", "03", "07") == "/opt/data/scilog/2025/03/07"

    def test_build_scilog_path_pads_cycle_number(self):
        """Test that the cycle number is padded to five digits."""
        path = build_scilog_path(2025, 12, 12, 391, "710125H00004")

        assert path == "/opt/data/scilog/2025/12/12/S20251212_00391_710125H00004.cpt"

    def test_build_scilog_path_txt(self):
        """Test building the log path from string fields."""
        path = build_scilog_path("2025", "10", "08", "01755", "710123B00004", ext="txt")

        assert path == "/opt/data/scilog/2025/10/08/S20251008_01755_710123B00004.txt"

    def test_built_path_parses_back(self):
        """Test that a built path decodes to the same fields."""
        info = parse_scilog_filename(build_scilog_path(2026, 1, 2, 42, "ABC123", ext="txt"))

        assert (info.year, info.month, info.day) == ("2026", "01", "02")
        assert info.cycle_number == "00042"
        assert info.serial_number == "ABC123"

    def test_cycle_info_to_file_path_uses_device_timestamp(self):
        """Test that the directory comes from the cycle's start time."""
        cycle = CycleInfo(
            records_id=1,
            cycle_start_time=epoch(2025, 12, 12, 9, 0, 0),
            file_name="S20251212_00391_710125H00004",
            cycle_number=391,
            cycle_id="",
        )

        assert cycle_info_to_file_path(cycle) == (
            "/opt/data/scilog/2025/12/12/S20251212_00391_710125H00004.txt"
        )
        assert cycle_info_to_file_path(cycle, ext="cpt").endswith(".cpt")


class TestHelpers:
    """Test directory and text helpers."""

    def test_parse_day_directory(self):
        """Test extracting a date from a day directory."""
        assert parse_day_directory("/opt/data/scilog/2025/12/12") == ("2025", "12", "12")
        assert parse_day_directory("/opt/data/scilog/2025/12/12/") == ("2025", "12", "12")
        assert parse_day_directory("/opt/data/scilog") is None

    def test_is_scilog_stem(self):
        """Test validating archive file stems."""
        assert is_scilog_stem("S20251212_00391_710125H00004")
        assert not is_scilog_stem("S20251212_00391_710125H00004.txt")
        assert not is_scilog_stem("")

    def test_find_scilog_log_names(self):
        """Test scanning text for log names, de-duplicated in order."""
        text = (
            '<a href="S20251212_00392_710125H00004.txt">x</a>\n'
            '<a href="S20251212_00391_710125H00004.txt">x</a>\n'
            '<a href="S20251212_00391_710125H00004.cpt">x</a>\n'
            '<a href="S20251212_00392_710125H00004.txt">x</a>\n'
        )

        assert find_scilog_log_names(text) == [
            "S20251212_00392_710125H00004.txt",
            "S20251212_00391_710125H00004.txt",
        ]
        assert find_scilog_log_names("") == []
