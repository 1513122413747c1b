"""Best-effort listing of a day's scilog files.

No firmware guarantees a directory listing endpoint, so listing is an
ordered chain of strategies. Each strategy takes (client, dir_path) and
returns file names; the first non-empty answer wins. An empty result
means "no cycles that day", not an error.
"""

import re
from dataclasses import dataclass
from typing import Callable

from .client import AutoclaveClient
from .exceptions import AutoclaveError
from .filenames import (
    build_day_directory,
    find_scilog_log_names,
    parse_day_directory,
    parse_scilog_filename,
)
from .models import FileInfo


@dataclass(frozen=True)
class ListingStrategy:
    """A named way of listing a directory on the device."""
    name: str
    list_files: Callable[[AutoclaveClient, str], list[str]]


def list_via_file_reader(client: AutoclaveClient, dir_path: str) -> list[str]:
    """Ask file_reader.php for the directory and scan the answer for log names."""
    text = client.read_file(dir_path)
    client.logger.debug(f"Directory response length: {len(text)} chars")
    return find_scilog_log_names(text)


def list_via_archives(client: AutoclaveClient, dir_path: str) -> list[str]:
    """Find the day's log names in the archive page.

    The page names cycles by file stem; each match is returned as the
    corresponding .txt log name.
    """
    parsed = parse_day_directory(dir_path)
    if parsed is None:
        client.logger.error(f"Could not parse day directory {dir_path!r}")
        return []

    year, month, day = parsed
    html = client.fetch_archives_html()

    pattern = re.compile(rf"S{year}{month}{day}_\d+_[A-Z0-9]+(?![A-Za-z0-9])")
    return [f"{stem}.txt" for stem in dict.fromkeys(pattern.findall(html))]


DEFAULT_LISTING_STRATEGIES: tuple[ListingStrategy, ...] = (
    ListingStrategy("file_reader", list_via_file_reader),
    ListingStrategy("archives", list_via_archives),
)


def list_directory_files(
    client: AutoclaveClient,
    dir_path: str,
    strategies: tuple[ListingStrategy, ...] = DEFAULT_LISTING_STRATEGIES,
) -> list[str]:
    """List the .txt log names in a day directory, de-duplicated.

    Strategies are tried in order; a strategy that fails or finds nothing
    hands over to the next one. Never raises for device errors.
    """
    client.logger.debug(f"Listing directory files in {dir_path}")

    for strategy in strategies:
        try:
            files = strategy.list_files(client, dir_path)
        except AutoclaveError as e:
            client.logger.debug(f"Listing via {strategy.name} failed for {dir_path}: {e}")
            continue

        if files:
            files = list(dict.fromkeys(files))
            client.logger.debug(
                f"Listing via {strategy.name} found {len(files)} file(s) in {dir_path}"
            )
            return files

        client.logger.debug(f"Listing via {strategy.name} found no files in {dir_path}")

    return []


def fetch_day_cycles(
    client: AutoclaveClient,
    year: str,
    month: str,
    day: str,
) -> list[FileInfo]:
    """Cycles logged on one day, ordered by cycle number."""
    dir_path = build_day_directory(year, month, day)
    files = list_directory_files(client, dir_path)

    cycles = []
    for name in files:
        parsed = parse_scilog_filename(f"{dir_path}/{name}")
        if parsed:
            cycles.append(parsed)

    client.logger.debug(f"fetch_day_cycles found {len(cycles)} cycles in {dir_path}")
    return sorted(cycles, key=lambda c: c.number)
