"""HTTP client for STATCLAVE G4 and compatible autoclaves.

Autoclaves expose a web interface on their LAN address with PHP/CGI
endpoints meant for their own browser UI. Newer (nginx) firmware serves:

- GET /data/cycles.cgi - years/months with recorded cycles
- GET /us/archives.php - HTML page embedding the full cycle catalog
- GET /data/file_reader.php?filename=... - raw file (or directory) contents
- GET /data/cycleData.php?filename=...&t=...&{json} - cycle telemetry (JSON)

Older Freescale MQX firmware has no archive page and answers POSTs instead:

- POST /data/cycles.cgi?{t} with {year, month[, day]} - days and cycles
- POST /data/cycleData.cgi?{t} with {year, month, day, cycle} - telemetry

Each request is a single blocking call with its own timeout. The embedded
web server handles one request at a time, so callers should not issue
requests to the same unit concurrently.
"""

import json
import logging
import time
from typing import Any, Optional
from urllib.parse import quote

import requests

from .archives import extract_cycles_info
from .config import (
    ARCHIVES_PAGE_PATH,
    CYCLE_DATA_PATH,
    CYCLES_INDEX_PATH,
    FILE_READER_PATH,
    MQX_CYCLE_DATA_PATH,
    config,
)
from .exceptions import (
    AutoclaveConnectionError,
    AutoclaveError,
    AutoclaveHTTPError,
    AutoclaveTimeoutError,
    MalformedResponseError,
)
from .filenames import build_scilog_path, cycle_info_to_file_path, parse_scilog_filename
from .models import CycleIndex, CycleInfo, CycleTelemetry, FirmwareType, pad_cycle_number

# Characters left unescaped by the browser UI's encodeURIComponent()
_URI_COMPONENT_SAFE = "-_.!~*'()"

HTML_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}
XHR_HEADERS = {
    "Accept": "*/*",
    "X-Requested-With": "XMLHttpRequest",
}
CYCLE_DATA_HEADERS = {
    "Accept": "application/json, text/javascript, */*",
    "Content-Type": "application/x-www-form-urlencoded",
    "X-Requested-With": "XMLHttpRequest",
}
MQX_POST_HEADERS = {
    "Accept": "application/json, text/javascript, */*; q=0.01",
    "Content-Type": "application/x-www-form-urlencoded; charset=UTF-8",
    "X-Requested-With": "XMLHttpRequest",
}


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


def _pad_date(year: int | str, month: int | str, day: int | str) -> tuple[str, str, str]:
    """Year, month and day as the device writes them: 2025, 01, 02."""
    return f"{int(year):04d}", f"{int(month):02d}", f"{int(day):02d}"


class AutoclaveClient:
    """Client for one autoclave's web interface.

    The firmware family is detected on first use and remembered for the
    life of the client; pass ``firmware`` to skip detection.
    """

    def __init__(
        self,
        ip_address: str,
        port: int | None = None,
        session: requests.Session | None = None,
        timeout: float | None = None,
        long_timeout: float | None = None,
        logger: logging.Logger | None = None,
        firmware: FirmwareType | None = None,
    ):
        self.ip_address = ip_address
        self.port = port or config.DEFAULT_PORT
        self.session = session or requests.Session()
        self.timeout = timeout or config.TIMEOUT_SECONDS
        self.long_timeout = long_timeout or config.LONG_TIMEOUT_SECONDS
        self.logger = logger or logging.getLogger(__name__)
        self.firmware = firmware

    @property
    def base_url(self) -> str:
        return f"http://{self.ip_address}:{self.port}"

    def __repr__(self) -> str:
        return f"AutoclaveClient({self.base_url})"

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _send(self, method: str, path: str, timeout: float | None = None, **kwargs) -> requests.Response:
        """Issue one request, mapping transport failures to AutoclaveError."""
        url = f"{self.base_url}{path}"
        timeout = timeout or self.timeout
        send = getattr(self.session, method.lower())
        start = time.monotonic()

        try:
            response = send(url, timeout=timeout, **kwargs)
        except requests.Timeout as e:
            self.logger.warning(f"Request to {url} timed out after {timeout:g}s")
            raise AutoclaveTimeoutError(url, timeout) from e
        except requests.RequestException as e:
            self.logger.warning(f"Request to {url} failed: {e}")
            raise AutoclaveConnectionError(f"Could not reach {self.base_url}: {e}") from e

        elapsed_ms = (time.monotonic() - start) * 1000
        self.logger.debug(f"{method} {url} -> {response.status_code} in {elapsed_ms:.0f}ms")
        return response

    @staticmethod
    def _check_status(response: requests.Response, url: str) -> requests.Response:
        if not response.ok:
            raise AutoclaveHTTPError(response.status_code, response.reason or "", url)
        return response

    @staticmethod
    def _decode_json(response: requests.Response, path: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(f"{path} did not return JSON: {e}") from e

    def get(
        self,
        path: str,
        params: dict | None = None,
        headers: dict | None = None,
        timeout: float | None = None,
    ) -> requests.Response:
        """GET a device path.

        Raises:
            AutoclaveTimeoutError: no answer within the timeout
            AutoclaveConnectionError: transport failure
            AutoclaveHTTPError: non-2xx response
        """
        response = self._send("GET", path, timeout=timeout, params=params, headers=headers)
        return self._check_status(response, f"{self.base_url}{path}")

    def get_json(
        self,
        path: str,
        params: dict | None = None,
        headers: dict | None = None,
        timeout: float | None = None,
    ) -> Any:
        """GET a device path and decode the JSON body."""
        response = self.get(path, params=params, headers=headers, timeout=timeout)
        return self._decode_json(response, path)

    def head(self, path: str) -> requests.Response:
        """HEAD a device path. Any status is returned; transport errors raise."""
        return self._send("HEAD", path)

    def post_json(self, path: str, body: dict, timeout: float | None = None) -> Any:
        """POST a JSON-encoded body the way the MQX browser UI does; decode the reply.

        The path gets a millisecond timestamp query to defeat caching.
        """
        stamped = f"{path}?{_timestamp_ms()}"
        response = self._send(
            "POST",
            stamped,
            timeout=timeout,
            data=json.dumps(body, separators=(",", ":")),
            headers=MQX_POST_HEADERS,
        )
        self._check_status(response, f"{self.base_url}{stamped}")
        return self._decode_json(response, path)

    # ------------------------------------------------------------------
    # Firmware
    # ------------------------------------------------------------------

    def detect_firmware(self) -> FirmwareType:
        """Firmware family of the unit, detected once per client.

        The Server header of ``/`` decides (nginx, or mqx/freescale). With
        no telling header, a unit that serves the archive page is nginx.
        Anything else, including an unreachable unit, is taken as MQX; an
        unreachable unit is asked again next time.
        """
        if self.firmware is not None:
            return self.firmware

        try:
            server = (self.head("/").headers.get("Server") or "").lower()
        except AutoclaveError as e:
            self.logger.debug(f"Firmware detection failed, assuming mqx: {e}")
            return FirmwareType.MQX

        self.logger.debug(f"Server header: {server!r}")
        if "nginx" in server:
            firmware = FirmwareType.NGINX
        elif "mqx" in server or "freescale" in server:
            firmware = FirmwareType.MQX
        else:
            try:
                archives_ok = self.head(ARCHIVES_PAGE_PATH).ok
            except AutoclaveError:
                archives_ok = False
            firmware = FirmwareType.NGINX if archives_ok else FirmwareType.MQX

        self.logger.info(f"Detected {firmware.value} firmware on {self.base_url}")
        self.firmware = firmware
        return firmware

    # ------------------------------------------------------------------
    # Cycle index and archive catalog
    # ------------------------------------------------------------------

    def _parse_index(self, data: Any, source: str) -> list[CycleIndex]:
        if not isinstance(data, list):
            raise MalformedResponseError(
                f"{source} returned {type(data).__name__}, expected a list"
            )

        try:
            return [CycleIndex.from_dict(entry) for entry in data]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise MalformedResponseError(f"Unreadable {source} entry: {e}") from e

    def fetch_available_cycles(self) -> list[CycleIndex]:
        """Fetch the years/months index from cycles.cgi."""
        self.logger.debug(f"Fetching available cycles from {self.base_url}")
        index = self._parse_index(self.get_json(CYCLES_INDEX_PATH), "cycles.cgi")
        self.logger.debug(f"cycles.cgi listed {len(index)} year(s)")
        return index

    def fetch_month_index_mqx(
        self,
        year: int | str,
        month: int | str,
        day: int | str | None = None,
    ) -> list[CycleIndex]:
        """Ask MQX firmware for a month's days and cycles (POST cycles.cgi).

        The browser UI adds the first day of interest when it has one.
        """
        body = {"year": f"{int(year):04d}", "month": f"{int(month):02d}"}
        if day is not None:
            body["day"] = f"{int(day):02d}"

        self.logger.debug(f"POST cycles.cgi for {body}")
        return self._parse_index(self.post_json(CYCLES_INDEX_PATH, body), "cycles.cgi POST")

    def fetch_archives_html(self) -> str:
        """Fetch the archive page HTML."""
        response = self.get(ARCHIVES_PAGE_PATH, headers=HTML_HEADERS, timeout=self.long_timeout)
        self.logger.debug(f"archives.php response length: {len(response.text)} chars")
        return response.text

    def fetch_all_cycles_from_archives(self) -> list[CycleInfo]:
        """Fetch every cycle the device advertises on its archive page.

        A page without a readable catalog yields an empty list; a freshly
        commissioned unit has no cycles. Transport and HTTP errors raise.
        """
        self.logger.info(f"Fetching all cycles from archives.php on {self.base_url}")
        html = self.fetch_archives_html()

        cycles = extract_cycles_info(html)
        if cycles is None:
            return []

        self.logger.info(f"Found {len(cycles)} cycles in archives.php")
        return cycles

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def read_file(self, path: str) -> str:
        """Return what file_reader.php serves for a path. Raises on failure."""
        response = self.get(FILE_READER_PATH, params={"filename": path}, headers=XHR_HEADERS)
        return response.text

    def fetch_raw_log_file(self, filename: str) -> Optional[str]:
        """Fetch the raw text of a .txt cycle log, or None if unavailable."""
        self.logger.debug(f"Fetching raw log file {filename}")
        try:
            return self.read_file(filename)
        except AutoclaveError as e:
            self.logger.error(f"fetch_raw_log_file failed for {filename}: {e}")
            return None

    # ------------------------------------------------------------------
    # Cycle data
    # ------------------------------------------------------------------

    def fetch_cycle_data(
        self,
        year: str,
        month: str,
        day: str,
        cycle_number: int | str,
        serial_number: str | None = None,
    ) -> Optional[CycleTelemetry]:
        """Fetch telemetry for a cycle.

        MQX firmware is asked by date and cycle number directly. On nginx
        firmware, with a serial number the .cpt path is built directly;
        without one the cycle is looked up in the archive catalog and its
        path derived from the device's own timestamp, which wins over the
        date given here. Returns None if the catalog has no such cycle.

        Raises:
            AutoclaveError: once a path is resolved, any failure to fetch it
        """
        year, month, day = _pad_date(year, month, day)
        padded = pad_cycle_number(cycle_number)
        self.logger.debug(
            f"Fetching cycle data for cycle {padded} ({year}-{month}-{day}, "
            f"serial={serial_number or 'unknown'})"
        )

        if self.detect_firmware() == FirmwareType.MQX:
            return self.fetch_cycle_data_mqx(year, month, day, padded)

        if serial_number:
            cpt_path = build_scilog_path(year, month, day, padded, serial_number, ext="cpt")
            return self._fetch_cycle_data_file(cpt_path, year, month, day, padded)

        matching = next(
            (c for c in self.fetch_all_cycles_from_archives() if f"_{padded}_" in c.file_name),
            None,
        )
        if matching is None:
            self.logger.error(f"Could not find cycle {cycle_number} in archives")
            return None

        return self.fetch_cycle_data_from_info(matching)

    def fetch_cycle_data_mqx(
        self,
        year: int | str,
        month: int | str,
        day: int | str,
        cycle_number: int | str,
    ) -> Optional[CycleTelemetry]:
        """Fetch telemetry from MQX firmware (POST cycleData.cgi).

        Returns None when the unit reports it has no such cycle.
        """
        year, month, day = _pad_date(year, month, day)
        body = {"year": year, "month": month, "day": day, "cycle": pad_cycle_number(cycle_number)}

        try:
            data = self.post_json(MQX_CYCLE_DATA_PATH, body, timeout=self.long_timeout)
        except AutoclaveError as e:
            self.logger.error(f"MQX cycle data fetch failed for {body}: {e}")
            raise

        if isinstance(data, dict) and str(data.get("succeeded")).lower() == "false":
            self.logger.warning(f"Cycle data not found via MQX: {body}")
            return None

        return self._parse_telemetry(data, MQX_CYCLE_DATA_PATH)

    def fetch_cycle_data_from_info(self, cycle: CycleInfo) -> Optional[CycleTelemetry]:
        """Fetch telemetry for a cycle already resolved from the archive catalog."""
        started = cycle.start_datetime
        cpt_path = cycle_info_to_file_path(cycle, ext="cpt")
        return self._fetch_cycle_data_file(
            cpt_path,
            f"{started.year:04d}",
            f"{started.month:02d}",
            f"{started.day:02d}",
            cycle.padded_cycle_number,
        )

    def fetch_cycle_data_by_filename(self, txt_filename: str) -> Optional[CycleTelemetry]:
        """Fetch telemetry for a cycle given the full path of its .txt log.

        Returns None if the path is not a scilog file name.
        """
        parsed = parse_scilog_filename(txt_filename)
        if parsed is None:
            self.logger.error(f"Could not parse filename {txt_filename!r}")
            return None

        if self.detect_firmware() == FirmwareType.MQX:
            return self.fetch_cycle_data_mqx(
                parsed.year, parsed.month, parsed.day, parsed.cycle_number
            )

        stem = txt_filename[: -len(parsed.extension) - 1]
        return self._fetch_cycle_data_file(
            f"{stem}.cpt", parsed.year, parsed.month, parsed.day, parsed.cycle_number
        )

    def _parse_telemetry(self, data: Any, source: str) -> CycleTelemetry:
        try:
            telemetry = CycleTelemetry.from_dict(data)
        except ValueError as e:
            self.logger.error(f"Unreadable cycle data for {source}: {e}")
            raise MalformedResponseError(f"Unreadable cycle data for {source}: {e}") from e

        self.logger.debug(
            f"Cycle data parsed: number={telemetry.number}, succeeded={telemetry.succeeded}"
        )
        return telemetry

    def _fetch_cycle_data_file(
        self,
        cpt_path: str,
        year: str,
        month: str,
        day: str,
        cycle: str,
    ) -> CycleTelemetry:
        """GET cycleData.php the way the unit's own UI does."""
        self.logger.debug(f"Using cpt file: {cpt_path}")

        # The UI appends the JSON-encoded request as a bare query key
        json_params = json.dumps(
            {"year": year, "month": month, "day": day, "cycle": cycle},
            separators=(",", ":"),
        )
        path = (
            f"{CYCLE_DATA_PATH}?filename={quote(cpt_path, safe=_URI_COMPONENT_SAFE)}"
            f"&t={_timestamp_ms()}&{quote(json_params, safe=_URI_COMPONENT_SAFE)}"
        )

        try:
            data = self.get_json(path, headers=CYCLE_DATA_HEADERS, timeout=self.long_timeout)
        except AutoclaveError as e:
            self.logger.error(f"Cycle data fetch failed for {cpt_path}: {e}")
            raise

        return self._parse_telemetry(data, cpt_path)
