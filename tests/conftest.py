"""Shared test fixtures and canned device responses."""

import json
import sys
from datetime import datetime
from pathlib import Path
from unittest.mock import Mock
from urllib.parse import urlsplit

import pytest
import requests
from requests.structures import CaseInsensitiveDict

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from autoclave_src.client import AutoclaveClient


SAMPLE_LOG = """STATCLAVE G4 SBS1R118
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
"""

SERIAL = "710125H00004"


def epoch(*args) -> int:
    """Unix timestamp for a local datetime, so tests don't depend on the TZ."""
    return int(datetime(*args).timestamp())


def make_response(status_code=200, text="", json_data=None, reason="OK", headers=None):
    """Mock requests.Response."""
    response = Mock()
    response.headers = CaseInsensitiveDict(headers or {})
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    response.reason = reason
    if json_data is not None:
        response.text = json.dumps(json_data)
        response.json.return_value = json_data
    else:
        response.text = text
        response.json.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")
    return response


def cycle_entry(cycle_number, started, serial=SERIAL, cycle_id="STATCLAVE_120V_solid_wrapped_132_4min"):
    """A cyclesInfo entry for a cycle started at a local datetime tuple."""
    start = datetime(*started)
    return {
        "records_id": cycle_number,
        "cycle_start_time": int(start.timestamp()),
        "file_name": f"S{start:%Y%m%d}_{cycle_number:05d}_{serial}",
        "cycle_number": cycle_number,
        "cycle_id": cycle_id,
    }


def archives_page(entries) -> str:
    """Archive page HTML embedding a cyclesInfo literal."""
    return (
        "<html><head><title>Archives</title></head><body>\n"
        "<script type=\"text/javascript\">\n"
        f"    var cyclesInfo = {json.dumps(entries)};\n"
        "    var units = 'metric';\n"
        "</script></body></html>"
    )


def cycle_data(number=1755, log=SAMPLE_LOG, temp="", status="Solid/Wrapped / 132°C/4min"):
    """A cycleData.php JSON body."""
    return {
        "date": "2025-10-08",
        "number": number,
        "runmode": 2,
        "display_units": "metric",
        "log": log,
        "status": status,
        "x_axis_points": 720,
        "temp": temp,
        "pressure": "",
        "succeeded": True,
    }




class FakeDevice:
    """Mock session that answers by method and path, like the unit's web server.

    HEAD / reports the ``server`` header, so a default device is detected
    as nginx firmware.
    """

    def __init__(self, server="nginx/1.18.0"):
        self.routes = {}
        self.server = server
        self.session = Mock(spec=requests.Session)
        self.session.get.side_effect = lambda url, **kwargs: self._answer("GET", url)
        self.session.head.side_effect = lambda url, **kwargs: self._answer("HEAD", url)
        self.session.post.side_effect = lambda url, **kwargs: self._answer("POST", url)

    def route(self, endpoint, answer, method="GET"):
        """Answer requests for an endpoint with a response or an exception.

        A list of answers is handed out one per request.
        """
        self.routes[(method, endpoint)] = answer

    def _answer(self, method, url):
        answer = self.routes.get((method, urlsplit(url).path))
        if answer is None and method == "HEAD" and urlsplit(url).path == "/":
            return make_response(headers={"Server": self.server})
        if answer is None:
            return make_response(404, reason="Not Found")
        if isinstance(answer, list):
            answer = answer.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer

    def calls_to(self, endpoint, method="GET"):
        """Calls of one method whose URL contains the endpoint."""
        calls = getattr(self.session, method.lower()).call_args_list
        return [c for c in calls if endpoint in c.args[0]]

    def posted(self, endpoint):
        """Decoded JSON bodies POSTed to an endpoint."""
        return [json.loads(c.kwargs["data"]) for c in self.calls_to(endpoint, method="POST")]


@pytest.fixture
def device():
    """A fake nginx autoclave with no routes (every request but HEAD / 404s)."""
    return FakeDevice()


@pytest.fixture
def client(device):
    """Client talking to the fake autoclave."""
    return AutoclaveClient("192.168.1.50", session=device.session, timeout=5, long_timeout=10)


@pytest.fixture
def mqx_device():
    """A fake autoclave running older MQX firmware."""
    return FakeDevice(server="Freescale MQX")


@pytest.fixture
def mqx_client(mqx_device):
    """Client talking to the fake MQX autoclave."""
    return AutoclaveClient("192.168.1.60", session=mqx_device.session, timeout=5, long_timeout=10)
