"""Connection test used when an autoclave is set up."""

import time

from .client import AutoclaveClient
from .config import CYCLES_INDEX_PATH, config
from .exceptions import (
    AutoclaveConnectionError,
    AutoclaveError,
    AutoclaveHTTPError,
    AutoclaveTimeoutError,
    MalformedResponseError,
)
from .log_parser import parse_cycle_log
from .models import ConnectionResult
from .sync import get_latest_cycle

INVALID_RESPONSE_MESSAGE = "Invalid response format from autoclave"
TIMEOUT_MESSAGE = "Connection timeout"


def _resolve_model(client: AutoclaveClient) -> str:
    """Model string from the newest cycle's log, or the unknown-model placeholder."""
    latest = get_latest_cycle(client)
    if latest is None:
        client.logger.debug("No cycles found on autoclave")
        return config.UNKNOWN_MODEL

    try:
        telemetry = client.fetch_cycle_data(
            latest.year, latest.month, latest.day, latest.cycle_number
        )
    except AutoclaveError as e:
        client.logger.warning(f"Could not fetch latest cycle for model lookup: {e}")
        return config.UNKNOWN_MODEL

    if telemetry is None:
        return config.UNKNOWN_MODEL

    parsed = parse_cycle_log(telemetry.log)
    if parsed is None:
        client.logger.debug("Latest cycle log did not parse, model unknown")
        return config.UNKNOWN_MODEL

    return parsed.model


def check_autoclave_connection(client: AutoclaveClient) -> ConnectionResult:
    """Check that the autoclave answers and identify its model.

    Never raises: failures come back as ConnectionResult(success=False)
    with a message suitable for display. Failing to work out the model
    does not fail the test.
    """
    client.logger.info(f"Testing connection to autoclave at {client.base_url}")
    start = time.monotonic()

    try:
        data = client.get_json(CYCLES_INDEX_PATH)
    except AutoclaveTimeoutError:
        client.logger.error(
            f"Connection timeout - autoclave did not respond within {client.timeout:g}s"
        )
        return ConnectionResult(success=False, error=TIMEOUT_MESSAGE)
    except AutoclaveHTTPError as e:
        client.logger.error(f"HTTP error from autoclave: {e}")
        return ConnectionResult(success=False, error=str(e))
    except MalformedResponseError as e:
        client.logger.error(f"Invalid response format: {e}")
        return ConnectionResult(success=False, error=INVALID_RESPONSE_MESSAGE)
    except AutoclaveConnectionError as e:
        client.logger.error(f"Connection failed: {e}")
        return ConnectionResult(success=False, error=str(e))

    client.logger.debug(f"cycles.cgi answered in {(time.monotonic() - start) * 1000:.0f}ms")

    if not isinstance(data, list) or not data:
        client.logger.error(f"Invalid response format: {data!r:.200}")
        return ConnectionResult(success=False, error=INVALID_RESPONSE_MESSAGE)

    try:
        model = _resolve_model(client)
    except Exception as e:
        client.logger.warning(f"Model lookup failed: {e}")
        model = config.UNKNOWN_MODEL

    client.logger.info(f"Connection test successful (model: {model})")
    return ConnectionResult(success=True, model=model)
