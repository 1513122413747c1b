"""Exceptions raised by the autoclave client."""


class AutoclaveError(Exception):
    """Base exception for autoclave integration errors."""
    pass


class AutoclaveTimeoutError(AutoclaveError):
    """The device did not answer within the request timeout."""

    def __init__(self, url: str, timeout: float):
        self.url = url
        self.timeout = timeout
        super().__init__(f"Request to {url} timed out after {timeout:g}s")


class AutoclaveConnectionError(AutoclaveError):
    """Connection refused, unreachable host or dropped socket."""
    pass


class AutoclaveHTTPError(AutoclaveError):
    """The device answered with a non-2xx status."""

    def __init__(self, status_code: int, reason: str = "", url: str = ""):
        self.status_code = status_code
        self.reason = reason
        self.url = url
        super().__init__(f"HTTP {status_code}: {reason}")


class MalformedResponseError(AutoclaveError):
    """2xx response whose body is not in the expected format."""
    pass
