"""
Error taxonomy shared by the recommendation services.

TransportError is raised before an HTTP status is known (network, timeout,
unreadable body). RemoteError means the remote service answered but the
answer was unusable. ConfigError flags a missing credential.
"""
from typing import Optional


class TravelAdvisorError(Exception):
    """Base class for all errors raised by travel_advisor services"""


class ConfigError(TravelAdvisorError):
    """A required credential or setting is missing"""


class TransportError(TravelAdvisorError):
    TIMEOUT = "TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"
    PARSE_ERROR = "PARSE_ERROR"

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    @property
    def is_timeout(self) -> bool:
        return self.code == self.TIMEOUT

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class RemoteError(TravelAdvisorError):
    def __init__(self, message: str, status_code: Optional[int] = None, is_timeout: bool = False):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.is_timeout = is_timeout


def is_timeout_error(error: BaseException) -> bool:
    """True when the error (or its message) reports a timeout"""
    if getattr(error, "is_timeout", False):
        return True
    text = str(error)
    return "Timeout" in text or "timeout" in text or "超时" in text
