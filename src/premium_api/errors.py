"""
Error taxonomy and per-client call state.

Codes are a closed, contiguous enumeration. Values 0, 2, 3, 7, 8 and 17-19
are raised locally by the client; the rest are reported by the service and
copied through unchanged.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from premium_api.transport.interface import RawHttpResult


class ErrorCode(IntEnum):
    """Outcome of the most recent remote call."""

    NONE = 0
    # API key not recognized or not allowed for the current IP and campaign
    UNAUTHORIZED = 1
    INVALID_RESPONSE = 2
    EMPTY_RESPONSE = 3
    EMPTY_REQUEST = 4
    UNKNOWN_COMMAND = 5
    NO_DATA_FOUND = 6
    REQUEST_FAILED = 7
    # No HTTP backend tier available
    CANNOT_MAKE_REQUEST = 8
    INSUFFICIENT_PARAMETERS = 9
    FORBIDDEN = 10
    REQUIRED_PARAMETERS_MISSING = 11
    # A value the campaign requires to be unique (e.g. receipt number) was already registered
    UNIQUE_PARAM_NOT_UNIQUE = 12
    BEFORE_CAMPAIGN_START = 13
    AFTER_CAMPAIGN_END = 14
    COULDNT_SAVE = 15
    API_VERSION_MISMATCH = 16
    ATTACHMENTS_NOT_SUPPORTED_WITH_METHOD = 17
    MALFORMED_ATTACHMENT_LIST = 18
    ATTACHMENT_FILE_NOT_READABLE = 19
    ATTACHMENT_TOO_LARGE = 20
    ATTACHMENT_TYPE_NOT_ALLOWED = 21
    REGISTRATION_LIMIT_REACHED = 22
    MULTIPLE_VALUES_NOT_ALLOWED = 23


def coerce_error_code(value: Any) -> int:
    """Map a service-reported code onto :class:`ErrorCode` where known.

    Unknown codes are kept as plain ints so nothing the service says is lost.
    """
    try:
        number = int(value)
    except (TypeError, ValueError):
        return ErrorCode.INVALID_RESPONSE
    try:
        return ErrorCode(number)
    except ValueError:
        return number


@dataclass
class ErrorState:
    """Last error slot of one client. Overwritten, never appended."""

    code: int = ErrorCode.NONE
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.code == ErrorCode.NONE

    def set(self, code: int, message: str) -> None:
        self.code = code
        self.message = message

    def reset(self) -> None:
        self.set(ErrorCode.NONE, "")


@dataclass
class DebugRecord:
    """Diagnostics for the most recent HTTP exchange."""

    url: str = ""
    method: str = ""
    request: dict[str, Any] | None = None
    response: RawHttpResult | None = None
