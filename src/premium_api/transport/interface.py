"""
Transport backend interface definition.

A backend executes exactly one HTTP request/response cycle and reports the
outcome as a value: either a RawHttpResult or a TransportFailure. Network
faults never escape a backend as exceptions.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

# Scalar request parameter values; arrays are sequences of these.
Scalar = Union[str, int, float, bool]
ParamValue = Union[Scalar, Sequence[Scalar], None]


class BackendTier(str, Enum):
    """HTTP execution mechanisms, in preference order."""

    HTTPX = "httpx"
    SOCKET = "socket"
    URLOPEN = "urlopen"


@dataclass(frozen=True)
class FileAttachment:
    """A local file to upload as one multipart part."""

    path: str
    content_type: str
    filename: str


@dataclass(frozen=True)
class RequestSpec:
    """Everything one outgoing call intends to send, before encoding."""

    url: str
    params: Mapping[str, ParamValue] | None = None
    headers: Mapping[str, str] | None = None
    attachments: Sequence[FileAttachment] = ()

    @property
    def method(self) -> str:
        return "POST" if self.params or self.attachments else "GET"


@dataclass(frozen=True)
class EncodedRequest:
    """Transport-ready request: method, URL, ordered headers and body."""

    method: str
    url: str
    headers: dict[str, str]
    body: bytes = b""
    multipart: bool = False


@dataclass(frozen=True)
class RawHttpResult:
    """Status, ordered headers and body of one completed exchange."""

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class TransportFailure:
    """A request that never produced a response (refused, timeout, DNS...)."""

    message: str
    tier: BackendTier | None = None


TransportResult = Union[RawHttpResult, TransportFailure]


class TransportBackend(ABC):
    """Abstract interface for HTTP backend tiers."""

    tier: BackendTier
    supports_attachments: bool = False

    #: Exception types a backend converts into TransportFailure.
    failure_types: tuple[type[BaseException], ...] = (OSError,)

    def send(self, request: EncodedRequest) -> TransportResult:
        """Perform one request/response cycle."""
        try:
            return self._perform(request)
        except self.failure_types as e:
            return TransportFailure(message=str(e) or type(e).__name__, tier=self.tier)

    @abstractmethod
    def _perform(self, request: EncodedRequest) -> RawHttpResult:
        """Backend-specific exchange. May raise any of ``failure_types``."""
        ...
