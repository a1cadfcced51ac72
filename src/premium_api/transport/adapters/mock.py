"""
Mock transport backend for testing and dry runs.

Records every request and answers from a queue of canned results.
"""

import json
from typing import Any

from premium_api.shared.logging import get_logger
from premium_api.transport.interface import (
    BackendTier,
    EncodedRequest,
    RawHttpResult,
    TransportBackend,
    TransportFailure,
    TransportResult,
)

logger = get_logger(__name__)


class MockTransportBackend(TransportBackend):
    """In-process backend that never touches the network."""

    def __init__(
        self,
        tier: BackendTier = BackendTier.HTTPX,
        supports_attachments: bool = True,
    ) -> None:
        self.tier = tier
        self.supports_attachments = supports_attachments
        self._requests: list[EncodedRequest] = []
        self._queue: list[TransportResult] = []
        self._default: TransportResult = RawHttpResult(
            status_code=200,
            body=b'{"ErrNo":0}',
        )

    def reset(self) -> None:
        self._requests.clear()
        self._queue.clear()

    def queue_result(self, result: TransportResult) -> None:
        self._queue.append(result)

    def queue_json(self, payload: Any, status_code: int = 200) -> None:
        self.queue_result(
            RawHttpResult(
                status_code=status_code,
                headers={"Content-Type": "application/json"},
                body=json.dumps(payload).encode("utf-8"),
            )
        )

    def configure_default(self, result: TransportResult) -> None:
        self._default = result

    def configure_failure(self, error_message: str = "Mock failure") -> None:
        self._default = TransportFailure(message=error_message, tier=self.tier)

    @property
    def requests(self) -> list[EncodedRequest]:
        return self._requests.copy()

    @property
    def call_count(self) -> int:
        return len(self._requests)

    def get_last_request(self) -> EncodedRequest | None:
        return self._requests[-1] if self._requests else None

    def _perform(self, request: EncodedRequest) -> TransportResult:
        logger.info(
            "Mock: sending request",
            extra={"method": request.method, "url": request.url},
        )
        self._requests.append(request)
        return self._queue.pop(0) if self._queue else self._default
