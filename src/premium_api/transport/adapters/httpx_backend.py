"""
Rich backend tier built on httpx.

Returns already-structured headers; supports multipart uploads.
"""

from __future__ import annotations

import time

import httpx

from premium_api.config import PremiumSettings
from premium_api.shared.logging import get_logger
from premium_api.transport.headers import RESPONSE_CODE, RESPONSE_STATUS
from premium_api.transport.interface import (
    BackendTier,
    EncodedRequest,
    RawHttpResult,
    TransportBackend,
)

logger = get_logger(__name__)


class HttpxBackend(TransportBackend):
    """httpx-based transport. One client per call, closed afterwards."""

    tier = BackendTier.HTTPX
    supports_attachments = True
    failure_types = (httpx.HTTPError, httpx.InvalidURL, OSError)

    def __init__(
        self,
        settings: PremiumSettings,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    def _build_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(
                self._settings.timeout_seconds,
                connect=self._settings.connect_timeout_seconds,
            ),
            follow_redirects=True,
            max_redirects=self._settings.max_redirects,
            verify=self._settings.verify_tls,
            headers={"Accept-Encoding": "gzip"},
            transport=self._transport,
        )

    def _perform(self, request: EncodedRequest) -> RawHttpResult:
        logger.debug(
            "httpx request",
            extra={"method": request.method, "url": request.url, "body_bytes": len(request.body)},
        )
        # httpx timeouts bound each phase; the total is enforced while streaming the body
        deadline = time.monotonic() + self._settings.timeout_seconds
        with self._build_client() as client:
            with client.stream(
                request.method,
                request.url,
                headers=request.headers,
                content=request.body or None,
            ) as response:
                chunks: list[bytes] = []
                for chunk in response.iter_bytes():
                    if time.monotonic() > deadline:
                        raise httpx.ReadTimeout(
                            f"Request timed out after {self._settings.timeout_seconds}s",
                            request=response.request,
                        )
                    chunks.append(chunk)

                headers = {
                    RESPONSE_CODE: str(response.status_code),
                    RESPONSE_STATUS: response.reason_phrase,
                }
                # Raw pairs keep the server's spelling; repeated headers keep the last value
                encoding = response.headers.encoding
                for raw_name, raw_value in response.headers.raw:
                    headers[raw_name.decode(encoding)] = raw_value.decode(encoding)

                return RawHttpResult(
                    status_code=response.status_code,
                    headers=headers,
                    body=b"".join(chunks),
                )
