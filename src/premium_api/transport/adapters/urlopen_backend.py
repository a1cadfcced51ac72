"""
Minimal stream-open backend tier built on urllib.

Only available when ``allow_url_open`` is set. Cannot upload files.
"""

from __future__ import annotations

import gzip
import http.client
import ssl
import time
import urllib.error
import urllib.request
import zlib

from premium_api.config import PremiumSettings
from premium_api.shared.logging import get_logger
from premium_api.transport.encoding import merge_headers
from premium_api.transport.headers import parse_header_lines
from premium_api.transport.interface import (
    BackendTier,
    EncodedRequest,
    RawHttpResult,
    TransportBackend,
)

logger = get_logger(__name__)

READ_CHUNK = 65536


class _BoundedRedirectHandler(urllib.request.HTTPRedirectHandler):
    def __init__(self, max_redirects: int) -> None:
        super().__init__()
        self.max_redirections = max_redirects


class UrlopenBackend(TransportBackend):
    """urllib transport; header lines are decoded by the header parser."""

    tier = BackendTier.URLOPEN
    supports_attachments = False
    failure_types = (OSError, http.client.HTTPException, ValueError, EOFError, zlib.error)

    def __init__(self, settings: PremiumSettings) -> None:
        self._settings = settings

    def _ssl_context(self) -> ssl.SSLContext:
        context = ssl.create_default_context()
        if not self._settings.verify_tls:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    def _build_opener(self) -> urllib.request.OpenerDirector:
        return urllib.request.build_opener(
            _BoundedRedirectHandler(self._settings.max_redirects),
            urllib.request.HTTPSHandler(context=self._ssl_context()),
        )

    def _read(self, response, deadline: float) -> bytes:
        chunks: list[bytes] = []
        while True:
            if time.monotonic() > deadline:
                raise TimeoutError(
                    f"Request timed out after {self._settings.timeout_seconds}s"
                )
            chunk = response.read(READ_CHUNK)
            if not chunk:
                break
            chunks.append(chunk)
        return b"".join(chunks)

    def _perform(self, request: EncodedRequest) -> RawHttpResult:
        if request.multipart:
            raise ValueError("File uploads are not supported by the urlopen backend")

        deadline = time.monotonic() + self._settings.timeout_seconds
        headers = merge_headers({"Accept-Encoding": "gzip"}, request.headers)
        url_request = urllib.request.Request(
            request.url,
            data=request.body if request.method == "POST" else None,
            headers=headers,
            method=request.method,
        )

        opener = self._build_opener()
        try:
            response = opener.open(url_request, timeout=self._settings.connect_timeout_seconds)
        except urllib.error.HTTPError as e:
            # 4xx/5xx still carry a response the interpreter should see
            response = e

        with response:
            version = "1.0" if getattr(response, "version", 11) == 10 else "1.1"
            lines = [f"HTTP/{version} {response.getcode()} {response.reason}"]
            lines.extend(f"{name}: {value}" for name, value in response.headers.items())
            body = self._read(response, deadline)

        parsed = parse_header_lines(lines)
        if (parsed.get("Content-Encoding") or "").lower() == "gzip" and body:
            body = gzip.decompress(body)

        logger.debug(
            "urlopen response",
            extra={"status": parsed.status_code, "body_bytes": len(body)},
        )
        return RawHttpResult(
            status_code=parsed.status_code or 0,
            headers=parsed.fields,
            body=body,
        )
