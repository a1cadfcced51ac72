"""
Socket-level backend tier.

Speaks HTTP/1.0 over a plain or TLS socket so the server closes the
connection after one response and no chunked decoding is needed. The raw
bytes of every hop in a redirect chain go through the header parser as one
combined block; only the final hop's headers survive parsing.
"""

from __future__ import annotations

import gzip
import socket
import ssl
import time
import zlib
from urllib.parse import urljoin, urlsplit

from premium_api.config import PremiumSettings
from premium_api.shared.logging import get_logger
from premium_api.transport.encoding import merge_headers
from premium_api.transport.headers import parse_header_block, split_header_block
from premium_api.transport.interface import (
    BackendTier,
    EncodedRequest,
    RawHttpResult,
    TransportBackend,
)

logger = get_logger(__name__)

REDIRECT_CODES = frozenset({301, 302, 303, 307, 308})
RECV_CHUNK = 65536


class SocketBackend(TransportBackend):
    """Raw socket transport, uploads supported."""

    tier = BackendTier.SOCKET
    supports_attachments = True
    failure_types = (OSError, ValueError, EOFError, zlib.error)

    def __init__(self, settings: PremiumSettings) -> None:
        self._settings = settings

    def _ssl_context(self) -> ssl.SSLContext:
        context = ssl.create_default_context()
        if not self._settings.verify_tls:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    def _open(self, scheme: str, host: str, port: int) -> socket.socket:
        sock = socket.create_connection(
            (host, port), timeout=self._settings.connect_timeout_seconds
        )
        if scheme == "https":
            try:
                return self._ssl_context().wrap_socket(sock, server_hostname=host)
            except OSError:
                sock.close()
                raise
        return sock

    def _exchange(self, request: EncodedRequest, deadline: float) -> bytes:
        parts = urlsplit(request.url)
        if parts.scheme not in ("http", "https") or not parts.hostname:
            raise ValueError(f"Unsupported URL: {request.url}")

        port = parts.port or (443 if parts.scheme == "https" else 80)
        target = parts.path or "/"
        if parts.query:
            target = f"{target}?{parts.query}"

        head = [f"{request.method} {target} HTTP/1.0"]
        head.extend(f"{name}: {value}" for name, value in request.headers.items())
        payload = ("\r\n".join(head) + "\r\n\r\n").encode("latin-1") + request.body

        chunks: list[bytes] = []
        with self._open(parts.scheme, parts.hostname, port) as sock:
            sock.sendall(payload)
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise TimeoutError(
                        f"Request timed out after {self._settings.timeout_seconds}s"
                    )
                sock.settimeout(remaining)
                chunk = sock.recv(RECV_CHUNK)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)

    @staticmethod
    def _redirected(request: EncodedRequest, status: int, location: str) -> EncodedRequest:
        url = urljoin(request.url, location)
        headers = merge_headers(request.headers, {"Host": urlsplit(url).netloc})
        if status in (307, 308):
            return EncodedRequest(request.method, url, headers, request.body, request.multipart)

        for name in [k for k in headers if k.lower() in ("content-type", "content-length")]:
            del headers[name]
        return EncodedRequest("GET", url, headers)

    def _perform(self, request: EncodedRequest) -> RawHttpResult:
        deadline = time.monotonic() + self._settings.timeout_seconds
        request = EncodedRequest(
            request.method,
            request.url,
            merge_headers({"Accept-Encoding": "gzip"}, request.headers),
            request.body,
            request.multipart,
        )

        header_sections: list[str] = []
        body = b""
        for hop in range(self._settings.max_redirects + 1):
            raw = self._exchange(request, deadline)
            # latin-1 maps bytes 1:1, so the body survives the text round trip
            split = split_header_block(raw.decode("latin-1"))
            if split is None:
                body = raw
                break

            section, body_text = split
            header_sections.append(section)
            body = body_text.encode("latin-1")

            hop_headers = parse_header_block(section)
            location = hop_headers.get("Location")
            if hop_headers.status_code not in REDIRECT_CODES or not location:
                break
            if hop == self._settings.max_redirects:
                raise ValueError(
                    f"Maximum number of redirects ({self._settings.max_redirects}) exceeded"
                )

            logger.debug(
                "Following redirect",
                extra={"status": hop_headers.status_code, "location": location},
            )
            request = self._redirected(request, hop_headers.status_code, location)

        parsed = parse_header_block("\n".join(header_sections))
        if (parsed.get("Content-Encoding") or "").lower() == "gzip" and body:
            body = gzip.decompress(body)

        return RawHttpResult(
            status_code=parsed.status_code or 0,
            headers=parsed.fields,
            body=body,
        )
