"""Tests for the socket backend tier (fake sockets, no network)."""

from __future__ import annotations

import gzip
import ssl
from types import SimpleNamespace

import pytest

from premium_api.config import PremiumSettings
from premium_api.transport.adapters import socket_backend
from premium_api.transport.adapters.socket_backend import SocketBackend
from premium_api.transport.interface import (
    BackendTier,
    EncodedRequest,
    RawHttpResult,
    TransportFailure,
)

URL = "http://premium.example.com/API:1.0/Key:K/Code:c/Messages:List?x=1"


class FakeSocket:
    """Socket double replaying one canned response."""

    def __init__(self, response: bytes, chunk: int = 7) -> None:
        self._response = response
        self._chunk = chunk
        self.sent = b""
        self.closed = False

    def __enter__(self) -> FakeSocket:
        return self

    def __exit__(self, *exc) -> None:
        self.closed = True

    def sendall(self, data: bytes) -> None:
        self.sent += data

    def settimeout(self, value: float) -> None:
        self.timeout = value

    def recv(self, size: int) -> bytes:
        data, self._response = self._response[: self._chunk], self._response[self._chunk:]
        return data


@pytest.fixture
def connections(monkeypatch):
    """Queue of canned responses; records every opened address."""
    state: dict = {"responses": [], "addresses": [], "sockets": []}

    def fake_create_connection(address, timeout=None):
        state["addresses"].append((address, timeout))
        sock = FakeSocket(state["responses"].pop(0))
        state["sockets"].append(sock)
        return sock

    monkeypatch.setattr(socket_backend.socket, "create_connection", fake_create_connection)
    return state


def _post() -> EncodedRequest:
    return EncodedRequest(
        method="POST",
        url=URL,
        headers={
            "Host": "premium.example.com",
            "Connection": "close",
            "Content-Type": "application/x-www-form-urlencoded",
            "Content-Length": "8",
        },
        body=b"Offset=0",
    )


class TestSocketBackend:
    def test_request_wire_format(self, settings: PremiumSettings, connections) -> None:
        connections["responses"].append(b'HTTP/1.0 200 OK\r\nContent-Type: application/json\r\n\r\n{"ErrNo":0}')

        result = SocketBackend(settings).send(_post())

        assert isinstance(result, RawHttpResult)
        sent = connections["sockets"][0].sent
        assert sent.startswith(b"POST /API:1.0/Key:K/Code:c/Messages:List?x=1 HTTP/1.0\r\n")
        assert b"\r\nAccept-Encoding: gzip\r\n" in sent
        assert b"\r\nHost: premium.example.com\r\n" in sent
        assert sent.endswith(b"\r\n\r\nOffset=0")
        assert connections["addresses"] == [(("premium.example.com", 80), settings.connect_timeout_seconds)]
        assert connections["sockets"][0].closed

    def test_response_decomposition(self, settings: PremiumSettings, connections) -> None:
        connections["responses"].append(
            b'HTTP/1.0 200 OK\r\nContent-Type: application/json\r\nX-Long: a\r\n b\r\n\r\n{"ErrNo":0}'
        )

        result = SocketBackend(settings).send(_post())

        assert result.status_code == 200
        assert result.headers["Response Status"] == "OK"
        assert result.headers["Content-Type"] == "application/json"
        assert result.headers["X-Long"] == "a b"
        assert result.body == b'{"ErrNo":0}'

    def test_gzip_body(self, settings: PremiumSettings, connections) -> None:
        compressed = gzip.compress(b'{"ErrNo":0}')
        connections["responses"].append(
            b"HTTP/1.0 200 OK\r\nContent-Encoding: gzip\r\n\r\n" + compressed
        )

        result = SocketBackend(settings).send(_post())

        assert result.body == b'{"ErrNo":0}'

    def test_binary_body_is_untouched(self, settings: PremiumSettings, connections) -> None:
        body = bytes(range(256)) + b"\r\n\r\n\r\x00"
        connections["responses"].append(b"HTTP/1.0 200 OK\r\n\r\n" + body)

        result = SocketBackend(settings).send(_post())

        assert result.body == body

    def test_redirect_303_switches_to_get(self, settings: PremiumSettings, connections) -> None:
        connections["responses"].extend(
            [
                b"HTTP/1.0 303 See Other\r\nLocation: https://other.example.com:8443/done\r\nX-Hop: 1\r\n\r\n",
                b'HTTP/1.0 200 OK\r\nX-Final: yes\r\n\r\n{"ErrNo":0}',
            ]
        )
        monkey_ssl = _PassThroughSSL()
        backend = SocketBackend(settings)
        backend._ssl_context = lambda: monkey_ssl  # type: ignore[method-assign]

        result = backend.send(_post())

        assert result.status_code == 200
        assert result.headers == {"Response Code": "200", "Response Status": "OK", "X-Final": "yes"}
        second = connections["sockets"][1].sent
        assert second.startswith(b"GET /done HTTP/1.0\r\n")
        assert b"Host: other.example.com:8443\r\n" in second
        assert b"Content-Length" not in second
        assert connections["addresses"][1][0] == ("other.example.com", 8443)
        assert monkey_ssl.server_hostname == "other.example.com"

    def test_redirect_307_keeps_body(self, settings: PremiumSettings, connections) -> None:
        connections["responses"].extend(
            [
                b"HTTP/1.0 307 Temporary Redirect\r\nLocation: /elsewhere\r\n\r\n",
                b'HTTP/1.0 200 OK\r\n\r\n{"ErrNo":0}',
            ]
        )

        SocketBackend(settings).send(_post())

        second = connections["sockets"][1].sent
        assert second.startswith(b"POST /elsewhere HTTP/1.0\r\n")
        assert second.endswith(b"Offset=0")

    def test_redirect_limit(self, settings: PremiumSettings, connections) -> None:
        limited = settings.model_copy(update={"max_redirects": 1})
        loop = b"HTTP/1.0 302 Found\r\nLocation: /again\r\n\r\n"
        connections["responses"].extend([loop, loop])

        result = SocketBackend(limited).send(_post())

        assert isinstance(result, TransportFailure)
        assert "redirects" in result.message

    def test_no_header_boundary_is_all_body(self, settings: PremiumSettings, connections) -> None:
        connections["responses"].append(b"garbage without headers")

        result = SocketBackend(settings).send(_post())

        assert result.status_code == 0
        assert result.headers == {}
        assert result.body == b"garbage without headers"

    def test_connection_refused(self, settings: PremiumSettings, monkeypatch) -> None:
        def refuse(address, timeout=None):
            raise ConnectionRefusedError(111, "Connection refused")

        monkeypatch.setattr(socket_backend.socket, "create_connection", refuse)

        result = SocketBackend(settings).send(_post())

        assert isinstance(result, TransportFailure)
        assert "Connection refused" in result.message
        assert result.tier == BackendTier.SOCKET

    def test_unsupported_scheme(self, settings: PremiumSettings) -> None:
        request = EncodedRequest(method="GET", url="ftp://premium.example.com/", headers={})

        result = SocketBackend(settings).send(request)

        assert isinstance(result, TransportFailure)

    def test_total_timeout(self, settings: PremiumSettings, connections, monkeypatch) -> None:
        connections["responses"].append(b"HTTP/1.0 200 OK\r\n\r\n" + b"x" * 100)
        clock = iter([0.0])
        fake_time = SimpleNamespace(monotonic=lambda: next(clock, 1000.0))
        monkeypatch.setattr(socket_backend, "time", fake_time)

        result = SocketBackend(settings).send(_post())

        assert isinstance(result, TransportFailure)
        assert "timed out" in result.message


class _PassThroughSSL:
    """Stands in for an SSLContext; returns the plain socket."""

    server_hostname: str | None = None

    def wrap_socket(self, sock, server_hostname=None):
        self.server_hostname = server_hostname
        return sock


class TestSocketTlsContext:
    def test_verifies_by_default(self, settings: PremiumSettings) -> None:
        context = SocketBackend(settings)._ssl_context()

        assert context.verify_mode == ssl.CERT_REQUIRED
        assert context.check_hostname is True

    def test_verification_can_be_disabled(self, settings: PremiumSettings) -> None:
        configured = settings.model_copy(update={"verify_tls": False})

        context = SocketBackend(configured)._ssl_context()

        assert context.verify_mode == ssl.CERT_NONE
        assert context.check_hostname is False
