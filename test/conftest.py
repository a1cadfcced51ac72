"""
Shared pytest fixtures for the Premium API client tests.
"""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from premium_api.client import PremiumAPI
from premium_api.config import PremiumSettings
from premium_api.transport.adapters.mock import MockTransportBackend
from premium_api.transport.capabilities import CapabilityProbe
from premium_api.transport.interface import BackendTier


@dataclass
class StaticCapabilityProbe(CapabilityProbe):
    """Probe double that reports fixed capabilities."""

    rich: bool = False
    sockets: bool = False
    url_open: bool = False

    def has_rich_client(self) -> bool:
        return self.rich

    def has_socket_client(self) -> bool:
        return self.sockets

    def allows_url_open(self) -> bool:
        return self.url_open


@pytest.fixture
def settings() -> PremiumSettings:
    return PremiumSettings(
        _env_file=None,
        base_url="https://premium.example.com",
        api_version="1.0",
        json_format=False,
        verify_tls=True,
        connect_timeout_seconds=5,
        timeout_seconds=10,
        max_redirects=5,
        allow_url_open=True,
        user_agent="SalesLV/Premium-API",
        remote_addr="",
    )


@pytest.fixture
def mock_backend() -> MockTransportBackend:
    return MockTransportBackend()


@pytest.fixture
def make_client(settings: PremiumSettings, mock_backend: MockTransportBackend):
    """Build a client whose selected tier is served by ``mock_backend``."""

    def _make(
        probe: CapabilityProbe | None = None,
        supports_attachments: bool = True,
        remote_addr: str | None = None,
    ) -> PremiumAPI:
        probe = probe or StaticCapabilityProbe(rich=True)

        def factory(tier: BackendTier, _settings: PremiumSettings) -> MockTransportBackend:
            mock_backend.tier = tier
            mock_backend.supports_attachments = supports_attachments
            return mock_backend

        return PremiumAPI(
            "KEY123",
            "test",
            settings=settings,
            capability_probe=probe,
            backend_factory=factory,
            remote_addr=remote_addr,
        )

    return _make


@pytest.fixture
def static_probe() -> type[StaticCapabilityProbe]:
    return StaticCapabilityProbe
