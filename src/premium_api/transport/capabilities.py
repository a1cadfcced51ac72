"""
Backend tier selection.

The selector is a pure function of a capability probe, so a test double can
force any tier (or none).
"""

from __future__ import annotations

import importlib.util
from abc import ABC, abstractmethod

from premium_api.config import PremiumSettings
from premium_api.transport.interface import BackendTier


class CapabilityProbe(ABC):
    """Answers which HTTP mechanisms the running process can use."""

    @abstractmethod
    def has_rich_client(self) -> bool:
        ...

    @abstractmethod
    def has_socket_client(self) -> bool:
        ...

    @abstractmethod
    def allows_url_open(self) -> bool:
        ...


class RuntimeCapabilityProbe(CapabilityProbe):
    """Probe backed by module availability and the url-open permission flag."""

    def __init__(self, settings: PremiumSettings) -> None:
        self._settings = settings

    @staticmethod
    def _importable(module: str) -> bool:
        return importlib.util.find_spec(module) is not None

    def has_rich_client(self) -> bool:
        return self._importable("httpx")

    def has_socket_client(self) -> bool:
        return self._importable("socket") and self._importable("ssl")

    def allows_url_open(self) -> bool:
        return self._settings.allow_url_open


def select_backend_tier(probe: CapabilityProbe) -> BackendTier | None:
    """First available tier in preference order, or None."""
    if probe.has_rich_client():
        return BackendTier.HTTPX
    if probe.has_socket_client():
        return BackendTier.SOCKET
    if probe.allows_url_open():
        return BackendTier.URLOPEN
    return None
