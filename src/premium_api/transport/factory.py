"""
Transport backend factory.
"""

from __future__ import annotations

from premium_api.config import PremiumSettings
from premium_api.shared.logging import get_logger
from premium_api.transport.interface import BackendTier, TransportBackend

logger = get_logger(__name__)


def create_backend(tier: BackendTier, settings: PremiumSettings) -> TransportBackend:
    """Instantiate the backend for a selected tier."""
    logger.info(
        "Transport backend selected",
        extra={
            "tier": tier.value,
            "verify_tls": settings.verify_tls,
            "max_redirects": settings.max_redirects,
        },
    )

    if tier == BackendTier.HTTPX:
        from premium_api.transport.adapters.httpx_backend import HttpxBackend

        return HttpxBackend(settings)

    if tier == BackendTier.SOCKET:
        from premium_api.transport.adapters.socket_backend import SocketBackend

        return SocketBackend(settings)

    if tier == BackendTier.URLOPEN:
        from premium_api.transport.adapters.urlopen_backend import UrlopenBackend

        return UrlopenBackend(settings)

    raise ValueError(f"Unsupported backend tier: {tier}")
