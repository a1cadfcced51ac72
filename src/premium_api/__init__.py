"""
Client library for the Premium campaign-management API.

Keep package import side-effects to a minimum: import the client from
``premium_api.client``.
"""

__version__ = "1.0.2"

__all__ = [
    "client",
    "config",
    "errors",
    "interpreter",
    "transport",
]
