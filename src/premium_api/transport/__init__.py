"""
HTTP transport package.

Keep package import side-effects to a minimum to avoid circular imports.
Do not import factory/adapters here.
"""

__all__ = [
    "interface",
    "capabilities",
    "factory",
    "attachments",
    "encoding",
    "headers",
]
