"""
Request encoding and header assembly.

Parameters become an ``application/x-www-form-urlencoded`` body, or a
``multipart/form-data`` body as soon as files are attached. Headers are
assembled in three layers: defaults, caller overrides, then the encoding
headers forced last. Last write wins per (case-insensitive) name.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator, Mapping, Sequence
from pathlib import Path
from urllib.parse import quote_plus, urlsplit

from premium_api.transport.interface import (
    BackendTier,
    EncodedRequest,
    FileAttachment,
    ParamValue,
    RequestSpec,
    Scalar,
)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
ATTACHMENT_FIELD = "Attachments[]"


def build_user_agent(product: str, version: str, tier: BackendTier | None) -> str:
    """Identifying User-Agent: product, library version and backend tier."""
    tier_name = tier.value if tier is not None else "none"
    return f"{product}/{version} ({tier_name})"


def _scalar_text(value: Scalar) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def iter_fields(params: Mapping[str, ParamValue] | None) -> Iterator[tuple[str, str]]:
    """Flatten parameters into ordered (name, text) pairs.

    ``None`` values are skipped; sequences become repeated ``name[]`` pairs.
    """
    for name, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            for item in value:
                yield f"{name}[]", _scalar_text(item)
        else:
            yield name, _scalar_text(value)


def encode_form(params: Mapping[str, ParamValue] | None) -> bytes:
    """URL-form-encode parameters as ``name=value`` pairs joined by ``&``."""
    pairs = (
        f"{quote_plus(name, safe='[]')}={quote_plus(text)}"
        for name, text in iter_fields(params)
    )
    return "&".join(pairs).encode("ascii")


def _quote_header_param(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def encode_multipart(
    params: Mapping[str, ParamValue] | None,
    attachments: Sequence[FileAttachment],
    boundary: str | None = None,
) -> tuple[bytes, str]:
    """Build a multipart body: one part per scalar field, one per file.

    Returns:
        Tuple of (body, content type header value).

    Raises:
        OSError: An attachment could not be read.
    """
    boundary = boundary or f"----PremiumAPI{uuid.uuid4().hex}"
    delimiter = f"--{boundary}\r\n".encode("ascii")
    chunks: list[bytes] = []

    for name, text in iter_fields(params):
        chunks.append(delimiter)
        chunks.append(
            f'Content-Disposition: form-data; name="{_quote_header_param(name)}"\r\n\r\n'.encode("utf-8")
        )
        chunks.append(text.encode("utf-8"))
        chunks.append(b"\r\n")

    for attachment in attachments:
        content = Path(attachment.path).read_bytes()
        chunks.append(delimiter)
        chunks.append(
            (
                f'Content-Disposition: form-data; name="{ATTACHMENT_FIELD}"; '
                f'filename="{_quote_header_param(attachment.filename)}"\r\n'
                f"Content-Type: {attachment.content_type}\r\n\r\n"
            ).encode("utf-8")
        )
        chunks.append(content)
        chunks.append(b"\r\n")

    chunks.append(f"--{boundary}--\r\n".encode("ascii"))
    return b"".join(chunks), f"multipart/form-data; boundary={boundary}"


def merge_headers(*layers: Mapping[str, str] | None) -> dict[str, str]:
    """Overlay header mappings in order; later layers replace earlier names."""
    merged: dict[str, str] = {}
    for layer in layers:
        for name, value in (layer or {}).items():
            for existing in [k for k in merged if k.lower() == name.lower()]:
                del merged[existing]
            merged[name] = str(value)
    return merged


def default_headers(url: str, user_agent: str) -> dict[str, str]:
    parts = urlsplit(url)
    return {
        "Host": parts.netloc,
        "Connection": "close",
        "User-Agent": user_agent,
    }


def encode_request(spec: RequestSpec, user_agent: str) -> EncodedRequest:
    """Turn a RequestSpec into a transport-ready request.

    Raises:
        OSError: An attachment could not be read.
    """
    method = spec.method
    forced: dict[str, str] = {}
    body = b""
    multipart = bool(spec.attachments)

    if multipart:
        body, content_type = encode_multipart(spec.params, spec.attachments)
        forced = {"Content-Type": content_type, "Content-Length": str(len(body))}
    elif method == "POST":
        body = encode_form(spec.params)
        forced = {"Content-Type": FORM_CONTENT_TYPE, "Content-Length": str(len(body))}

    headers = merge_headers(default_headers(spec.url, user_agent), spec.headers, forced)
    return EncodedRequest(
        method=method,
        url=spec.url,
        headers=headers,
        body=body,
        multipart=multipart,
    )
