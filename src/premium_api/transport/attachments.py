"""
Attachment list validation.

Runs before any network activity. Validation is all-or-nothing: the first
invalid entry rejects the whole list and nothing is uploaded.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from premium_api.errors import ErrorCode
from premium_api.transport.interface import FileAttachment

# Accepted mapping keys per FileAttachment field.
_FIELD_KEYS: dict[str, tuple[str, ...]] = {
    "path": ("path", "Path"),
    "content_type": ("type", "Type", "content_type"),
    "filename": ("name", "Name", "filename"),
}


@dataclass(frozen=True)
class AttachmentRejection:
    """Why an attachment list was refused."""

    code: ErrorCode
    message: str


def _coerce(candidate: Any) -> FileAttachment | None:
    if isinstance(candidate, FileAttachment):
        values = {
            "path": candidate.path,
            "content_type": candidate.content_type,
            "filename": candidate.filename,
        }
    elif isinstance(candidate, Mapping):
        values = {}
        for field_name, keys in _FIELD_KEYS.items():
            values[field_name] = next(
                (candidate[k] for k in keys if candidate.get(k)), None
            )
    else:
        return None

    if not all(isinstance(v, str) and v for v in values.values()):
        return None
    return FileAttachment(**values)


def is_readable(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.R_OK)


def validate_attachments(
    candidates: Sequence[Any] | None,
) -> list[FileAttachment] | AttachmentRejection:
    """Check every entry is complete and its file is readable.

    Args:
        candidates: FileAttachment objects or mappings with path/type/name.

    Returns:
        The normalized attachment list, or the rejection for the first
        invalid entry. Entries after the invalid one are not inspected.
    """
    if not candidates:
        return []

    if isinstance(candidates, (str, bytes, Mapping)):
        return AttachmentRejection(
            ErrorCode.MALFORMED_ATTACHMENT_LIST,
            "Attachment list must be a sequence of attachments",
        )

    accepted: list[FileAttachment] = []
    for index, candidate in enumerate(candidates):
        attachment = _coerce(candidate)
        if attachment is None:
            return AttachmentRejection(
                ErrorCode.MALFORMED_ATTACHMENT_LIST,
                f"Attachment #{index} must provide path, type and name",
            )
        if not is_readable(attachment.path):
            return AttachmentRejection(
                ErrorCode.ATTACHMENT_FILE_NOT_READABLE,
                f"Attachment file not readable: {attachment.path}",
            )
        accepted.append(attachment)

    return accepted
