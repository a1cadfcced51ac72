"""
Raw HTTP response header parsing.

Backends that do not hand back structured headers produce either one raw
text block (status line, header lines, blank line, body) or an ordered list
of raw header lines. Both are decoded here into a ResponseHeaders mapping
with two synthetic fields, ``Response Code`` and ``Response Status``.

Redirect chains repeat the status line. Each status line starts a new
header block and discards what was collected before it, so only the final
response's headers survive.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

RESPONSE_CODE = "Response Code"
RESPONSE_STATUS = "Response Status"
STATUS_LINE_MARKER = "HTTP/"

_LINE_ENDINGS = re.compile(r"\r\n|\n\r|\r")
# First blank line, in any of the line-ending conventions seen in the wild.
_BLANK_LINE = re.compile(r"\r\n\r\n|\n\r\n\r|\n\n|\r\r")


@dataclass
class ResponseHeaders:
    """Ordered header mapping of the final response in a chain."""

    fields: dict[str, str] = field(default_factory=dict)

    @property
    def status_code(self) -> int | None:
        value = self.fields.get(RESPONSE_CODE, "")
        return int(value) if value.isdigit() else None

    @property
    def status_text(self) -> str:
        return self.fields.get(RESPONSE_STATUS, "")

    @property
    def headers(self) -> dict[str, str]:
        """Real headers only, without the synthetic status fields."""
        return {
            name: value
            for name, value in self.fields.items()
            if name not in (RESPONSE_CODE, RESPONSE_STATUS)
        }

    def get(self, name: str, default: str | None = None) -> str | None:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.fields.items():
            if key.lower() == wanted:
                return value
        return default


def normalize_line_endings(text: str) -> str:
    return _LINE_ENDINGS.sub("\n", text)


def split_header_block(raw: str) -> tuple[str, str] | None:
    """Split a combined block into (header section, body).

    Returns None when no blank-line boundary exists. A body that itself
    starts with a status line belongs to a redirect chain and is folded
    into the header section.
    """
    match = _BLANK_LINE.search(raw)
    if match is None:
        return None

    sections = [raw[: match.start()]]
    body = raw[match.end():]
    while body.startswith(STATUS_LINE_MARKER):
        match = _BLANK_LINE.search(body)
        if match is None:
            break
        sections.append(body[: match.start()])
        body = body[match.end():]

    return "\n".join(normalize_line_endings(s) for s in sections), body


def parse_header_lines(lines: Iterable[str]) -> ResponseHeaders:
    """Parse an ordered list of raw header lines."""
    fields: dict[str, str] = {}
    current: str | None = None

    for raw_line in lines:
        line = raw_line.rstrip("\r\n")
        if not line.strip():
            continue

        if line.startswith(STATUS_LINE_MARKER):
            parts = line.split(" ", 2)
            fields = {
                RESPONSE_CODE: parts[1].strip() if len(parts) > 1 else "",
                RESPONSE_STATUS: parts[2].strip() if len(parts) > 2 else "",
            }
            current = None
            continue

        name, sep, value = line.partition(":")
        if sep:
            current = name.strip()
            fields[current] = value.strip()
        elif current is not None:
            # No colon: continuation of the previous header's value
            fields[current] = f"{fields[current]} {line.strip()}".strip()

    return ResponseHeaders(fields=fields)


def parse_header_block(text: str) -> ResponseHeaders:
    """Parse a header section given as one text block."""
    return parse_header_lines(normalize_line_endings(text).split("\n"))


def parse_raw_response(raw: str) -> tuple[ResponseHeaders, str]:
    """Decode a combined status+headers+body block.

    Without a blank-line boundary the whole text is treated as body and the
    header mapping is empty.
    """
    split = split_header_block(raw)
    if split is None:
        return ResponseHeaders(), raw
    header_section, body = split
    return parse_header_block(header_section), body
