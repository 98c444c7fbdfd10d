"""Dedupe key encoding and embedded fingerprint markers.

A dedupe key is ``"{file}:{line}:{fingerprint}"``. File paths may contain the
delimiter themselves (``C:/src/app.py``), so parsing always works from the
right: the fingerprint is the last segment, the line the one before it, and
whatever is left is the file.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from reviewsync.models.finding import FINGERPRINT_LENGTH, Finding

KEY_DELIMITER = ":"
MARKER_PREFIX = "fingerprint:"

_FINGERPRINT_RE = re.compile(rf"^[a-f0-9]{{{FINGERPRINT_LENGTH}}}$")
_LINE_RE = re.compile(r"^[1-9][0-9]*$")
_MARKER_RE = re.compile(r"<!--\s*fingerprint:(.*?)\s*-->", re.DOTALL)
_HTML_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)


@dataclass(frozen=True)
class ParsedDedupeKey:
    """Components recovered from a dedupe key."""

    file: str
    line: int
    fingerprint: str


def generate_dedupe_key(finding: Finding) -> str:
    """Encode a finding's identity as a dedupe key."""
    return make_dedupe_key(finding.file, finding.line, finding.fingerprint)


def make_dedupe_key(file: str, line: int, fingerprint: str) -> str:
    return KEY_DELIMITER.join((file, str(line), fingerprint))


def parse_dedupe_key(key: object) -> Optional[ParsedDedupeKey]:
    """Decode a dedupe key, returning None on any structural mismatch."""
    if not isinstance(key, str):
        return None

    parts = key.rsplit(KEY_DELIMITER, 2)
    if len(parts) != 3:
        return None

    file, line_text, fingerprint = parts
    if not file or not _LINE_RE.match(line_text) or not _FINGERPRINT_RE.match(fingerprint):
        return None

    return ParsedDedupeKey(file=file, line=int(line_text), fingerprint=fingerprint)


def build_fingerprint_marker(key: str) -> str:
    """Render the HTML comment that embeds a dedupe key in a comment body."""
    return f"<!-- {MARKER_PREFIX}{key} -->"


def extract_fingerprint_markers(body: Optional[str]) -> list[str]:
    """Return every embedded marker payload in body order.

    Payloads are returned verbatim, valid or not; callers decide what to do
    with keys that fail to parse.
    """
    if not body:
        return []
    return [payload for payload in _MARKER_RE.findall(body) if payload]


def strip_html_comments(body: str) -> str:
    """Remove every HTML comment, including markers added by other tools."""
    return _HTML_COMMENT_RE.sub("", body).strip()
