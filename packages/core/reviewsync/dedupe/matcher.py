"""Duplicate detection against already-posted comments."""

from __future__ import annotations

from typing import Optional

from reviewsync.config import LINE_PROXIMITY_THRESHOLD
from reviewsync.dedupe.keys import generate_dedupe_key
from reviewsync.dedupe.state import PostingState
from reviewsync.models.finding import Finding


def find_duplicate(
    finding: Finding,
    state: PostingState,
    threshold: int = LINE_PROXIMITY_THRESHOLD,
) -> Optional[str]:
    """Return the posted key this finding duplicates, or None if it is new.

    Exact ``(file, line, fingerprint)`` hits are checked first; otherwise the
    nearest posted key with the same file and fingerprint within ``threshold``
    lines counts as the same logical finding.
    """
    key = generate_dedupe_key(finding)
    if state.has_key(key):
        return key

    return state.proximity_index.query(
        finding.file, finding.line, threshold, fingerprint=finding.fingerprint
    )


def is_duplicate(
    finding: Finding,
    state: PostingState,
    threshold: int = LINE_PROXIMITY_THRESHOLD,
) -> bool:
    return find_duplicate(finding, state, threshold) is not None
