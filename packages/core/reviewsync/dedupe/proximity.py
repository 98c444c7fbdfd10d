"""Per-file registry of posted keys for line-drift matching."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from reviewsync.dedupe.keys import parse_dedupe_key


@dataclass(frozen=True)
class ProximityEntry:
    line: int
    key: str
    fingerprint: Optional[str]


class ProximityIndex:
    """
    Map of file path to the (line, key) pairs posted in that file.

    The index only grows during a run. Lookups scan the file's entries
    linearly, which is fine for PR-sized inputs.
    """

    def __init__(self):
        self._entries: dict[str, list[ProximityEntry]] = {}

    def add(self, file: str, line: int, key: str) -> None:
        parsed = parse_dedupe_key(key)
        fingerprint = parsed.fingerprint if parsed else None
        self._entries.setdefault(file, []).append(ProximityEntry(line, key, fingerprint))

    def query(
        self,
        file: str,
        line: int,
        threshold: int,
        fingerprint: Optional[str] = None,
    ) -> Optional[str]:
        """
        Find the key nearest to ``line`` within ``threshold`` lines.

        Args:
            file: Canonical file path
            line: Line to measure from
            threshold: Maximum distance, inclusive
            fingerprint: When given, only entries carrying this fingerprint match

        Returns:
            Closest key (smallest entry line on ties) or None
        """
        entries = self._entries.get(file)
        if not entries:
            return None

        best: Optional[ProximityEntry] = None
        best_distance = 0
        for entry in entries:
            if fingerprint is not None and entry.fingerprint != fingerprint:
                continue
            distance = abs(line - entry.line)
            if distance > threshold:
                continue
            if (
                best is None
                or distance < best_distance
                or (distance == best_distance and entry.line < best.line)
            ):
                best = entry
                best_distance = distance

        return best.key if best else None
