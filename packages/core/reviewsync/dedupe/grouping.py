"""Grouping of adjacent findings into single platform comments."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from reviewsync.config import GROUPING_DISTANCE
from reviewsync.dedupe.keys import generate_dedupe_key
from reviewsync.models.finding import Finding


@dataclass(frozen=True)
class Cluster:
    """Findings in one file close enough to share a comment, in line order."""

    findings: tuple[Finding, ...]

    @property
    def file(self) -> str:
        return self.findings[0].file

    @property
    def line(self) -> int:
        return self.findings[0].line

    @property
    def keys(self) -> list[str]:
        return [generate_dedupe_key(finding) for finding in self.findings]

    def __len__(self) -> int:
        return len(self.findings)


def group_findings(findings: Iterable[Finding], distance: int = GROUPING_DISTANCE) -> list[Cluster]:
    """
    Cluster findings by file and line proximity.

    A new cluster starts when the file changes or the gap to the previous
    finding exceeds ``distance`` lines.
    """
    ordered = sorted(findings, key=lambda f: (f.file, f.line))
    clusters: list[Cluster] = []
    current: list[Finding] = []

    for finding in ordered:
        if current:
            previous = current[-1]
            if previous.file != finding.file or finding.line - previous.line > distance:
                clusters.append(Cluster(tuple(current)))
                current = []
        current.append(finding)

    if current:
        clusters.append(Cluster(tuple(current)))
    return clusters


def deduplicate_findings(findings: Iterable[Finding]) -> list[Finding]:
    """Drop repeats of the same dedupe key, keeping the first agent's finding."""
    seen: set[str] = set()
    unique: list[Finding] = []
    for finding in findings:
        key = generate_dedupe_key(finding)
        if key in seen:
            continue
        seen.add(key)
        unique.append(finding)
    return unique
