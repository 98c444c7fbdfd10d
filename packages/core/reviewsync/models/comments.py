"""Platform comment models shared by the adapters and the dedupe engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Platform(str, Enum):
    """Supported code review platforms"""
    GITHUB = "github"
    ADO = "ado"


@dataclass(frozen=True)
class ExistingComment:
    """A comment (GitHub) or thread (ADO) fetched from the platform."""

    comment_id: int
    body: str
    file: Optional[str] = None
    line: Optional[int] = None
    # Set by the adapter when the platform itself reports the thread as closed.
    resolved: bool = False


@dataclass
class TrackedComment:
    """A posted comment together with the dedupe keys embedded in it.

    ``markers`` only ever grows, when a newly posted finding lands in the
    same comment.
    """

    comment_id: int
    markers: list[str]
    platform: Platform
    body: str = ""
    malformed: bool = False


@dataclass
class PostingReport:
    """Outcome of posting clusters for one run."""

    posted_comments: int = 0
    posted_findings: int = 0
    skipped_duplicates: int = 0
    failed: int = 0
    capped: int = 0
    posted_comment_ids: list[int] = field(default_factory=list)
