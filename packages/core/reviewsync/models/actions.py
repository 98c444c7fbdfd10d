"""Resolution actions emitted by the stale resolver."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Union


class ADOThreadStatus(IntEnum):
    """Azure DevOps comment thread status codes"""
    UNKNOWN = 0
    ACTIVE = 1
    FIXED = 2
    WONT_FIX = 3
    CLOSED = 4
    BY_DESIGN = 5
    PENDING = 6


# Thread states that mean nobody needs to look at the thread again.
ADO_RESOLVED_STATUSES = frozenset(
    {
        ADOThreadStatus.FIXED,
        ADOThreadStatus.WONT_FIX,
        ADOThreadStatus.CLOSED,
        ADOThreadStatus.BY_DESIGN,
    }
)


@dataclass(frozen=True)
class GitHubResolve:
    """Rewrite a GitHub review comment as struck-through and resolved."""

    comment_id: int
    new_body: str


@dataclass(frozen=True)
class ADOResolve:
    """Close an Azure DevOps thread without touching its text."""

    thread_id: int
    status: ADOThreadStatus = ADOThreadStatus.CLOSED


ResolutionAction = Union[GitHubResolve, ADOResolve]
