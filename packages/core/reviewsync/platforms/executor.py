"""Applies resolution actions through a platform adapter."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable

import requests

from reviewsync.config import INLINE_COMMENT_DELAY_MS
from reviewsync.errors import PlatformError
from reviewsync.models.actions import ADOResolve, GitHubResolve, ResolutionAction
from reviewsync.platforms.base import PlatformAdapter

logger = logging.getLogger(__name__)


@dataclass
class ResolutionReport:
    resolved: int = 0
    failed: int = 0
    resolved_ids: list[int] = field(default_factory=list)


def apply_resolution_actions(
    actions: Iterable[ResolutionAction],
    adapter: PlatformAdapter,
    *,
    delay_seconds: float = INLINE_COMMENT_DELAY_MS / 1000.0,
    sleep: Callable[[float], None] = time.sleep,
) -> ResolutionReport:
    """Apply each action in turn; a failed action is logged and skipped."""
    report = ResolutionReport()

    for action in actions:
        if isinstance(action, GitHubResolve):
            target = action.comment_id
        elif isinstance(action, ADOResolve):
            target = action.thread_id
        else:
            raise TypeError(f"Unsupported resolution action: {action!r}")

        try:
            if isinstance(action, GitHubResolve):
                adapter.update_comment_body(action.comment_id, action.new_body)
            else:
                adapter.set_thread_status(action.thread_id, action.status)
        except (PlatformError, requests.RequestException) as exc:
            report.failed += 1
            logger.warning("Failed to resolve comment %s: %s", target, exc)
        else:
            report.resolved += 1
            report.resolved_ids.append(target)
            logger.debug("Resolved comment %s", target)

        if delay_seconds > 0:
            sleep(delay_seconds)

    return report
