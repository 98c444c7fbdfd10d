"""Stale comment detection and resolution.

A comment is resolved if and only if every marker it carries is stale in the
current run. Grouped comments where some findings are still present are left
completely untouched; nothing is struck through while a finding is open.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from reviewsync.config import LINE_PROXIMITY_THRESHOLD
from reviewsync.dedupe.formatting import build_resolved_body, is_already_resolved
from reviewsync.dedupe.keys import parse_dedupe_key
from reviewsync.dedupe.proximity import ProximityIndex
from reviewsync.models.actions import ADOResolve, GitHubResolve, ResolutionAction
from reviewsync.models.comments import Platform, TrackedComment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionDecision:
    """Result of evaluating one tracked comment."""

    comment_id: int
    resolved: bool
    fingerprint_count: int
    stale_count: int
    has_malformed: bool


def identify_stale(
    current_keys: Iterable[str],
    tracked_markers: Iterable[str],
    threshold: int = LINE_PROXIMITY_THRESHOLD,
) -> set[str]:
    """
    Find tracked markers with no counterpart among the current keys.

    A tracked marker is still active when a current key equals it, or when a
    current key with the same file and fingerprint sits within ``threshold``
    lines. Line distance is symmetric, so it does not matter which side the
    search starts from.

    Args:
        current_keys: Dedupe keys of every finding reported in this run
        tracked_markers: Markers carried by previously posted comments
        threshold: Line drift tolerance, inclusive

    Returns:
        Set of stale markers. Markers that fail to parse are never reported.
    """
    current_set: set[str] = set()
    index = ProximityIndex()
    for key in current_keys:
        parsed = parse_dedupe_key(key)
        if parsed is None:
            continue
        current_set.add(key)
        index.add(parsed.file, parsed.line, key)

    stale: set[str] = set()
    for marker in tracked_markers:
        parsed = parse_dedupe_key(marker)
        if parsed is None:
            continue
        if marker in current_set:
            continue
        if index.query(parsed.file, parsed.line, threshold, fingerprint=parsed.fingerprint):
            continue
        stale.add(marker)
    return stale


def should_resolve_comment(markers: Sequence[str], stale_keys: set[str]) -> bool:
    """True only when the comment has markers and all of them are stale and valid."""
    unique = list(dict.fromkeys(markers))
    if not unique:
        return False
    for marker in unique:
        if parse_dedupe_key(marker) is None or marker not in stale_keys:
            return False
    return True


def evaluate_comment_resolution(
    comment: TrackedComment, stale_keys: set[str]
) -> ResolutionDecision:
    unique = list(dict.fromkeys(comment.markers))
    resolved = not comment.malformed and should_resolve_comment(unique, stale_keys)
    return ResolutionDecision(
        comment_id=comment.comment_id,
        resolved=resolved,
        fingerprint_count=len(unique),
        stale_count=sum(1 for marker in unique if marker in stale_keys),
        has_malformed=comment.malformed,
    )


def build_resolution_action(comment: TrackedComment) -> ResolutionAction:
    if comment.platform == Platform.ADO:
        return ADOResolve(thread_id=comment.comment_id)
    return GitHubResolve(
        comment_id=comment.comment_id,
        new_body=build_resolved_body(comment.body, comment.markers),
    )


def resolve_comments(
    stale_keys: set[str],
    tracked_comments: Iterable[TrackedComment],
) -> list[ResolutionAction]:
    """
    Turn stale markers into resolution actions.

    Only comments with at least one stale marker are evaluated, and each of
    those is logged once as a ``comment_resolution`` event. Comments already
    resolved on the platform, and comments with malformed markers, never
    produce an action.
    """
    actions: list[ResolutionAction] = []
    for comment in tracked_comments:
        if is_already_resolved(comment.body):
            continue
        if not any(marker in stale_keys for marker in comment.markers):
            continue

        decision = evaluate_comment_resolution(comment, stale_keys)
        _emit_resolution_log(comment.platform, decision)
        if decision.resolved:
            actions.append(build_resolution_action(comment))

    return actions


def _emit_resolution_log(platform: Platform, decision: ResolutionDecision) -> None:
    # Raw fingerprints stay out of logs.
    logger.info(
        json.dumps(
            {
                "event": "comment_resolution",
                "platform": platform.value,
                "commentId": decision.comment_id,
                "fingerprintCount": decision.fingerprint_count,
                "staleCount": decision.stale_count,
                "resolved": decision.resolved,
            }
        )
    )
