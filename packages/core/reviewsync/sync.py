"""One sync run: post new findings, then resolve comments whose findings are gone."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from reviewsync.config import SyncConfig
from reviewsync.dedupe.grouping import Cluster, deduplicate_findings, group_findings
from reviewsync.dedupe.keys import generate_dedupe_key
from reviewsync.dedupe.posting import PostingCoordinator
from reviewsync.dedupe.resolution import identify_stale, resolve_comments
from reviewsync.dedupe.state import PostingState
from reviewsync.models.actions import ResolutionAction
from reviewsync.models.comments import PostingReport
from reviewsync.models.finding import SEVERITY_ORDER, Finding
from reviewsync.platforms.base import PlatformAdapter
from reviewsync.platforms.executor import ResolutionReport, apply_resolution_actions

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Summary of a sync run."""

    platform: str
    findings_total: int = 0
    clusters_total: int = 0
    posting: PostingReport = field(default_factory=PostingReport)
    stale_markers: int = 0
    actions: list[ResolutionAction] = field(default_factory=list)
    resolution: ResolutionReport = field(default_factory=ResolutionReport)

    @property
    def has_failures(self) -> bool:
        return self.posting.failed > 0 or self.resolution.failed > 0

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            "platform": self.platform,
            "findings_total": self.findings_total,
            "clusters_total": self.clusters_total,
            "posted_comments": self.posting.posted_comments,
            "posted_findings": self.posting.posted_findings,
            "skipped_duplicates": self.posting.skipped_duplicates,
            "post_failures": self.posting.failed,
            "over_limit": self.posting.capped,
            "stale_markers": self.stale_markers,
            "resolution_actions": len(self.actions),
            "resolved_comments": self.resolution.resolved,
            "resolution_failures": self.resolution.failed,
        }


def order_clusters(clusters: Iterable[Cluster]) -> list[Cluster]:
    """Most severe clusters first so the comment limit keeps the important ones."""
    return sorted(
        clusters,
        key=lambda cluster: (
            min(SEVERITY_ORDER[finding.severity] for finding in cluster.findings),
            cluster.file,
            cluster.line,
        ),
    )


def sync_review(
    findings: Iterable[Finding],
    adapter: PlatformAdapter,
    config: Optional[SyncConfig] = None,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> SyncResult:
    """
    Reconcile current findings with the comments already on a pull request.

    Args:
        findings: Findings reported by every agent in this run
        adapter: Platform adapter for the pull request
        config: Thresholds and limits (defaults when omitted)
        sleep: Pause function used between platform writes

    Returns:
        SyncResult with posting and resolution counts

    Raises:
        PlatformError: If the existing comments cannot be fetched
    """
    config = config or SyncConfig()
    result = SyncResult(platform=adapter.platform.value)

    state = PostingState.from_existing_comments(
        adapter.fetch_existing_comments(), adapter.platform
    )

    unique = deduplicate_findings(findings)
    clusters = order_clusters(group_findings(unique, config.grouping_distance))
    result.findings_total = len(unique)
    result.clusters_total = len(clusters)

    coordinator = PostingCoordinator(
        adapter,
        state,
        threshold=config.proximity_threshold,
        delay_seconds=config.comment_delay_seconds,
        max_comments=config.max_inline_comments,
        sleep=sleep,
    )
    result.posting = coordinator.post(clusters)

    current_keys = [generate_dedupe_key(finding) for finding in unique]
    stale = identify_stale(current_keys, state.tracked_markers(), config.proximity_threshold)
    result.stale_markers = len(stale)
    result.actions = resolve_comments(stale, state.tracked_comments)
    result.resolution = apply_resolution_actions(
        result.actions,
        adapter,
        delay_seconds=config.comment_delay_seconds,
        sleep=sleep,
    )

    logger.info(
        "Sync complete: %d posted, %d duplicates skipped, %d comments resolved",
        result.posting.posted_comments,
        result.posting.skipped_duplicates,
        result.resolution.resolved,
    )
    return result
