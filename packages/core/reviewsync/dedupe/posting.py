"""Posting of new comments and the single update path for dedupe state."""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterable, Optional

import requests

from reviewsync.config import INLINE_COMMENT_DELAY_MS, LINE_PROXIMITY_THRESHOLD, MAX_INLINE_COMMENTS
from reviewsync.dedupe.formatting import format_comment_body
from reviewsync.dedupe.grouping import Cluster
from reviewsync.dedupe.matcher import find_duplicate
from reviewsync.dedupe.state import PostingState
from reviewsync.errors import PlatformError
from reviewsync.models.comments import PostingReport
from reviewsync.models.finding import Finding
from reviewsync.platforms.base import PlatformAdapter

logger = logging.getLogger(__name__)


class PostingCoordinator:
    """
    Posts clusters that carry at least one new finding.

    The coordinator is the only writer of the run's ``PostingState``. After
    each successful post every finding in that comment is recorded before the
    next cluster is checked, so clusters posted later in the same run are
    deduplicated against earlier ones.
    """

    def __init__(
        self,
        adapter: PlatformAdapter,
        state: PostingState,
        *,
        threshold: int = LINE_PROXIMITY_THRESHOLD,
        delay_seconds: float = INLINE_COMMENT_DELAY_MS / 1000.0,
        max_comments: Optional[int] = MAX_INLINE_COMMENTS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.adapter = adapter
        self.state = state
        self.threshold = threshold
        self.delay_seconds = delay_seconds
        self.max_comments = max_comments
        self._sleep = sleep

    def active_findings(self, cluster: Cluster) -> list[Finding]:
        """Findings in the cluster with no posted counterpart yet."""
        return [
            finding
            for finding in cluster.findings
            if find_duplicate(finding, self.state, self.threshold) is None
        ]

    def post(self, clusters: Iterable[Cluster]) -> PostingReport:
        report = PostingReport()

        for cluster in clusters:
            active = self.active_findings(cluster)
            if not active:
                report.skipped_duplicates += 1
                logger.debug(
                    "Skipping cluster at %s:%d, all %d findings already posted",
                    cluster.file,
                    cluster.line,
                    len(cluster),
                )
                continue

            if self.max_comments is not None and report.posted_comments >= self.max_comments:
                report.capped += 1
                continue

            anchor = active[0]
            body = format_comment_body(active)
            try:
                comment_id = self.adapter.post_comment(
                    anchor.file, anchor.line, body, end_line=anchor.end_line
                )
            except (PlatformError, requests.RequestException) as exc:
                report.failed += 1
                logger.warning(
                    "Failed to post inline comment on %s:%d: %s", anchor.file, anchor.line, exc
                )
            else:
                self.state.record_posted(comment_id, active, body)
                report.posted_comments += 1
                report.posted_findings += len(active)
                report.posted_comment_ids.append(comment_id)
                logger.debug(
                    "Posted comment %s on %s:%d with %d findings",
                    comment_id,
                    anchor.file,
                    anchor.line,
                    len(active),
                )

            if self.delay_seconds > 0:
                self._sleep(self.delay_seconds)

        logger.info(
            "Posted %d inline comments (skipped %d duplicates, %d failed, %d over limit)",
            report.posted_comments,
            report.skipped_duplicates,
            report.failed,
            report.capped,
        )
        return report
