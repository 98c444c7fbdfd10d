"""Run-scoped dedupe state built from the comments already on the platform."""

from __future__ import annotations

import json
import logging
from typing import Iterable, Mapping, Sequence

from reviewsync.dedupe.formatting import is_already_resolved
from reviewsync.dedupe.keys import (
    extract_fingerprint_markers,
    generate_dedupe_key,
    parse_dedupe_key,
)
from reviewsync.dedupe.proximity import ProximityIndex
from reviewsync.models.comments import ExistingComment, Platform, TrackedComment
from reviewsync.models.finding import Finding

logger = logging.getLogger(__name__)


class PostingState:
    """
    Dedupe state for a single sync run.

    Holds the set of posted keys, the proximity index over them and the map
    from key to the comment that carries it. Readers (the duplicate matcher
    and the stale resolver) only query it; ``record_posted`` is reserved for
    the posting coordinator. A fresh instance is built for every run and
    thrown away afterwards.
    """

    def __init__(self, platform: Platform):
        self.platform = platform
        self._existing_keys: set[str] = set()
        self._proximity_index = ProximityIndex()
        self._key_to_comment_id: dict[str, int] = {}
        self._tracked: dict[int, TrackedComment] = {}

    @classmethod
    def from_existing_comments(
        cls, comments: Iterable[ExistingComment], platform: Platform
    ) -> "PostingState":
        """
        Parse embedded markers out of fetched comments.

        Markers that fail to parse are left out of the state and flag their
        comment as malformed so it is never resolved automatically. Comments
        that are already resolved are not tracked at all, so a finding that
        comes back gets a fresh comment.
        """
        state = cls(platform)
        for comment in comments:
            markers = extract_fingerprint_markers(comment.body)
            if not markers:
                continue

            if comment.resolved or is_already_resolved(comment.body):
                logger.debug("Skipping already resolved comment %s", comment.comment_id)
                continue

            valid: list[str] = []
            malformed = False
            for marker in markers:
                parsed = parse_dedupe_key(marker)
                if parsed is None:
                    malformed = True
                    continue
                if marker not in valid:
                    valid.append(marker)

            if malformed:
                logger.warning(
                    json.dumps(
                        {
                            "event": "comment_resolution_warning",
                            "platform": platform.value,
                            "commentId": comment.comment_id,
                            "reason": "malformed_marker",
                        }
                    )
                )
            if not valid:
                continue

            tracked = TrackedComment(
                comment_id=comment.comment_id,
                markers=[],
                platform=platform,
                body=comment.body,
                malformed=malformed,
            )
            state._tracked[comment.comment_id] = tracked
            for key in valid:
                state._add_key(key, comment.comment_id)

        logger.debug(
            "Loaded %d tracked comments with %d markers",
            len(state._tracked),
            len(state._existing_keys),
        )
        return state

    def record_posted(self, comment_id: int, findings: Sequence[Finding], body: str = "") -> None:
        """Register every finding carried by a freshly posted comment."""
        tracked = self._tracked.get(comment_id)
        if tracked is None:
            tracked = TrackedComment(
                comment_id=comment_id, markers=[], platform=self.platform, body=body
            )
            self._tracked[comment_id] = tracked
        for finding in findings:
            self._add_key(generate_dedupe_key(finding), comment_id)

    def _add_key(self, key: str, comment_id: int) -> None:
        parsed = parse_dedupe_key(key)
        if parsed is None:
            return
        self._existing_keys.add(key)
        self._proximity_index.add(parsed.file, parsed.line, key)
        self._key_to_comment_id[key] = comment_id
        tracked = self._tracked.get(comment_id)
        if tracked is not None and key not in tracked.markers:
            tracked.markers.append(key)

    @property
    def existing_keys(self) -> frozenset[str]:
        return frozenset(self._existing_keys)

    @property
    def proximity_index(self) -> ProximityIndex:
        return self._proximity_index

    @property
    def key_to_comment_id(self) -> Mapping[str, int]:
        return dict(self._key_to_comment_id)

    @property
    def tracked_comments(self) -> list[TrackedComment]:
        return list(self._tracked.values())

    def has_key(self, key: str) -> bool:
        return key in self._existing_keys

    def tracked_markers(self) -> list[str]:
        """Markers of every tracked comment, in insertion order."""
        return [key for comment in self._tracked.values() for key in comment.markers]
