"""Proximity-based deduplication and stale comment resolution."""

from reviewsync.dedupe.grouping import Cluster, deduplicate_findings, group_findings
from reviewsync.dedupe.keys import (
    ParsedDedupeKey,
    build_fingerprint_marker,
    extract_fingerprint_markers,
    generate_dedupe_key,
    parse_dedupe_key,
)
from reviewsync.dedupe.matcher import find_duplicate, is_duplicate
from reviewsync.dedupe.posting import PostingCoordinator
from reviewsync.dedupe.proximity import ProximityIndex
from reviewsync.dedupe.resolution import identify_stale, resolve_comments
from reviewsync.dedupe.state import PostingState

__all__ = [
    "Cluster",
    "ParsedDedupeKey",
    "PostingCoordinator",
    "PostingState",
    "ProximityIndex",
    "build_fingerprint_marker",
    "deduplicate_findings",
    "extract_fingerprint_markers",
    "find_duplicate",
    "generate_dedupe_key",
    "group_findings",
    "identify_stale",
    "is_duplicate",
    "parse_dedupe_key",
    "resolve_comments",
]
