"""Code review platform adapters"""

from reviewsync.platforms.ado import ADOAdapter, ADOContext
from reviewsync.platforms.base import PlatformAdapter
from reviewsync.platforms.executor import ResolutionReport, apply_resolution_actions
from reviewsync.platforms.github import GitHubAdapter, GitHubContext
from reviewsync.platforms.recording import RecordedWrite, RecordingAdapter

__all__ = [
    "ADOAdapter",
    "ADOContext",
    "GitHubAdapter",
    "GitHubContext",
    "PlatformAdapter",
    "RecordedWrite",
    "RecordingAdapter",
    "ResolutionReport",
    "apply_resolution_actions",
]
