"""Data models for reviewsync"""

from reviewsync.models.actions import ADOResolve, ADOThreadStatus, GitHubResolve, ResolutionAction
from reviewsync.models.comments import ExistingComment, Platform, PostingReport, TrackedComment
from reviewsync.models.finding import Finding, Severity, generate_fingerprint

__all__ = [
    "ADOResolve",
    "ADOThreadStatus",
    "ExistingComment",
    "Finding",
    "GitHubResolve",
    "Platform",
    "PostingReport",
    "ResolutionAction",
    "Severity",
    "TrackedComment",
    "generate_fingerprint",
]
