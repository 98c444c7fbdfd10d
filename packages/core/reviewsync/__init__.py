"""
reviewsync - Deduplicated inline review comments for GitHub and Azure DevOps
"""

from reviewsync.config import SyncConfig
from reviewsync.models.finding import Finding, Severity
from reviewsync.models.findings_input import load_findings, parse_findings
from reviewsync.sync import SyncResult, sync_review

__version__ = "0.1.0"

__all__ = [
    "Finding",
    "Severity",
    "SyncConfig",
    "SyncResult",
    "load_findings",
    "parse_findings",
    "sync_review",
]
