"""Shared test fixtures."""

from typing import Optional

import pytest

from reviewsync.errors import PlatformError
from reviewsync.models.actions import ADOThreadStatus
from reviewsync.models.comments import ExistingComment, Platform
from reviewsync.models.finding import Finding, Severity


class FakeAdapter:
    """In-memory platform adapter with switchable write failures."""

    def __init__(self, platform: Platform, comments=()):
        self.platform = platform
        self.comments = list(comments)
        self.posted = []
        self.updated = []
        self.statuses = []
        self.fail_post_lines = set()
        self.fail_update_ids = set()
        self._next_id = 1000

    def fetch_existing_comments(self):
        return list(self.comments)

    def post_comment(self, file: str, line: int, body: str, end_line: Optional[int] = None) -> int:
        if line in self.fail_post_lines:
            raise PlatformError("create review comment", "boom", status_code=502)
        self._next_id += 1
        self.posted.append(
            {"id": self._next_id, "file": file, "line": line, "body": body, "end_line": end_line}
        )
        return self._next_id

    def update_comment_body(self, comment_id: int, body: str) -> None:
        if comment_id in self.fail_update_ids:
            raise PlatformError("update review comment", "boom", status_code=500)
        self.updated.append((comment_id, body))

    def set_thread_status(self, thread_id: int, status: ADOThreadStatus) -> None:
        if thread_id in self.fail_update_ids:
            raise PlatformError("update thread status", "boom", status_code=500)
        self.statuses.append((thread_id, status))


@pytest.fixture
def make_finding():
    """Factory for findings with sensible defaults."""

    def _make(
        line: int = 10,
        fingerprint: str = "0123456789abcdef",
        file: str = "src/app.py",
        severity: Severity = Severity.WARNING,
        message: str = "Unused variable 'x'",
        source_agent: str = "linter",
        **kwargs,
    ) -> Finding:
        return Finding(
            fingerprint=fingerprint,
            file=file,
            line=line,
            severity=severity,
            message=message,
            source_agent=source_agent,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_comment():
    """Factory for fetched platform comments carrying fingerprint markers."""

    def _make(comment_id: int, *keys: str, text: str = "🟡 **linter**: issue", **kwargs):
        markers = "\n".join(f"<!-- fingerprint:{key} -->" for key in keys)
        body = f"{text}\n\n{markers}" if markers else text
        return ExistingComment(comment_id=comment_id, body=body, **kwargs)

    return _make


@pytest.fixture
def github_adapter():
    return FakeAdapter(Platform.GITHUB)


@pytest.fixture
def ado_adapter():
    return FakeAdapter(Platform.ADO)


@pytest.fixture
def sleeps():
    """Collects requested sleep durations instead of sleeping."""
    return []


@pytest.fixture
def fake_sleep(sleeps):
    return sleeps.append
