"""Adapter that records writes instead of sending them (dry runs and plans)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from reviewsync.models.actions import ADOThreadStatus
from reviewsync.models.comments import ExistingComment, Platform
from reviewsync.platforms.base import PlatformAdapter


@dataclass(frozen=True)
class RecordedWrite:
    operation: str
    target: int
    file: Optional[str] = None
    line: Optional[int] = None
    body: Optional[str] = None
    status: Optional[ADOThreadStatus] = None


class RecordingAdapter:
    """
    Serves reads from a wrapped adapter or a fixed comment list and records
    every write. Posted comments get synthetic ids above the highest id seen.
    """

    def __init__(
        self,
        platform: Platform,
        *,
        inner: Optional[PlatformAdapter] = None,
        comments: Sequence[ExistingComment] = (),
    ):
        self.platform = platform
        self._inner = inner
        self._comments = list(comments)
        self._next_id = 1
        self.writes: list[RecordedWrite] = []

    def fetch_existing_comments(self) -> list[ExistingComment]:
        comments = self._inner.fetch_existing_comments() if self._inner else list(self._comments)
        if comments:
            self._next_id = max(self._next_id, max(c.comment_id for c in comments) + 1)
        return comments

    def post_comment(
        self, file: str, line: int, body: str, end_line: Optional[int] = None
    ) -> int:
        comment_id = self._next_id
        self._next_id += 1
        self.writes.append(RecordedWrite("post", comment_id, file=file, line=line, body=body))
        return comment_id

    def update_comment_body(self, comment_id: int, body: str) -> None:
        self.writes.append(RecordedWrite("update", comment_id, body=body))

    def set_thread_status(self, thread_id: int, status: ADOThreadStatus) -> None:
        self.writes.append(RecordedWrite("set_status", thread_id, status=status))
