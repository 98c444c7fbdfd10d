"""Interface every code review platform adapter implements."""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

from reviewsync.errors import PlatformError
from reviewsync.models.actions import ADOThreadStatus
from reviewsync.models.comments import ExistingComment, Platform


@runtime_checkable
class PlatformAdapter(Protocol):
    """Reads and writes inline review comments on one pull request."""

    platform: Platform

    def fetch_existing_comments(self) -> list[ExistingComment]:
        ...

    def post_comment(
        self, file: str, line: int, body: str, end_line: Optional[int] = None
    ) -> int:
        """Post an inline comment and return its platform id."""
        ...

    def update_comment_body(self, comment_id: int, body: str) -> None:
        ...

    def set_thread_status(self, thread_id: int, status: ADOThreadStatus) -> None:
        ...


def created_id(operation: str, data: Any) -> int:
    """Pull the new comment or thread id out of a create response."""
    if not isinstance(data, dict) or "id" not in data:
        raise PlatformError(operation, "response did not include the created id")
    try:
        return int(data["id"])
    except (TypeError, ValueError) as exc:
        raise PlatformError(operation, f"invalid created id {data['id']!r}") from exc
