"""Azure DevOps pull request thread adapter.

Azure DevOps wants thread file paths with a leading slash. That variant is
only ever used in request payloads; dedupe keys keep the canonical
repo-relative path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from reviewsync.errors import PlatformError
from reviewsync.models.actions import ADO_RESOLVED_STATUSES, ADOThreadStatus
from reviewsync.models.comments import ExistingComment, Platform
from reviewsync.models.finding import canonicalize_file_path
from reviewsync.platforms.base import created_id

logger = logging.getLogger(__name__)

ADO_API_URL = "https://dev.azure.com"
API_VERSION = "7.1"
DEFAULT_TIMEOUT_SECONDS = 30

# Thread status as serialized by the REST API.
_STATUS_NAMES = {
    "unknown": ADOThreadStatus.UNKNOWN,
    "active": ADOThreadStatus.ACTIVE,
    "fixed": ADOThreadStatus.FIXED,
    "wontfix": ADOThreadStatus.WONT_FIX,
    "closed": ADOThreadStatus.CLOSED,
    "bydesign": ADOThreadStatus.BY_DESIGN,
    "pending": ADOThreadStatus.PENDING,
}


@dataclass(frozen=True)
class ADOContext:
    """Coordinates of the Azure DevOps pull request being reviewed."""

    organization: str
    project: str
    repository_id: str
    pull_request_id: int
    token: str
    api_url: str = ADO_API_URL


def parse_thread_status(value: object) -> ADOThreadStatus:
    if isinstance(value, int):
        try:
            return ADOThreadStatus(value)
        except ValueError:
            return ADOThreadStatus.UNKNOWN
    if isinstance(value, str):
        return _STATUS_NAMES.get(value.strip().lower(), ADOThreadStatus.UNKNOWN)
    return ADOThreadStatus.UNKNOWN


def to_thread_file_path(file: str) -> str:
    return file if file.startswith("/") else f"/{file}"


class ADOAdapter:
    """Reads and writes pull request threads through the Azure DevOps REST API."""

    platform = Platform.ADO

    def __init__(
        self,
        context: ADOContext,
        session: Optional[requests.Session] = None,
        timeout: int = DEFAULT_TIMEOUT_SECONDS,
        thread_status: ADOThreadStatus = ADOThreadStatus.ACTIVE,
    ):
        self.context = context
        self.timeout = timeout
        self.thread_status = thread_status
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {context.token}",
                "Content-Type": "application/json",
            }
        )

    @property
    def _pr_url(self) -> str:
        ctx = self.context
        return (
            f"{ctx.api_url}/{ctx.organization}/{ctx.project}/_apis/git/repositories/"
            f"{ctx.repository_id}/pullRequests/{ctx.pull_request_id}"
        )

    def _request(self, operation: str, method: str, url: str, **kwargs) -> Any:
        params = dict(kwargs.pop("params", None) or {})
        params["api-version"] = API_VERSION
        response = self.session.request(
            method, url, params=params, timeout=self.timeout, **kwargs
        )
        if not response.ok:
            raise PlatformError(operation, response.text[:500], status_code=response.status_code)
        if not response.content:
            return None
        return response.json()

    def fetch_existing_comments(self) -> list[ExistingComment]:
        """Fetch all threads; each thread's comment text is joined into one body."""
        data = self._request("list threads", "GET", f"{self._pr_url}/threads")
        threads = data.get("value", []) if isinstance(data, dict) else []

        comments: list[ExistingComment] = []
        for thread in threads:
            if not isinstance(thread, dict) or "id" not in thread or thread.get("isDeleted"):
                continue
            contents = [
                comment.get("content") or ""
                for comment in thread.get("comments", [])
                if isinstance(comment, dict) and not comment.get("isDeleted")
            ]
            thread_context = thread.get("threadContext") or {}
            file_path = thread_context.get("filePath")
            line = (thread_context.get("rightFileStart") or {}).get("line")
            comments.append(
                ExistingComment(
                    comment_id=int(thread["id"]),
                    body="\n".join(contents),
                    file=canonicalize_file_path(file_path) if file_path else None,
                    line=line,
                    resolved=parse_thread_status(thread.get("status")) in ADO_RESOLVED_STATUSES,
                )
            )

        logger.debug("Fetched %d existing threads", len(comments))
        return comments

    def post_comment(
        self, file: str, line: int, body: str, end_line: Optional[int] = None
    ) -> int:
        payload = {
            "comments": [{"content": body, "commentType": 1}],
            "status": int(self.thread_status),
            "threadContext": {
                "filePath": to_thread_file_path(file),
                "rightFileStart": {"line": line, "offset": 1},
                "rightFileEnd": {"line": end_line or line, "offset": 1},
            },
        }
        data = self._request("create thread", "POST", f"{self._pr_url}/threads", json=payload)
        return created_id("create thread", data)

    def update_comment_body(self, comment_id: int, body: str) -> None:
        # Threads are resolved by status; their text is never rewritten.
        raise PlatformError(
            "update thread comment", "comment rewrites are not supported on Azure DevOps"
        )

    def set_thread_status(self, thread_id: int, status: ADOThreadStatus) -> None:
        self._request(
            "update thread status",
            "PATCH",
            f"{self._pr_url}/threads/{thread_id}",
            json={"status": int(status)},
        )
