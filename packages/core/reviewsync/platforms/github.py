"""GitHub pull request review comment adapter."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from reviewsync.errors import PlatformError
from reviewsync.models.actions import ADOThreadStatus
from reviewsync.models.comments import ExistingComment, Platform
from reviewsync.platforms.base import created_id

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
PAGE_SIZE = 100
DEFAULT_TIMEOUT_SECONDS = 30


@dataclass(frozen=True)
class GitHubContext:
    """Coordinates of the pull request being reviewed."""

    owner: str
    repo: str
    pr_number: int
    head_sha: str
    token: str
    api_url: str = GITHUB_API_URL


class GitHubAdapter:
    """Reads and writes inline review comments through the GitHub REST API."""

    platform = Platform.GITHUB

    def __init__(
        self,
        context: GitHubContext,
        session: Optional[requests.Session] = None,
        timeout: int = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.context = context
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {context.token}",
                "X-GitHub-Api-Version": "2022-11-28",
            }
        )

    @property
    def _repo_url(self) -> str:
        return f"{self.context.api_url}/repos/{self.context.owner}/{self.context.repo}"

    def _request(self, operation: str, method: str, url: str, **kwargs) -> Any:
        response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        if not response.ok:
            raise PlatformError(operation, response.text[:500], status_code=response.status_code)
        if not response.content:
            return None
        return response.json()

    def fetch_existing_comments(self) -> list[ExistingComment]:
        """Fetch every review comment on the pull request, following pagination."""
        comments: list[ExistingComment] = []
        page = 1
        while True:
            data = self._request(
                "list review comments",
                "GET",
                f"{self._repo_url}/pulls/{self.context.pr_number}/comments",
                params={"per_page": PAGE_SIZE, "page": page},
            )
            if not isinstance(data, list):
                raise PlatformError(
                    "list review comments", f"expected a JSON array, got {type(data).__name__}"
                )
            for item in data:
                if not isinstance(item, dict) or "id" not in item:
                    continue
                comments.append(
                    ExistingComment(
                        comment_id=int(item["id"]),
                        body=item.get("body") or "",
                        file=item.get("path"),
                        line=item.get("line") or item.get("original_line"),
                    )
                )
            if len(data) < PAGE_SIZE:
                break
            page += 1

        logger.debug("Fetched %d existing review comments", len(comments))
        return comments

    def post_comment(
        self, file: str, line: int, body: str, end_line: Optional[int] = None
    ) -> int:
        payload: dict[str, Any] = {
            "body": body,
            "commit_id": self.context.head_sha,
            "path": file,
            "line": line,
            # Always comment on the new version of the file
            "side": "RIGHT",
        }
        if end_line and end_line != line:
            payload["start_line"] = line
            payload["start_side"] = "RIGHT"
            payload["line"] = end_line

        data = self._request(
            "create review comment",
            "POST",
            f"{self._repo_url}/pulls/{self.context.pr_number}/comments",
            json=payload,
        )
        return created_id("create review comment", data)

    def update_comment_body(self, comment_id: int, body: str) -> None:
        self._request(
            "update review comment",
            "PATCH",
            f"{self._repo_url}/pulls/comments/{comment_id}",
            json={"body": body},
        )

    def set_thread_status(self, thread_id: int, status: ADOThreadStatus) -> None:
        raise PlatformError("set thread status", "thread status is not supported on GitHub")
