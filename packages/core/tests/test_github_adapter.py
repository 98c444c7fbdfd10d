"""Tests for the GitHub review comment adapter"""

from unittest.mock import MagicMock

import pytest

from reviewsync.errors import PlatformError
from reviewsync.models.actions import ADOThreadStatus
from reviewsync.platforms.github import PAGE_SIZE, GitHubAdapter, GitHubContext
from reviewsync.sync import sync_review


def _response(status=200, payload=None):
    response = MagicMock()
    response.ok = 200 <= status < 300
    response.status_code = status
    response.content = b"" if payload is None else b"x"
    response.json.return_value = payload
    response.text = "error body"
    return response


@pytest.fixture
def session():
    session = MagicMock()
    session.headers = {}
    return session


@pytest.fixture
def adapter(session):
    context = GitHubContext(owner="acme", repo="api", pr_number=42, head_sha="abc123", token="t0k")
    return GitHubAdapter(context, session=session)


def test_auth_headers(adapter, session):
    assert session.headers["Authorization"] == "Bearer t0k"
    assert session.headers["Accept"] == "application/vnd.github+json"


def test_fetch_follows_pagination(adapter, session):
    first_page = [{"id": i, "body": f"c{i}", "path": "a.py", "line": i} for i in range(PAGE_SIZE)]
    second_page = [{"id": 500, "body": None, "path": "b.py", "line": None, "original_line": 9}]
    session.request.side_effect = [_response(payload=first_page), _response(payload=second_page)]

    comments = adapter.fetch_existing_comments()

    assert len(comments) == PAGE_SIZE + 1
    assert comments[-1].comment_id == 500
    assert comments[-1].body == ""
    assert comments[-1].line == 9
    pages = [c.kwargs["params"]["page"] for c in session.request.call_args_list]
    assert pages == [1, 2]
    method, url = session.request.call_args_list[0].args
    assert method == "GET"
    assert url == "https://api.github.com/repos/acme/api/pulls/42/comments"


def test_fetch_rejects_non_list(adapter, session):
    session.request.return_value = _response(payload={"message": "odd"})

    with pytest.raises(PlatformError):
        adapter.fetch_existing_comments()


def test_post_single_line_comment(adapter, session):
    session.request.return_value = _response(201, {"id": 77})

    comment_id = adapter.post_comment("src/app.py", 10, "body")

    assert comment_id == 77
    payload = session.request.call_args.kwargs["json"]
    assert payload == {
        "body": "body",
        "commit_id": "abc123",
        "path": "src/app.py",
        "line": 10,
        "side": "RIGHT",
    }


def test_post_multi_line_comment(adapter, session):
    session.request.return_value = _response(201, {"id": 78})

    adapter.post_comment("src/app.py", 10, "body", end_line=14)

    payload = session.request.call_args.kwargs["json"]
    assert payload["start_line"] == 10
    assert payload["line"] == 14
    assert payload["start_side"] == "RIGHT"


def test_update_comment_body(adapter, session):
    session.request.return_value = _response(200, {"id": 5})

    adapter.update_comment_body(5, "~~old~~")

    method, url = session.request.call_args.args
    assert method == "PATCH"
    assert url == "https://api.github.com/repos/acme/api/pulls/comments/5"
    assert session.request.call_args.kwargs["json"] == {"body": "~~old~~"}


def test_http_error_raises_platform_error(adapter, session):
    session.request.return_value = _response(422)

    with pytest.raises(PlatformError) as exc_info:
        adapter.post_comment("src/app.py", 10, "body")

    assert exc_info.value.status_code == 422
    assert "create review comment failed" in str(exc_info.value)


@pytest.mark.parametrize("payload", [{}, [], {"id": None}, {"id": "abc"}])
def test_post_without_created_id_raises(adapter, session, payload):
    session.request.return_value = _response(201, payload)

    with pytest.raises(PlatformError) as exc_info:
        adapter.post_comment("src/app.py", 10, "body")

    assert "create review comment failed" in str(exc_info.value)


def test_sync_continues_after_post_without_created_id(adapter, session, make_finding):
    session.request.side_effect = [
        _response(200, []),
        _response(201, {}),
        _response(201, {"id": 7}),
    ]
    findings = [make_finding(line=10), make_finding(line=100, fingerprint="fedcba9876543210")]

    result = sync_review(findings, adapter, sleep=lambda _seconds: None)

    assert result.posting.failed == 1
    assert result.posting.posted_comments == 1
    assert result.has_failures


def test_thread_status_not_supported(adapter):
    with pytest.raises(PlatformError):
        adapter.set_thread_status(1, ADOThreadStatus.CLOSED)
