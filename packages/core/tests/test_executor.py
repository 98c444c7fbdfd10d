"""Tests for applying resolution actions and the recording adapter"""

import pytest

from reviewsync.models.actions import ADOResolve, ADOThreadStatus, GitHubResolve
from reviewsync.models.comments import ExistingComment, Platform
from reviewsync.platforms.executor import apply_resolution_actions
from reviewsync.platforms.recording import RecordedWrite, RecordingAdapter


def test_github_actions_update_bodies(github_adapter, fake_sleep, sleeps):
    actions = [GitHubResolve(1, "~~a~~"), GitHubResolve(2, "~~b~~")]

    report = apply_resolution_actions(actions, github_adapter, delay_seconds=0.1, sleep=fake_sleep)

    assert github_adapter.updated == [(1, "~~a~~"), (2, "~~b~~")]
    assert report.resolved == 2
    assert report.resolved_ids == [1, 2]
    assert sleeps == [0.1, 0.1]


def test_ado_actions_close_threads(ado_adapter, fake_sleep):
    report = apply_resolution_actions([ADOResolve(9)], ado_adapter, sleep=fake_sleep)

    assert ado_adapter.statuses == [(9, ADOThreadStatus.CLOSED)]
    assert report.resolved == 1


def test_failed_action_is_isolated(github_adapter, fake_sleep):
    github_adapter.fail_update_ids = {1}
    actions = [GitHubResolve(1, "~~a~~"), GitHubResolve(2, "~~b~~")]

    report = apply_resolution_actions(actions, github_adapter, sleep=fake_sleep)

    assert report.failed == 1
    assert report.resolved_ids == [2]


def test_unknown_action_rejected(github_adapter):
    with pytest.raises(TypeError):
        apply_resolution_actions([object()], github_adapter, delay_seconds=0)


class TestRecordingAdapter:
    """Test the write-recording adapter used for dry runs"""

    def test_reads_fixed_comments_and_records_writes(self):
        adapter = RecordingAdapter(
            Platform.GITHUB, comments=[ExistingComment(comment_id=41, body="x")]
        )

        assert [c.comment_id for c in adapter.fetch_existing_comments()] == [41]
        assert adapter.post_comment("a.py", 3, "body") == 42
        adapter.update_comment_body(41, "~~x~~")
        adapter.set_thread_status(41, ADOThreadStatus.CLOSED)

        assert adapter.writes == [
            RecordedWrite("post", 42, file="a.py", line=3, body="body"),
            RecordedWrite("update", 41, body="~~x~~"),
            RecordedWrite("set_status", 41, status=ADOThreadStatus.CLOSED),
        ]

    def test_reads_through_wrapped_adapter(self, github_adapter):
        github_adapter.comments = [ExistingComment(comment_id=5, body="x")]
        adapter = RecordingAdapter(Platform.GITHUB, inner=github_adapter)

        assert adapter.fetch_existing_comments() == github_adapter.comments
        adapter.post_comment("a.py", 1, "body")

        assert github_adapter.posted == []
