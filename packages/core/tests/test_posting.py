"""Tests for the posting coordinator."""

import requests

from reviewsync.dedupe.grouping import group_findings
from reviewsync.dedupe.posting import PostingCoordinator
from reviewsync.dedupe.state import PostingState
from reviewsync.models.comments import Platform

FP = "0123456789abcdef"
FP_2 = "fedcba9876543210"
FP_3 = "1111111111111111"


def _coordinator(adapter, state=None, **kwargs):
    state = state or PostingState(adapter.platform)
    kwargs.setdefault("sleep", lambda _seconds: None)
    return PostingCoordinator(adapter, state, **kwargs), state


def test_posts_new_cluster_and_records_state(github_adapter, make_finding):
    coordinator, state = _coordinator(github_adapter)
    clusters = group_findings([make_finding(line=10)])

    report = coordinator.post(clusters)

    assert report.posted_comments == 1
    assert report.posted_findings == 1
    assert len(github_adapter.posted) == 1
    posted = github_adapter.posted[0]
    assert (posted["file"], posted["line"]) == ("src/app.py", 10)
    assert state.key_to_comment_id[f"src/app.py:10:{FP}"] == posted["id"]
    assert report.posted_comment_ids == [posted["id"]]


def test_intra_run_regression_is_not_posted_twice(github_adapter, make_finding):
    """A finding drifting within one run must dedupe against the comment just posted."""
    coordinator, _ = _coordinator(github_adapter)
    clusters = group_findings([make_finding(line=10), make_finding(line=15)])
    assert len(clusters) == 2

    report = coordinator.post(clusters)

    assert report.posted_comments == 1
    assert report.skipped_duplicates == 1
    assert [p["line"] for p in github_adapter.posted] == [10]


def test_existing_comment_skips_drifted_finding(github_adapter, make_finding, make_comment):
    state = PostingState.from_existing_comments(
        [make_comment(5, f"src/app.py:10:{FP}")], Platform.GITHUB
    )
    coordinator, _ = _coordinator(github_adapter, state)

    report = coordinator.post(group_findings([make_finding(line=28)]))

    assert report.posted_comments == 0
    assert report.skipped_duplicates == 1
    assert github_adapter.posted == []


def test_cluster_posts_only_active_findings(github_adapter, make_finding, make_comment):
    state = PostingState.from_existing_comments(
        [make_comment(5, f"src/app.py:10:{FP}")], Platform.GITHUB
    )
    coordinator, _ = _coordinator(github_adapter, state)
    clusters = group_findings([make_finding(line=10), make_finding(line=12, fingerprint=FP_2)])

    report = coordinator.post(clusters)

    assert report.posted_findings == 1
    [posted] = github_adapter.posted
    assert posted["line"] == 12
    assert f"src/app.py:12:{FP_2}" in posted["body"]
    assert f"src/app.py:10:{FP}" not in posted["body"]


def test_grouped_cluster_records_every_marker(github_adapter, make_finding):
    coordinator, state = _coordinator(github_adapter)
    clusters = group_findings(
        [make_finding(line=10), make_finding(line=12, fingerprint=FP_2)]
    )

    coordinator.post(clusters)

    [posted] = github_adapter.posted
    assert state.key_to_comment_id == {
        f"src/app.py:10:{FP}": posted["id"],
        f"src/app.py:12:{FP_2}": posted["id"],
    }


def test_failed_post_is_counted_and_not_recorded(github_adapter, make_finding):
    github_adapter.fail_post_lines = {10}
    coordinator, state = _coordinator(github_adapter)
    clusters = group_findings([make_finding(line=10), make_finding(line=50, fingerprint=FP_2)])

    report = coordinator.post(clusters)

    assert report.failed == 1
    assert report.posted_comments == 1
    assert not state.has_key(f"src/app.py:10:{FP}")
    assert state.has_key(f"src/app.py:50:{FP_2}")


def test_network_errors_are_isolated(make_finding):
    class BrokenAdapter:
        platform = Platform.GITHUB

        def post_comment(self, file, line, body, end_line=None):
            raise requests.ConnectionError("connection reset")

    coordinator, _ = _coordinator(BrokenAdapter())

    report = coordinator.post(group_findings([make_finding()]))

    assert report.failed == 1
    assert report.posted_comments == 0


def test_comment_limit_caps_new_comments(github_adapter, make_finding):
    coordinator, _ = _coordinator(github_adapter, max_comments=1)
    clusters = group_findings(
        [make_finding(line=10), make_finding(line=100, fingerprint=FP_2)]
    )

    report = coordinator.post(clusters)

    assert report.posted_comments == 1
    assert report.capped == 1


def test_delay_after_each_write(github_adapter, make_finding, sleeps, fake_sleep):
    github_adapter.fail_post_lines = {100}
    coordinator, _ = _coordinator(github_adapter, delay_seconds=0.1, sleep=fake_sleep)
    clusters = group_findings(
        [
            make_finding(line=10),
            make_finding(line=15),
            make_finding(line=100, fingerprint=FP_2),
            make_finding(line=200, fingerprint=FP_3),
        ]
    )

    coordinator.post(clusters)

    # Two successful posts, one failure, one duplicate skipped without a write
    assert sleeps == [0.1, 0.1, 0.1]


def test_multi_line_finding_passes_end_line(github_adapter, make_finding):
    coordinator, _ = _coordinator(github_adapter)

    coordinator.post(group_findings([make_finding(line=10, end_line=14)]))

    assert github_adapter.posted[0]["end_line"] == 14
