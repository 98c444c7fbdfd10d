"""Tests for grouping, input deduplication and comment formatting."""

from reviewsync.dedupe.formatting import (
    RESOLVED_FOOTER,
    build_resolved_body,
    format_comment_body,
    format_grouped_comment,
    format_inline_comment,
    is_already_resolved,
)
from reviewsync.dedupe.grouping import deduplicate_findings, group_findings
from reviewsync.models.finding import Severity

FP = "0123456789abcdef"
FP_2 = "fedcba9876543210"


class TestGroupFindings:
    """Test clustering of adjacent findings"""

    def test_adjacent_findings_share_cluster(self, make_finding):
        findings = [make_finding(line=10), make_finding(line=13, fingerprint=FP_2)]

        clusters = group_findings(findings)

        assert len(clusters) == 1
        assert [f.line for f in clusters[0].findings] == [10, 13]
        assert clusters[0].file == "src/app.py"
        assert clusters[0].line == 10

    def test_gap_beyond_distance_splits(self, make_finding):
        findings = [make_finding(line=10), make_finding(line=14, fingerprint=FP_2)]

        clusters = group_findings(findings)

        assert [len(c) for c in clusters] == [1, 1]

    def test_chained_findings_form_one_cluster(self, make_finding):
        findings = [make_finding(line=line, fingerprint=f"{line:016x}") for line in (1, 4, 7, 10)]

        assert len(group_findings(findings)) == 1

    def test_files_never_share_cluster(self, make_finding):
        findings = [make_finding(line=10), make_finding(line=10, file="src/b.py")]

        clusters = group_findings(findings)

        assert sorted(c.file for c in clusters) == ["src/app.py", "src/b.py"]

    def test_input_order_does_not_matter(self, make_finding):
        findings = [make_finding(line=12, fingerprint=FP_2), make_finding(line=10)]

        [cluster] = group_findings(findings)

        assert cluster.keys == [f"src/app.py:10:{FP}", f"src/app.py:12:{FP_2}"]

    def test_zero_distance_only_groups_same_line(self, make_finding):
        findings = [
            make_finding(line=10),
            make_finding(line=10, fingerprint=FP_2),
            make_finding(line=11, fingerprint="1" * 16),
        ]

        assert [len(c) for c in group_findings(findings, distance=0)] == [2, 1]


def test_deduplicate_keeps_first_agent(make_finding):
    findings = [
        make_finding(source_agent="security"),
        make_finding(source_agent="style"),
        make_finding(line=11),
    ]

    unique = deduplicate_findings(findings)

    assert [f.source_agent for f in unique] == ["security", "linter"]


class TestFormatting:
    """Test comment body construction"""

    def test_inline_comment(self, make_finding):
        finding = make_finding(
            severity=Severity.ERROR,
            source_agent="security",
            message="SQL injection",
            rule_id="PY-SQL-01",
            suggestion="Use bound parameters",
        )

        body = format_inline_comment(finding)

        assert body.startswith("🔴 **security**: SQL injection")
        assert "*Rule: `PY-SQL-01`*" in body
        assert "💡 **Suggestion**: Use bound parameters" in body
        assert body.endswith(f"<!-- fingerprint:src/app.py:10:{FP} -->")

    def test_grouped_comment_embeds_every_marker(self, make_finding):
        findings = [
            make_finding(line=10, suggestion="Remove it"),
            make_finding(line=12, fingerprint=FP_2, severity=Severity.INFO),
        ]

        body = format_grouped_comment(findings)

        assert body.startswith("**Multiple issues found in this area (2):**")
        assert "🟡 **Line 10** (linter): Unused variable 'x'" in body
        assert "   💡 Remove it" in body
        assert "🔵 **Line 12** (linter)" in body
        assert f"<!-- fingerprint:src/app.py:10:{FP} -->" in body
        assert f"<!-- fingerprint:src/app.py:12:{FP_2} -->" in body

    def test_format_comment_body_picks_layout(self, make_finding):
        single = [make_finding()]
        pair = [make_finding(), make_finding(line=11, fingerprint=FP_2)]

        assert format_comment_body(single) == format_inline_comment(single[0])
        assert format_comment_body(pair) == format_grouped_comment(pair)

    def test_resolved_body(self):
        key = f"src/app.py:10:{FP}"
        body = f"🟡 **linter**: issue <!-- note -->\n\n<!-- fingerprint:{key} -->"

        resolved = build_resolved_body(body, [key])

        assert resolved == (
            f"~~🟡 **linter**: issue~~\n\n{RESOLVED_FOOTER}\n\n<!-- fingerprint:{key} -->"
        )
        assert is_already_resolved(resolved)

    def test_resolved_body_for_marker_only_comment(self):
        key = f"src/app.py:10:{FP}"

        resolved = build_resolved_body(f"<!-- fingerprint:{key} -->", [key])

        assert resolved == f"~~{RESOLVED_FOOTER}~~\n\n<!-- fingerprint:{key} -->"
        assert is_already_resolved(resolved)
        assert build_resolved_body(resolved, [key]).startswith("~~")

    def test_code_fence_strikethrough_is_not_resolved(self):
        body = "Use `a ~~ b` here\n```\nx = ~~y\n```"

        assert not is_already_resolved(body)

    def test_resolved_needs_both_markers(self):
        assert not is_already_resolved("Resolved the thing")
        assert is_already_resolved("~~text~~ Resolved")
