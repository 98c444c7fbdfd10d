"""Inline comment body construction."""

from __future__ import annotations

from typing import Sequence

from reviewsync.dedupe.keys import (
    build_fingerprint_marker,
    generate_dedupe_key,
    strip_html_comments,
)
from reviewsync.models.finding import Finding, Severity

STRIKETHROUGH = "~~"
RESOLVED_LABEL = "Resolved"
RESOLVED_FOOTER = f"✅ **{RESOLVED_LABEL}**: this issue is no longer detected in the latest changes."

_SEVERITY_EMOJI = {
    Severity.ERROR: "🔴",
    Severity.WARNING: "🟡",
    Severity.INFO: "🔵",
}


def severity_emoji(severity: Severity) -> str:
    return _SEVERITY_EMOJI.get(severity, "🔵")


def format_inline_comment(finding: Finding) -> str:
    """Format a single finding as an inline comment body."""
    lines = [f"{severity_emoji(finding.severity)} **{finding.source_agent}**: {finding.message}"]

    if finding.rule_id:
        lines.append(f"\n*Rule: `{finding.rule_id}`*")

    if finding.suggestion:
        lines.append(f"\n💡 **Suggestion**: {finding.suggestion}")

    lines.append(f"\n\n{build_fingerprint_marker(generate_dedupe_key(finding))}")

    return "".join(lines)


def format_grouped_comment(findings: Sequence[Finding]) -> str:
    """Format several nearby findings as one comment, one marker per finding."""
    lines = [f"**Multiple issues found in this area ({len(findings)}):**\n"]

    for finding in findings:
        lines.append(
            f"{severity_emoji(finding.severity)} **Line {finding.line}** "
            f"({finding.source_agent}): {finding.message}"
        )
        if finding.suggestion:
            lines.append(f"   💡 {finding.suggestion}")
        lines.append("")

    for finding in findings:
        lines.append(build_fingerprint_marker(generate_dedupe_key(finding)))

    return "\n".join(lines).strip()


def format_comment_body(findings: Sequence[Finding]) -> str:
    if len(findings) == 1:
        return format_inline_comment(findings[0])
    return format_grouped_comment(findings)


def is_already_resolved(body: str) -> bool:
    """Whether a comment body already carries our resolution rewrite.

    Both the strikethrough delimiter and the literal label must appear, so a
    code fence containing ``~~`` alone does not count.
    """
    return STRIKETHROUGH in body and RESOLVED_LABEL in body


def build_resolved_body(body: str, markers: Sequence[str]) -> str:
    """Strike through a comment's text and re-embed its markers.

    All HTML comments are stripped from the visible text, including any a
    user added by hand.
    """
    text = strip_html_comments(body)
    if text:
        sections = [f"{STRIKETHROUGH}{text}{STRIKETHROUGH}", RESOLVED_FOOTER]
    else:
        # Marker-only bodies still need the delimiter for is_already_resolved.
        sections = [f"{STRIKETHROUGH}{RESOLVED_FOOTER}{STRIKETHROUGH}"]
    if markers:
        sections.append("\n".join(build_fingerprint_marker(marker) for marker in markers))
    return "\n\n".join(sections)
